"""
Daily Challenge Seed
====================

Deterministic seed derived from the calendar date. Year, month and day are
scaled by large odd multipliers and XOR-ed so adjacent days decorrelate.
"""

from __future__ import annotations

import datetime
from typing import Optional

YEAR_MULTIPLIER = 73856093
MONTH_MULTIPLIER = 19349663
DAY_MULTIPLIER = 83492791


def seed_for_date(date: datetime.date) -> int:
    """Seed for a given calendar date."""
    return (
        (date.year * YEAR_MULTIPLIER)
        ^ (date.month * MONTH_MULTIPLIER)
        ^ (date.day * DAY_MULTIPLIER)
    )


def seed_for_today(today: Optional[datetime.date] = None) -> int:
    """
    Seed for the current local date.

    Args:
        today: Override for the current date. Uses datetime.date.today() if None.
    """
    if today is None:
        today = datetime.date.today()
    return seed_for_date(today)
