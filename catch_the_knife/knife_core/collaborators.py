"""
Host Collaborators
==================

Interfaces the session uses to reach the outside world, with the
implementations the game and the tests plug in:

- Persistence: best score load/save
- Monetization: rewarded grants and interstitials
- Daily seed: date-derived seed for daily mode

Declines and unavailable ads are ordinary outcomes (granted=False), and
persistence failures never reach the session.
"""

from __future__ import annotations

import datetime
import json
import logging
import os
from collections import deque
from pathlib import Path
from typing import Callable, Deque, Optional, Protocol, Union

from catch_the_knife.knife_core.daily import seed_for_today

logger = logging.getLogger(__name__)

GrantCallback = Callable[[bool], None]


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

class BestScoreStore(Protocol):
    def load_best_score(self) -> int:
        ...

    def save_best_score(self, score: int) -> None:
        ...


class InMemoryBestScoreStore:
    """Keeps the best score for the lifetime of the process."""

    def __init__(self, best_score: int = 0):
        self._best = max(0, int(best_score))
        self.saves = 0

    def load_best_score(self) -> int:
        return self._best

    def save_best_score(self, score: int) -> None:
        self._best = max(0, int(score))
        self.saves += 1


class JsonBestScoreStore:
    """
    Best score in a small JSON file: {"best": <int>}.

    Unreadable or malformed files load as 0; failed writes are logged and
    dropped.
    """

    def __init__(self, path: Union[str, os.PathLike]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load_best_score(self) -> int:
        if not self._path.exists():
            return 0
        try:
            with open(self._path, "r") as f:
                data = json.load(f)
            return max(0, int(data.get("best", 0)))
        except (OSError, ValueError, TypeError, AttributeError, OverflowError) as e:
            logger.warning("Could not read best score from %s: %s", self._path, e)
            return 0

    def save_best_score(self, score: int) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w") as f:
                json.dump({"best": int(score)}, f)
        except OSError as e:
            logger.warning("Could not save best score to %s: %s", self._path, e)


# ---------------------------------------------------------------------------
# Monetization
# ---------------------------------------------------------------------------

class RewardProvider(Protocol):
    """
    Rewarded grants and interstitials.

    request_rewarded_grant may call completion synchronously (ads removed,
    no ad available) or later (ad shown).
    """

    @property
    def ads_removed(self) -> bool:
        ...

    def request_rewarded_grant(self, completion: GrantCallback) -> None:
        ...

    def show_interstitial(self) -> None:
        ...


class _CountingRewards:
    """Shared bookkeeping for the simple providers."""

    def __init__(self, ads_removed: bool = False):
        self._ads_removed = ads_removed
        self.grant_requests = 0
        self.interstitials_shown = 0

    @property
    def ads_removed(self) -> bool:
        return self._ads_removed

    def remove_ads(self) -> None:
        """Record the remove-ads purchase."""
        self._ads_removed = True

    def show_interstitial(self) -> None:
        if self._ads_removed:
            return
        self.interstitials_shown += 1


class AlwaysGrantRewards(_CountingRewards):
    """Grants every request synchronously."""

    def request_rewarded_grant(self, completion: GrantCallback) -> None:
        self.grant_requests += 1
        completion(True)


class NeverGrantRewards(_CountingRewards):
    """Declines every request unless ads were removed."""

    def request_rewarded_grant(self, completion: GrantCallback) -> None:
        self.grant_requests += 1
        completion(self._ads_removed)


class UnavailableRewards(_CountingRewards):
    """No ad inventory: behaves like a decline unless ads were removed."""

    def request_rewarded_grant(self, completion: GrantCallback) -> None:
        self.grant_requests += 1
        if self._ads_removed:
            completion(True)
            return
        logger.debug("Rewarded ad not available")
        completion(False)


class DeferredRewards(_CountingRewards):
    """
    Queues completions until the host resolves them.

    Models an ad that finishes some frames after it was requested.
    """

    def __init__(self, ads_removed: bool = False):
        super().__init__(ads_removed)
        self._pending: Deque[GrantCallback] = deque()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_rewarded_grant(self, completion: GrantCallback) -> None:
        self.grant_requests += 1
        if self._ads_removed:
            completion(True)
            return
        self._pending.append(completion)

    def resolve_next(self, granted: bool) -> bool:
        """
        Complete the oldest pending request.

        Returns:
            False if nothing was pending.
        """
        if not self._pending:
            return False
        completion = self._pending.popleft()
        completion(granted)
        return True


# ---------------------------------------------------------------------------
# Daily seed
# ---------------------------------------------------------------------------

class DailySeedProvider(Protocol):
    def seed_for_today(self) -> int:
        ...


class CalendarDailySeed:
    """Seed from the local calendar date."""

    def __init__(self, today: Optional[Callable[[], datetime.date]] = None):
        self._today = today if today is not None else datetime.date.today

    def seed_for_today(self) -> int:
        return seed_for_today(self._today())


class FixedDailySeed:
    def __init__(self, seed: int):
        self._seed = seed

    def seed_for_today(self) -> int:
        return self._seed
