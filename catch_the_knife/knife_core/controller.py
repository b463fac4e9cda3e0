"""
Session Controller
==================

Host-side glue between the gameplay session, the monetization provider and
the overlay: interstitial cadence, ad-backed revive and slow motion, daily
mode and theme selection.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from catch_the_knife.knife_core.collaborators import RewardProvider
from catch_the_knife.knife_core.config_loader import ThemeConfig
from catch_the_knife.knife_core.session import GameplaySession

logger = logging.getLogger(__name__)


class SessionController:
    """
    Routes overlay actions to the session.

    Owns the ad policy: every Nth miss shows an interstitial unless ads are
    removed. Rewarded grants resolve through callbacks; the session is only
    touched once the result is known.
    """

    def __init__(
        self,
        session: GameplaySession,
        rewards: RewardProvider,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            session: Session to drive. Its game-over hook is taken over.
            rewards: Monetization provider.
            clock: Time source for grants that complete later.
        """
        self._session = session
        self._rewards = rewards
        self._clock = clock
        self._interstitial_every = session.config.ads.interstitial_every
        self._themes = session.config.themes
        self._theme_index = 0
        self._interstitials_requested = 0

        session.on_game_over = self._on_game_over

    @property
    def session(self) -> GameplaySession:
        return self._session

    @property
    def show_revive(self) -> bool:
        """True while the revive prompt should be visible."""
        return self._session.awaiting_revive

    @property
    def paused(self) -> bool:
        return self._session.paused

    @property
    def theme_index(self) -> int:
        return self._theme_index

    @property
    def theme(self) -> Optional[ThemeConfig]:
        if not self._themes:
            return None
        return self._themes[self._theme_index]

    @property
    def interstitials_requested(self) -> int:
        return self._interstitials_requested

    def _on_game_over(self, miss_count: int) -> None:
        if self._rewards.ads_removed:
            return
        if miss_count % self._interstitial_every == 0:
            self._interstitials_requested += 1
            logger.info("Showing interstitial after miss #%d", miss_count)
            self._rewards.show_interstitial()

    def toggle_pause(self) -> bool:
        return self._session.toggle_pause()

    def revive(self) -> None:
        """Ask for a rewarded grant and revive when it is granted."""
        if not self._session.awaiting_revive:
            return

        def completion(granted: bool) -> None:
            self._session.request_revive(granted or self._rewards.ads_removed)

        self._rewards.request_rewarded_grant(completion)

    def cancel_revive_and_restart(self) -> None:
        self._session.restart()

    def request_slow_motion(self) -> None:
        """Ask for a rewarded grant and start slow motion when granted."""
        def completion(granted: bool) -> None:
            self._session.request_slow_motion(
                granted or self._rewards.ads_removed, self._clock()
            )

        self._rewards.request_rewarded_grant(completion)

    def set_daily_mode(self, enabled: bool) -> None:
        self._session.set_daily_mode(enabled)

    def request_theme(self, index: int) -> ThemeConfig:
        """
        Select a color theme.

        Raises:
            IndexError: If index is not a configured theme.
        """
        if not 0 <= index < len(self._themes):
            raise IndexError(f"Theme index {index} out of range [0, {len(self._themes)})")
        self._theme_index = index
        return self._themes[index]
