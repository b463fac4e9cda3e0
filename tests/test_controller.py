"""
Tests for the session controller: ad cadence, rewarded revive and slow motion,
daily mode and themes.
"""

import pytest

from catch_the_knife.knife_core.collaborators import (
    AlwaysGrantRewards,
    DeferredRewards,
    FixedDailySeed,
    NeverGrantRewards,
    UnavailableRewards,
)
from catch_the_knife.knife_core.config_loader import load_config
from catch_the_knife.knife_core.controller import SessionController
from catch_the_knife.knife_core.rng import SequenceUniformSource
from catch_the_knife.knife_core.session import GameplaySession
from catch_the_knife.knife_core.state_snapshot import SessionState


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def session(config):
    return GameplaySession(
        config=config,
        rng=SequenceUniformSource([0.5]),
        daily_seed=FixedDailySeed(4)
    )


def force_miss(session, now=0.0):
    zone = session.catch_zone_rect
    session.on_tap(((zone.left + zone.right) / 2, (zone.bottom + zone.top) / 2), now)
    assert session.awaiting_revive


class TestInterstitials:
    
    def test_every_third_miss(self, session):
        """An interstitial shows on every third miss."""
        rewards = AlwaysGrantRewards()
        controller = SessionController(session, rewards)
        for i in range(7):
            force_miss(session, float(i))
            controller.cancel_revive_and_restart()
        assert controller.interstitials_requested == 2
        assert rewards.interstitials_shown == 2
    
    def test_none_when_ads_removed(self, session):
        """No interstitials once ads are removed."""
        rewards = AlwaysGrantRewards(ads_removed=True)
        controller = SessionController(session, rewards)
        for i in range(6):
            force_miss(session, float(i))
            controller.cancel_revive_and_restart()
        assert controller.interstitials_requested == 0
        assert rewards.interstitials_shown == 0
    
    def test_purchase_mid_session(self, session):
        """Removing ads mid-session stops later interstitials."""
        rewards = NeverGrantRewards()
        controller = SessionController(session, rewards)
        for i in range(3):
            force_miss(session, float(i))
            controller.cancel_revive_and_restart()
        rewards.remove_ads()
        for i in range(3):
            force_miss(session, float(i))
            controller.cancel_revive_and_restart()
        assert controller.interstitials_requested == 1


class TestRevive:
    
    def test_granted(self, session):
        """Granted revive resumes play."""
        controller = SessionController(session, AlwaysGrantRewards())
        force_miss(session)
        assert controller.show_revive
        controller.revive()
        assert session.state is SessionState.PLAYING
        assert not controller.show_revive
    
    def test_declined(self, session):
        """Declined revive keeps waiting."""
        controller = SessionController(session, NeverGrantRewards())
        force_miss(session)
        controller.revive()
        assert session.state is SessionState.AWAITING_REVIVE
    
    def test_unavailable_is_decline(self, session):
        """No ad available behaves like a decline."""
        rewards = UnavailableRewards()
        controller = SessionController(session, rewards)
        force_miss(session)
        controller.revive()
        assert rewards.grant_requests == 1
        assert session.awaiting_revive
    
    def test_ads_removed_always_revives(self, session):
        """With ads removed, revive always succeeds."""
        controller = SessionController(session, NeverGrantRewards(ads_removed=True))
        force_miss(session)
        controller.revive()
        assert session.state is SessionState.PLAYING
    
    def test_deferred_grant(self, session):
        """A deferred grant revives when resolved."""
        rewards = DeferredRewards()
        controller = SessionController(session, rewards)
        force_miss(session)
        controller.revive()
        assert rewards.pending == 1
        assert session.awaiting_revive
        assert rewards.resolve_next(True)
        assert session.state is SessionState.PLAYING
        assert not rewards.resolve_next(True)
    
    def test_late_grant_after_restart_is_noop(self, session):
        """A grant that lands after restart does nothing."""
        rewards = DeferredRewards()
        controller = SessionController(session, rewards)
        force_miss(session)
        controller.revive()
        controller.cancel_revive_and_restart()
        rewards.resolve_next(True)
        assert session.state is SessionState.PLAYING
        assert session.score == 0
    
    def test_revive_ignored_while_playing(self, session):
        """Revive while playing does not request an ad."""
        rewards = AlwaysGrantRewards()
        controller = SessionController(session, rewards)
        controller.revive()
        assert rewards.grant_requests == 0


class TestSlowMotion:
    
    def test_uses_clock_at_completion(self, session):
        """Slow motion starts at the clock time of the grant."""
        clock_time = [10.0]
        rewards = DeferredRewards()
        controller = SessionController(session, rewards, clock=lambda: clock_time[0])
        controller.request_slow_motion()
        assert not session.slow_motion_active
        clock_time[0] = 12.0
        rewards.resolve_next(True)
        assert session.slow_motion_active
        assert session.slow_motion_expiry_time == pytest.approx(18.0)
    
    def test_declined(self, session):
        """Declined slow motion leaves speed unchanged."""
        controller = SessionController(session, NeverGrantRewards(), clock=lambda: 0.0)
        controller.request_slow_motion()
        assert not session.slow_motion_active


class TestOverlay:
    
    def test_pause(self, session):
        """Pause toggles through the controller."""
        controller = SessionController(session, AlwaysGrantRewards())
        assert controller.toggle_pause()
        assert controller.paused
        assert not controller.toggle_pause()
    
    def test_daily_mode(self, session):
        controller = SessionController(session, AlwaysGrantRewards())
        controller.set_daily_mode(True)
        # 4 % 3 == 1
        assert session.catch_zone.width_factor == pytest.approx(0.9)
    
    def test_themes(self, session, config):
        """Themes are selectable and bounds-checked."""
        controller = SessionController(session, AlwaysGrantRewards())
        assert controller.theme_index == 0
        assert controller.theme.name == "Neon"
        theme = controller.request_theme(2)
        assert theme.name == "Ocean"
        assert controller.theme is theme
        with pytest.raises(IndexError):
            controller.request_theme(len(config.themes))
        assert controller.theme_index == 2
