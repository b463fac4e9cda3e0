"""
Tests for the gameplay session state machine.
"""

import pytest

from catch_the_knife.knife_core.collaborators import FixedDailySeed, InMemoryBestScoreStore
from catch_the_knife.knife_core.config_loader import load_config
from catch_the_knife.knife_core.rng import SequenceUniformSource
from catch_the_knife.knife_core.session import GameplaySession
from catch_the_knife.knife_core.state_snapshot import SessionState


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def store():
    return InMemoryBestScoreStore()


@pytest.fixture
def session(config, store):
    return GameplaySession(
        config=config,
        rng=SequenceUniformSource([0.5]),
        best_score_store=store,
        daily_seed=FixedDailySeed(0)
    )


def zone_center(session):
    zone = session.catch_zone_rect
    return ((zone.left + zone.right) / 2, (zone.bottom + zone.top) / 2)


def align_handle(session, dx=0.0):
    """Put the knife so its handle sits on the zone center (shifted by dx)."""
    knife = session.world.knife
    cx, cy = zone_center(session)
    session.sync_knife_position(cx + dx, cy - knife.handle_offset.y)
    return (cx, cy)


def perfect_catch(session, now):
    return session.on_tap(align_handle(session), now)


def regular_catch(session, now):
    return session.on_tap(align_handle(session, dx=40.0), now)


def miss(session, now):
    """Tap at the zone while the fresh knife is still at the top."""
    return session.on_tap(zone_center(session), now)


class TestInitialState:
    
    def test_starts_playing(self, session):
        """A new session is playing with a knife in flight."""
        assert session.state is SessionState.PLAYING
        assert session.score == 0
        assert session.level == 1
        assert session.combo_count == 0
        assert not session.fever_active
        assert session.falling_object is not None
        assert session.world.knife is not None
    
    def test_loads_best_score(self, config):
        """Best score comes from the store."""
        session = GameplaySession(config=config, best_score_store=InMemoryBestScoreStore(42))
        assert session.best_score == 42
    
    def test_initial_zone_uses_level_one(self, session):
        assert session.catch_zone.width_factor == pytest.approx(0.97)


class TestTaps:
    """Test catch / miss / ignored handling."""
    
    def test_perfect_catch_scores(self, session):
        """A perfect catch scores 1 and builds the combo."""
        outcome = perfect_catch(session, 0.0)
        assert outcome.is_catch and outcome.perfect
        assert session.score == 1
        assert session.combo_count == 1
    
    def test_regular_catch_resets_combo(self, session):
        """A regular catch scores and resets the combo."""
        perfect_catch(session, 0.0)
        outcome = regular_catch(session, 1.0)
        assert outcome.is_catch and not outcome.perfect
        assert session.score == 2
        assert session.combo_count == 0
    
    def test_catch_spawns_new_knife(self, session):
        """Every catch spawns a fresh knife at the top."""
        uid = session.world.knife.uid
        perfect_catch(session, 0.0)
        assert session.world.knife.uid == uid + 1
        assert session.world.knife.position[1] == pytest.approx(924.0)
    
    def test_far_tap_changes_nothing(self, session):
        """A tap far from the zone changes nothing."""
        align_handle(session)
        outcome = session.on_tap((195.0, 700.0), 0.0)
        assert outcome.is_ignored
        assert session.score == 0
        assert session.state is SessionState.PLAYING
    
    def test_level_invariant_holds(self, session):
        """Level always equals 1 + score // 5."""
        pattern = [True, False, True, True, True, False, True, True, True, True, False, True]
        now = 0.0
        for perfect in pattern * 2:
            if perfect:
                perfect_catch(session, now)
            else:
                regular_catch(session, now)
            assert session.level == 1 + session.score // 5
            now += 0.5
    
    def test_zone_shrinks_with_level(self, session):
        """Catch zone narrows when the level rises."""
        for i in range(5):
            regular_catch(session, float(i))
        assert session.level == 2
        assert session.catch_zone.width_factor == pytest.approx(0.94)
    
    def test_spawn_speed_tracks_level(self, session):
        """New knives fall faster at higher levels."""
        for i in range(10):
            regular_catch(session, float(i))
        assert session.level == 3
        assert session.falling_object.fall_speed == pytest.approx(2.75)


class TestFeverScenario:
    """Three perfect catches in a row."""
    
    def test_triggering_catch_not_doubled(self, session):
        """The catch that starts fever is not doubled."""
        for i in range(3):
            perfect_catch(session, float(i))
        assert session.combo_count == 3
        assert session.fever_active
        assert session.score == 3
        perfect_catch(session, 3.0)
        assert session.score == 5
        regular_catch(session, 4.0)
        assert session.score == 7
    
    def test_fever_expires_on_tick(self, session):
        """Fever clears on the first tick at its expiry."""
        for i in range(3):
            perfect_catch(session, float(i))
        assert session.fever_expiry_time == pytest.approx(7.0)
        session.tick(6.9)
        assert session.fever_active
        session.tick(7.0)
        assert not session.fever_active
        assert session.fever_expiry_time is None
    
    def test_expired_fever_not_applied_to_late_tap(self, session):
        """A tap after expiry scores normally."""
        for i in range(3):
            perfect_catch(session, float(i))
        regular_catch(session, 20.0)
        assert session.score == 4


class TestMissAndRevive:
    """Test the miss transition, revive and restart."""
    
    def test_miss_scenario(self, session, store):
        """Miss at 12 records best 12, restart keeps it."""
        for i in range(12):
            regular_catch(session, float(i))
        assert session.score == 12
        outcome = miss(session, 20.0)
        assert outcome.is_miss
        assert session.state is SessionState.AWAITING_REVIVE
        assert session.best_score == 12
        assert store.load_best_score() == 12
        assert session.score == 12
        session.restart()
        assert session.score == 0
        assert session.best_score == 12
    
    def test_miss_clears_combo_and_fever(self, session):
        """A miss ends fever and clears the combo."""
        for i in range(3):
            perfect_catch(session, float(i))
        miss(session, 3.0)
        assert session.combo_count == 0
        assert not session.fever_active
    
    def test_best_saved_only_when_beaten(self, config):
        """Store is written only for a new best."""
        store = InMemoryBestScoreStore(10)
        session = GameplaySession(config=config, rng=SequenceUniformSource([0.5]), best_score_store=store)
        regular_catch(session, 0.0)
        miss(session, 1.0)
        assert store.saves == 0
        assert session.best_score == 10
    
    def test_game_over_callback(self, config):
        """Game-over hook receives the running miss count."""
        seen = []
        session = GameplaySession(config=config, rng=SequenceUniformSource([0.5]), on_game_over=seen.append)
        miss(session, 0.0)
        session.restart()
        miss(session, 1.0)
        assert seen == [1, 2]
        assert session.miss_count == 2
    
    def test_taps_ignored_while_awaiting_revive(self, session):
        """Taps are ignored while waiting for a revive."""
        miss(session, 0.0)
        outcome = perfect_catch(session, 1.0)
        assert outcome.is_ignored
        assert session.score == 0
    
    def test_declined_revive_keeps_waiting(self, session):
        miss(session, 0.0)
        assert not session.request_revive(False)
        assert session.state is SessionState.AWAITING_REVIVE
    
    def test_granted_revive_preserves_progress(self, session):
        """Revive keeps score and level, clears combo and fever."""
        for i in range(6):
            regular_catch(session, float(i))
        miss(session, 10.0)
        uid = session.world.knife.uid
        assert session.request_revive(True)
        assert session.state is SessionState.PLAYING
        assert session.score == 6
        assert session.level == 2
        assert session.combo_count == 0
        assert not session.fever_active
        assert session.world.knife.uid == uid + 1
    
    def test_revive_only_from_awaiting(self, session):
        assert not session.request_revive(True)
        assert session.state is SessionState.PLAYING
    
    def test_restart_from_every_state(self, session):
        """Restart works from playing, paused and awaiting revive."""
        for i in range(3):
            perfect_catch(session, float(i))
        session.restart()
        assert (session.score, session.level, session.combo_count, session.fever_active) == (0, 1, 0, False)
        assert session.state is SessionState.PLAYING
        
        session.toggle_pause()
        session.restart()
        assert session.state is SessionState.PLAYING
        
        miss(session, 5.0)
        session.restart()
        assert session.state is SessionState.PLAYING
        assert session.miss_count == 1


class TestTick:
    """Test frame updates."""
    
    def test_fall_through_is_miss(self, session):
        """A knife falling off screen is a miss."""
        now = 0.0
        session.tick(now)
        for _ in range(200):
            now += 1 / 30
            session.tick(now)
            if session.awaiting_revive:
                break
        assert session.state is SessionState.AWAITING_REVIVE
        assert session.miss_count == 1
    
    def test_no_motion_while_awaiting_revive(self, session):
        """Nothing moves while waiting for a revive."""
        miss(session, 0.0)
        y = session.world.knife.position[1]
        session.tick(0.0)
        session.tick(0.05)
        assert session.world.knife.position[1] == y
        assert session.miss_count == 1
    
    def test_tap_applied_before_fall_check(self, session):
        """A tap and a fall-through in the same frame produce one miss."""
        session.tick(0.0)
        session.sync_knife_position(195.0, -200.0)
        outcomes = session.advance_frame(0.01, taps=[zone_center(session)])
        assert outcomes[0].is_miss
        assert session.miss_count == 1
    
    def test_catch_in_frame_beats_fall(self, session):
        """A catch in the same frame prevents the fall miss."""
        session.tick(0.0)
        center = align_handle(session)
        outcomes = session.advance_frame(0.01, taps=[center])
        assert outcomes[0].is_catch
        assert session.state is SessionState.PLAYING


class TestPause:
    
    def test_pause_freezes(self, session):
        """Paused sessions neither move nor accept taps."""
        session.tick(0.0)
        assert session.toggle_pause()
        y = session.world.knife.position[1]
        session.tick(0.05)
        assert session.world.knife.position[1] == y
        assert session.on_tap(align_handle(session), 0.06).is_ignored
        assert session.score == 0
        assert not session.toggle_pause()
        assert session.state is SessionState.PLAYING
    
    def test_timers_expire_while_paused(self, session):
        """Fever and slow motion end on time even when paused."""
        for i in range(3):
            perfect_catch(session, float(i))
        session.activate_slow_motion(0.0)
        session.tick(2.0)
        assert session.toggle_pause()
        y = session.world.knife.position[1]
        session.tick(10.0)
        assert not session.slow_motion_active
        assert not session.fever_active
        assert session.paused
        assert session.world.knife.position[1] == y
    
    def test_pause_noop_while_awaiting_revive(self, session):
        miss(session, 0.0)
        assert not session.toggle_pause()
        assert session.state is SessionState.AWAITING_REVIVE


class TestSlowMotion:
    
    def test_expires_after_six_seconds(self, session):
        """Slow motion ends six seconds after activation."""
        session.activate_slow_motion(0.0)
        session.tick(5.9)
        assert session.slow_motion_active
        session.tick(6.0)
        assert not session.slow_motion_active
    
    def test_halves_spawn_speed(self, session):
        """Knives spawned in slow motion fall at half speed."""
        normal = session.falling_object.fall_speed
        session.request_slow_motion(True, 0.0)
        spec = session.spawn_next()
        assert spec.fall_speed == pytest.approx(normal * 0.5)
    
    def test_declined_does_nothing(self, session):
        assert not session.request_slow_motion(False, 0.0)
        assert not session.slow_motion_active


class TestDailyMode:
    
    def test_overrides_level_factor(self, session):
        """Daily factor replaces the level factor until turned off."""
        session.set_daily_mode(True)
        assert session.daily_mode
        assert session.catch_zone.width_factor == pytest.approx(0.80)
        for i in range(10):
            regular_catch(session, float(i))
        assert session.catch_zone.width_factor == pytest.approx(0.80)
        session.set_daily_mode(False)
        assert session.catch_zone.width_factor == pytest.approx(0.91)


class TestSnapshot:
    
    def test_snapshot_fields(self, session):
        """Snapshot mirrors the session."""
        perfect_catch(session, 0.0)
        snap = session.snapshot()
        assert snap.score == 1
        assert snap.level == 1
        assert snap.state is SessionState.PLAYING
        assert not snap.game_over
        assert snap.falling_object == session.falling_object
        assert snap.knife_position == pytest.approx(session.world.knife.position)
    
    def test_obs_dict(self, session):
        """Observation arrays use fixed codes and dtypes."""
        miss(session, 0.0)
        obs = session.snapshot().to_obs_dict()
        assert int(obs["state"]) == 1
        assert int(obs["miss_count"]) == 1
        assert obs["catch_zone"].shape == (4,)
        assert obs["knife_xy"].dtype.name == "float32"
        assert bool(obs["knife_mask"])
    
    def test_render_data(self, session):
        data = session.get_render_data()
        assert data["state"] == "playing"
        assert len(data["catch_zone"]) == 4
        assert data["knife"]["variant"] == "sword"
