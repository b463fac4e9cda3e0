"""
Knife Core - The gameplay state machine.

This module provides the session state machine and all supporting systems
(difficulty, catch evaluation, combo/fever, scoring, falling knife physics).

Main exports:
- GameplaySession: Spawn / tap / tick / revive / restart state machine
- SessionController: Host glue for ads, revive, slow motion and themes
- SessionSnapshot: Read-only per-frame view for presentation
- GameConfig: Configuration loaded from game_config.yaml
"""

from catch_the_knife.knife_core.config_loader import GameConfig, load_config
from catch_the_knife.knife_core.knife_catalog import KnifeVariant, KnifeType, KnifeCatalog
from catch_the_knife.knife_core.difficulty import DifficultyModel, DifficultyParameters
from catch_the_knife.knife_core.catch_evaluator import CatchEvaluator, TapOutcome, TapKind
from catch_the_knife.knife_core.combo_fever import ComboFeverTracker, ComboUpdate
from catch_the_knife.knife_core.rules import FallingObjectSpec, CatchZoneState
from catch_the_knife.knife_core.state_snapshot import SessionSnapshot, SessionState
from catch_the_knife.knife_core.session import GameplaySession
from catch_the_knife.knife_core.controller import SessionController
from catch_the_knife.knife_core.daily import seed_for_date, seed_for_today
from catch_the_knife.knife_core.rng import SeededUniformSource, SequenceUniformSource
from catch_the_knife.knife_core.collaborators import (
    InMemoryBestScoreStore,
    JsonBestScoreStore,
    AlwaysGrantRewards,
    NeverGrantRewards,
    UnavailableRewards,
    DeferredRewards,
    CalendarDailySeed,
    FixedDailySeed,
)

__all__ = [
    "GameConfig",
    "load_config",
    "KnifeVariant",
    "KnifeType",
    "KnifeCatalog",
    "DifficultyModel",
    "DifficultyParameters",
    "CatchEvaluator",
    "TapOutcome",
    "TapKind",
    "ComboFeverTracker",
    "ComboUpdate",
    "FallingObjectSpec",
    "CatchZoneState",
    "SessionSnapshot",
    "SessionState",
    "GameplaySession",
    "SessionController",
    "seed_for_date",
    "seed_for_today",
    "SeededUniformSource",
    "SequenceUniformSource",
    "InMemoryBestScoreStore",
    "JsonBestScoreStore",
    "AlwaysGrantRewards",
    "NeverGrantRewards",
    "UnavailableRewards",
    "DeferredRewards",
    "CalendarDailySeed",
    "FixedDailySeed",
]
