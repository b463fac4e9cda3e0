"""
Knife Catalog
=============

Provides convenient access to knife variant definitions loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Optional

from catch_the_knife.knife_core.config_loader import (
    GameConfig,
    KnifeConfig,
    KnifeGeometryConfig,
    get_config
)


class KnifeVariant(Enum):
    """Knife variants that can be thrown."""
    DAGGER = "dagger"
    SWORD = "sword"
    SCYTHE = "scythe"


@dataclass
class KnifeType:
    """
    Runtime representation of a knife variant.

    Wraps KnifeConfig with the hit box layout shared by all knives.
    Offsets are relative to the knife center, y-up.
    """
    config: KnifeConfig
    geometry: KnifeGeometryConfig

    @property
    def id(self) -> int:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def variant(self) -> KnifeVariant:
        return KnifeVariant(self.config.name)

    @property
    def mass(self) -> float:
        return self.geometry.mass

    def sprite_size(self, scale: float) -> Tuple[float, float]:
        """Sprite (width, height) at the given scale."""
        return (self.config.base_width * scale, self.config.base_height * scale)

    def handle_size(self, scale: float) -> Tuple[float, float]:
        width, height = self.sprite_size(scale)
        return (width * self.geometry.handle_width, height * self.geometry.handle_height)

    def blade_size(self, scale: float) -> Tuple[float, float]:
        width, height = self.sprite_size(scale)
        return (width * self.geometry.blade_width, height * self.geometry.blade_height)

    def handle_offset(self, scale: float) -> Tuple[float, float]:
        """Handle box center relative to the knife center."""
        _, height = self.sprite_size(scale)
        return (0.0, height * self.geometry.handle_offset_y)

    def blade_offset(self, scale: float) -> Tuple[float, float]:
        """Blade box center relative to the knife center."""
        _, height = self.sprite_size(scale)
        return (0.0, height * self.geometry.blade_offset_y)

    def __repr__(self) -> str:
        return f"KnifeType({self.id}: {self.name})"


class KnifeCatalog:
    """
    Collection of all knife variants.

    Provides indexed access and lookup by name or variant.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._types: Tuple[KnifeType, ...] = tuple(
            KnifeType(knife_config, config.knife_geometry) for knife_config in config.knives
        )
        known = {variant.value for variant in KnifeVariant}
        for knife_type in self._types:
            if knife_type.name not in known:
                raise ValueError(f"Unknown knife variant in config: '{knife_type.name}'")

    def __len__(self) -> int:
        """Total number of knife variants."""
        return len(self._types)

    def __getitem__(self, knife_id: int) -> KnifeType:
        """Get knife type by ID."""
        if 0 <= knife_id < len(self._types):
            return self._types[knife_id]
        raise IndexError(f"Knife ID {knife_id} out of range [0, {len(self._types)})")

    def __iter__(self):
        return iter(self._types)

    @property
    def all_types(self) -> Tuple[KnifeType, ...]:
        """All knife types in config order."""
        return self._types

    def get_by_variant(self, variant: KnifeVariant) -> Optional[KnifeType]:
        for knife_type in self._types:
            if knife_type.variant is variant:
                return knife_type
        return None

    def get_by_name(self, name: str) -> Optional[KnifeType]:
        """Get knife type by name (case-insensitive)."""
        name_lower = name.lower()
        for knife_type in self._types:
            if knife_type.name.lower() == name_lower:
                return knife_type
        return None


# Module-level singleton
_cached_catalog: Optional[KnifeCatalog] = None


def get_catalog(config: Optional[GameConfig] = None) -> KnifeCatalog:
    """
    Get the knife catalog singleton.

    Args:
        config: Optional config to use. If None, uses cached or default config.

    Returns:
        KnifeCatalog instance.
    """
    global _cached_catalog
    if _cached_catalog is None or config is not None:
        _cached_catalog = KnifeCatalog(config)
    return _cached_catalog
