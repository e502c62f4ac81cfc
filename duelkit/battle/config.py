"""
Battle configuration - every tunable the battle layer reads.

Values are validated when the model is built and again at match setup.
Inverted ranges are rejected rather than swapped; the only ranges that
collapse silently are degenerate roll ranges inside the action resolver.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from pydantic import Field, ValidationError, model_validator

from duelcore.core.component import Component
from duelcore.core.errors import ConfigurationError


class StatProfile(Component):
    """
    Base stats and growth factors for one side.

    Attributes:
        base_hp: HP scale factor (HP uses ln(level + 1), rounded down)
        hp_growth: HP growth factor
        base_attack: Attack scale factor (ln(level + 1), rounded up)
        attack_growth: Attack growth factor
        base_speed: Speed at level 1
        speed_growth_per_level: Flat speed added per level above 1
        base_defense: Defense at level 1 (0 means no defense concept)
        defense_growth_per_level: Flat defense added per level above 1
    """
    base_hp: int = Field(default=20, ge=1)
    hp_growth: float = Field(default=2.5, ge=0.0)
    base_attack: int = Field(default=5, ge=1)
    attack_growth: float = Field(default=1.5, ge=0.0)
    base_speed: int = Field(default=10, ge=1)
    speed_growth_per_level: float = Field(default=0.5, ge=0.0)
    base_defense: int = Field(default=0, ge=0)
    defense_growth_per_level: float = Field(default=0.0, ge=0.0)


class BattleConfig(Component):
    """
    Tunables for one match.

    Attributes:
        player: Player stat profile
        enemy: Enemy stat profile
        damage_min_multiplier: Low end of a damage roll, times attack
        damage_max_multiplier: High end of a damage roll, times attack
        crit_chance: Chance (0-1) that a landed hit is critical
        crit_multiplier: Damage multiplier on a critical hit
        heal_min_multiplier: Low end of a heal roll, times healer level
        heal_max_multiplier: High end of a heal roll, times healer level
        minimum_heal_one: Raise a heal roll of 0 to 1
        base_hit_chance: Hit chance between equally fast combatants
        accuracy_speed_factor: Hit chance shift per point of speed difference
        min_hit_chance: Floor for the final hit chance
        max_hit_chance: Ceiling for the final hit chance
        enemy_level_min_offset: Lowest enemy level relative to the player
        enemy_level_max_offset: Highest enemy level relative to the player
        defense_constant: Mitigation curve constant (reference value 100)
        level_up_amount: Levels the player gains on a win
        new_game_level: Player level persisted when a new run starts
    """
    player: StatProfile = Field(default_factory=StatProfile)
    enemy: StatProfile = Field(default_factory=StatProfile)

    # Damage & crits
    damage_min_multiplier: float = Field(default=0.8, ge=0.0)
    damage_max_multiplier: float = Field(default=1.2, ge=0.0)
    crit_chance: float = Field(default=0.1, ge=0.0, le=1.0)
    crit_multiplier: float = Field(default=1.5, ge=1.0)

    # Healing
    heal_min_multiplier: float = Field(default=0.5, ge=0.0)
    heal_max_multiplier: float = Field(default=1.5, ge=0.0)
    minimum_heal_one: bool = False

    # Accuracy
    base_hit_chance: float = Field(default=0.95, ge=0.0, le=1.0)
    accuracy_speed_factor: float = Field(default=0.01, ge=0.0)
    min_hit_chance: float = Field(default=0.05, ge=0.0, le=1.0)
    max_hit_chance: float = Field(default=1.0, ge=0.0, le=1.0)

    # Leveling
    enemy_level_min_offset: int = -1
    enemy_level_max_offset: int = 2
    level_up_amount: int = Field(default=1, ge=0)
    new_game_level: int = Field(default=1, ge=1)

    # Defense
    defense_constant: float = Field(default=100.0, gt=0.0)

    @model_validator(mode='after')
    def _check_ranges(self) -> BattleConfig:
        """Reject inverted bounds."""
        pairs = (
            ("min_hit_chance", "max_hit_chance"),
            ("damage_min_multiplier", "damage_max_multiplier"),
            ("heal_min_multiplier", "heal_max_multiplier"),
            ("enemy_level_min_offset", "enemy_level_max_offset"),
        )
        for low_name, high_name in pairs:
            low = getattr(self, low_name)
            high = getattr(self, high_name)
            if low > high:
                raise ValueError(
                    f"{low_name} ({low}) must not exceed {high_name} ({high})"
                )
        return self

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> BattleConfig:
        """
        Build a config from plain data.

        Raises:
            ConfigurationError: If any value is missing its constraints
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise ConfigurationError(_describe(e)) from e

    def validated(self) -> BattleConfig:
        """
        Re-run every check on a copy of this config.

        Catches models built with model_construct() or mutated nested
        profiles, which skip assignment validation.
        """
        return self.from_mapping(self.model_dump())


def load_battle_config(path: str | Path) -> BattleConfig:
    """
    Load a BattleConfig from a JSON file.

    Raises:
        ConfigurationError: If the file is unreadable, not JSON, or invalid
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read battle config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Battle config {path} must be a JSON object")

    return BattleConfig.from_mapping(data)


def _describe(error: ValidationError) -> str:
    """Flatten a pydantic error into one readable line."""
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "config"
        parts.append(f"{location}: {item['msg']}")
    return "Invalid battle configuration: " + "; ".join(parts)
