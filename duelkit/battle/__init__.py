"""
Battle module - one-on-one turn-based combat.

Provides:
- Stat scaling by level
- Combatants (player, enemy)
- Action resolution (hit chance, damage, crits, heals, defense)
- Turn scheduling and win/lose conditions
- Level-up and progress consequences
"""

from duelkit.battle.config import (
    BattleConfig,
    StatProfile,
    load_battle_config,
)
from duelkit.battle.stats import StatScaler, compute_stats
from duelkit.battle.actor import Combatant, Side
from duelkit.battle.actions import (
    ActionResolver,
    ActionType,
    AttackResult,
    DamageRoll,
    HealResult,
)
from duelkit.battle.events import BattleEvent
from duelkit.battle.outcome import MatchOutcomeHandler, MatchResult
from duelkit.battle.system import (
    BattleSystem,
    BattleState,
    MatchState,
    ActionOutcome,
    Rejection,
)

__all__ = [
    # Config
    "BattleConfig",
    "StatProfile",
    "load_battle_config",
    # Stats
    "StatScaler",
    "compute_stats",
    # Actor
    "Combatant",
    "Side",
    # Actions
    "ActionResolver",
    "ActionType",
    "AttackResult",
    "DamageRoll",
    "HealResult",
    # Events
    "BattleEvent",
    # Outcome
    "MatchOutcomeHandler",
    "MatchResult",
    # System
    "BattleSystem",
    "BattleState",
    "MatchState",
    "ActionOutcome",
    "Rejection",
]
