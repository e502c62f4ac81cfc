"""
Match outcome - win/lose consequences.

A win levels the player up and records the new level (and best level when
beaten). A loss only offers the current level as a best-level candidate;
resetting the run is a separate, explicit operation on the progress store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from duelcore.core.events import Event
from duelkit.battle.actor import Combatant, Side
from duelkit.battle.events import BattleEvent, battle_event, hp_snapshot
from duelkit.save.manager import ProgressStore

logger = logging.getLogger(__name__)

# (description, write) pairs, flushed after the in-memory state is final
PendingWrite = tuple[str, Callable[[], None]]


@dataclass(frozen=True)
class MatchResult:
    """Final state of a finished match."""
    won: bool
    player_level: int
    previous_player_level: int
    enemy_level: int
    player_hp: int
    player_max_hp: int
    enemy_hp: int
    turns: int

    @property
    def result(self) -> str:
        """'won' or 'lost'."""
        return "won" if self.won else "lost"

    @property
    def levels_gained(self) -> int:
        return self.player_level - self.previous_player_level


class MatchOutcomeHandler:
    """
    Applies the consequences of a finished match.

    Usage:
        handler = MatchOutcomeHandler(store, level_up_amount=1)
        result, events, writes = handler.resolve(player, enemy, won=True, turns=7)
        for description, write in writes:
            write()
    """

    def __init__(self, store: ProgressStore, level_up_amount: int = 1):
        self.store = store
        self.level_up_amount = level_up_amount

    def resolve(
        self,
        player: Combatant,
        enemy: Combatant,
        won: bool,
        turns: int,
    ) -> tuple[MatchResult, list[Event], list[PendingWrite]]:
        """
        Apply win/lose consequences in memory.

        Returns:
            The match result, the events to emit (level-up, match end) and
            the persistence writes still to perform
        """
        events: list[Event] = []
        writes: list[PendingWrite] = []
        previous_level = player.level

        if won:
            if self.level_up_amount > 0:
                player.level_up(self.level_up_amount)
                events.append(battle_event(
                    BattleEvent.LEVELED_UP,
                    side=Side.PLAYER,
                    level=player.level,
                    previous_level=previous_level,
                    **hp_snapshot(player),
                ))
                logger.info(
                    "Player won! Leveled up from %d to %d",
                    previous_level, player.level,
                )

            new_level = player.level
            writes.append((
                "player level",
                lambda: self.store.set_player_level(new_level),
            ))

        writes.append(("best level", self._best_level_write(player.level)))

        result = MatchResult(
            won=won,
            player_level=player.level,
            previous_player_level=previous_level,
            enemy_level=enemy.level,
            player_hp=player.current_hp,
            player_max_hp=player.max_hp,
            enemy_hp=enemy.current_hp,
            turns=turns,
        )
        events.append(battle_event(
            BattleEvent.MATCH_ENDED,
            result=result.result,
            level=result.player_level,
            turns=turns,
        ))
        return result, events, writes

    def _best_level_write(self, level: int) -> Callable[[], None]:
        def write() -> None:
            if level > self.store.get_best_level():
                self.store.set_best_level(level)
                logger.info("New best level saved: %d", level)
        return write
