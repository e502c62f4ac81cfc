"""
Battle system - turn-based duel controller.

One player-controlled combatant against one enemy. Each entry point
resolves completely before returning: the player's action, the enemy's
reply and any win/lose consequences, followed by persistence writes.
Nothing here waits on presentation; callers replay the returned events
with their own timing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from duelcore.core.errors import PersistenceError
from duelcore.core.events import Event, EventBus
from duelcore.core.rng import RNG
from duelkit.battle.actions import ActionResolver, ActionType, AttackResult
from duelkit.battle.actor import Combatant, Side
from duelkit.battle.config import BattleConfig
from duelkit.battle.events import BattleEvent, battle_event, hp_snapshot
from duelkit.battle.outcome import MatchOutcomeHandler, MatchResult, PendingWrite
from duelkit.battle.stats import StatScaler
from duelkit.save.manager import ProgressStore

logger = logging.getLogger(__name__)


class BattleState(Enum):
    """Phase of the match."""
    SETUP = auto()
    PLAYER_TURN = auto()
    ENEMY_TURN = auto()
    WON = auto()
    LOST = auto()

    @property
    def is_terminal(self) -> bool:
        """Won and lost have no way out."""
        return self in (BattleState.WON, BattleState.LOST)


class Rejection(Enum):
    """Why an entry point ignored its input."""
    OUT_OF_PHASE = auto()
    MATCH_ENDED = auto()


@dataclass
class MatchState:
    """
    Everything one match owns.

    phase is PLAYER_TURN or ENEMY_TURN only while both combatants have HP.
    """
    phase: BattleState = BattleState.SETUP
    player: Optional[Combatant] = None
    enemy: Optional[Combatant] = None
    turn_count: int = 0

    @property
    def is_over(self) -> bool:
        return self.phase.is_terminal


@dataclass
class ActionOutcome:
    """
    What one entry point did.

    Attributes:
        accepted: False when the input was ignored
        state: The match state after resolution
        events: Ordered events for presentation (empty when rejected)
        rejection: Why the input was ignored, if it was
        result: Final result once the match has ended
    """
    accepted: bool
    state: MatchState
    events: list[Event] = field(default_factory=list)
    rejection: Optional[Rejection] = None
    result: Optional[MatchResult] = None

    @property
    def event_types(self) -> list[BattleEvent]:
        return [event.type for event in self.events]


class BattleSystem:
    """
    Turn-based duel controller.

    Manages:
    - Match setup from persisted levels
    - Opening turn by speed (player wins ties)
    - Player input (attack, heal, defend)
    - Enemy turns
    - Win/lose conditions and their consequences

    Usage:
        battle = BattleSystem(config, store, events=bus, rng=RNG(7))
        battle.setup()
        outcome = battle.choose_attack()
        for event in outcome.events:
            ...
    """

    def __init__(
        self,
        config: BattleConfig,
        store: ProgressStore,
        events: Optional[EventBus] = None,
        rng: Optional[RNG] = None,
        player_name: str = "Player",
        enemy_name: str = "Enemy",
    ):
        self.config = config
        self.store = store
        self.events = events
        self.rng = rng or RNG()
        self.player_name = player_name
        self.enemy_name = enemy_name

        # State
        self._state = MatchState()
        self._result: Optional[MatchResult] = None

        # Writes waiting for the store
        self._pending_writes: list[PendingWrite] = []

        # Set while events are published and writes flushed
        self._resolving = False

        self._resolver: Optional[ActionResolver] = None
        self._outcome_handler: Optional[MatchOutcomeHandler] = None

    # Setup

    def setup(self) -> ActionOutcome:
        """
        Start a match with fresh combatants.

        Also used for a rematch; an unfinished match is abandoned.

        Raises:
            ConfigurationError: If the config is invalid
            PersistenceError: If levels cannot be read (no match is started),
                writes left by the previous match still fail (no match is
                started), or the enemy level cannot be saved (the match is
                started)
        """
        if self._resolving:
            return self._reject(Rejection.OUT_OF_PHASE, "SETUP")

        # A rematch must read the level the last match earned
        self._flush_writes()

        config = self.config.validated()
        player_level = self.store.get_player_level()

        if self._state.phase in (BattleState.PLAYER_TURN, BattleState.ENEMY_TURN):
            logger.info("Abandoning unfinished match for a new setup")

        self.config = config
        self._resolver = ActionResolver(config, self.rng)
        self._outcome_handler = MatchOutcomeHandler(self.store, config.level_up_amount)
        self._result = None

        enemy_level = self._calculate_enemy_level(player_level)
        player = Combatant.spawn(
            self.player_name,
            Side.PLAYER,
            StatScaler(config.player),
            player_level,
            defense_constant=config.defense_constant,
        )
        enemy = Combatant.spawn(
            self.enemy_name,
            Side.ENEMY,
            StatScaler(config.enemy),
            enemy_level,
            defense_constant=config.defense_constant,
        )
        self._state = MatchState(phase=BattleState.SETUP, player=player, enemy=enemy)

        logger.info(
            "Setup complete. Player Lvl: %d, Enemy Lvl: %d",
            player.level, enemy.level,
        )

        events = [battle_event(
            BattleEvent.MATCH_STARTED,
            player_level=player.level,
            enemy_level=enemy.level,
            player_hp=player.current_hp,
            enemy_hp=enemy.current_hp,
        )]

        # Saved up front so an abandoned match still reports its enemy
        self._pending_writes.append((
            "enemy level",
            lambda: self.store.set_enemy_level(enemy_level),
        ))

        if player.speed >= enemy.speed:
            logger.info("Player has higher or equal speed. Starting Player Turn.")
            self._begin_player_turn(events)
        else:
            logger.info("Enemy has higher speed. Starting Enemy Turn.")
            self._run_enemy_turn(events)

        return self._complete(events)

    def _calculate_enemy_level(self, player_level: int) -> int:
        offset = self.rng.randint(
            self.config.enemy_level_min_offset,
            self.config.enemy_level_max_offset,
        )
        return max(1, player_level + offset)

    # Player input

    def choose_attack(self) -> ActionOutcome:
        """Attack the enemy."""
        return self.submit(ActionType.ATTACK)

    def choose_heal(self) -> ActionOutcome:
        """Heal; free re-prompt at full health."""
        return self.submit(ActionType.HEAL)

    def choose_defend(self) -> ActionOutcome:
        """Defend against the enemy's next attack."""
        return self.submit(ActionType.DEFEND)

    def submit(self, action_type: ActionType) -> ActionOutcome:
        """
        Resolve the player's chosen action.

        Input outside the player's turn, including input sent by an event
        handler while this battle is still publishing, is ignored and
        reported as rejected, never raised.

        Raises:
            PersistenceError: If a write fails after resolution; the
                outcome is attached and the match stays playable
        """
        phase = self._state.phase
        if phase.is_terminal:
            return self._reject(Rejection.MATCH_ENDED, action_type.name)
        if self._resolving or phase != BattleState.PLAYER_TURN:
            return self._reject(Rejection.OUT_OF_PHASE, action_type.name)

        events: list[Event] = []

        if action_type == ActionType.ATTACK:
            self._player_attack(events)
        elif action_type == ActionType.HEAL:
            self._player_heal(events)
        elif action_type == ActionType.DEFEND:
            self._player_defend(events)

        return self._complete(events)

    def _player_attack(self, events: list[Event]) -> None:
        player, enemy = self._state.player, self._state.enemy
        result = self._resolver.execute_attack(player, enemy)
        self._record_attack(player, enemy, result, events)

        if result.defeated:
            self._finish(won=True, events=events)
        else:
            self._run_enemy_turn(events)

    def _player_heal(self, events: list[Event]) -> None:
        player = self._state.player
        result = self._resolver.execute_heal(player)

        if result.refused:
            # No turn consumed: still the player's turn
            events.append(battle_event(
                BattleEvent.HEAL_REFUSED, side=Side.PLAYER, **hp_snapshot(player)
            ))
            return

        events.append(battle_event(
            BattleEvent.HEALED,
            side=Side.PLAYER,
            amount=result.healed,
            **hp_snapshot(player),
        ))
        self._run_enemy_turn(events)

    def _player_defend(self, events: list[Event]) -> None:
        player = self._state.player
        self._resolver.execute_defend(player)
        events.append(battle_event(
            BattleEvent.DEFENDED, side=Side.PLAYER, defense=player.defense
        ))
        self._run_enemy_turn(events)

    # Turn flow

    def _begin_player_turn(self, events: list[Event]) -> None:
        state = self._state
        state.phase = BattleState.PLAYER_TURN
        state.turn_count += 1
        state.player.start_turn()  # a defend stance lapses here
        events.append(battle_event(
            BattleEvent.TURN_CHANGED, side=Side.PLAYER, turn=state.turn_count
        ))

    def _run_enemy_turn(self, events: list[Event]) -> None:
        """Enemy turn needs no input: it attacks at once."""
        state = self._state
        state.phase = BattleState.ENEMY_TURN
        state.turn_count += 1
        state.enemy.start_turn()
        events.append(battle_event(
            BattleEvent.TURN_CHANGED, side=Side.ENEMY, turn=state.turn_count
        ))

        result = self._resolver.execute_attack(state.enemy, state.player)
        self._record_attack(state.enemy, state.player, result, events)

        if result.defeated:
            self._finish(won=False, events=events)
        else:
            self._begin_player_turn(events)

    def _record_attack(
        self,
        attacker: Combatant,
        defender: Combatant,
        result: AttackResult,
        events: list[Event],
    ) -> None:
        if not result.hit:
            events.append(battle_event(
                BattleEvent.MISSED,
                side=attacker.side,
                target=defender.side,
                chance=result.hit_chance,
            ))
            return

        if result.was_crit:
            events.append(battle_event(
                BattleEvent.CRITICAL_HIT, side=attacker.side, target=defender.side
            ))

        events.append(battle_event(
            BattleEvent.HIT_LANDED,
            side=attacker.side,
            target=defender.side,
            amount=result.damage,
            raw_amount=result.raw_damage,
            was_crit=result.was_crit,
            mitigated=result.mitigated,
            **hp_snapshot(defender),
        ))

        if result.defeated:
            events.append(battle_event(BattleEvent.DEFEATED, side=defender.side))

    def _finish(self, won: bool, events: list[Event]) -> None:
        state = self._state
        state.phase = BattleState.WON if won else BattleState.LOST

        result, end_events, writes = self._outcome_handler.resolve(
            state.player, state.enemy, won=won, turns=state.turn_count,
        )
        self._result = result
        events.extend(end_events)
        self._pending_writes.extend(writes)

        logger.info("Match %s after %d turns", result.result, state.turn_count)

    # Completion

    def _complete(self, events: list[Event]) -> ActionOutcome:
        outcome = ActionOutcome(
            accepted=True,
            state=self._state,
            events=events,
            result=self._result,
        )

        # Handlers that call back in are rejected until publishing is done
        self._resolving = True
        try:
            if self.events:
                self.events.publish_all(events)
            self._flush_writes(outcome)
        finally:
            self._resolving = False
        return outcome

    def _reject(self, rejection: Rejection, action: str) -> ActionOutcome:
        logger.warning(
            "Ignoring %s during %s (%s)",
            action, self._state.phase.name, rejection.name,
        )
        return ActionOutcome(
            accepted=False,
            state=self._state,
            rejection=rejection,
            result=self._result,
        )

    def _flush_writes(self, outcome: Optional[ActionOutcome] = None) -> None:
        while self._pending_writes:
            description, write = self._pending_writes[0]
            try:
                write()
            except PersistenceError as e:
                logger.error("Could not persist %s: %s", description, e)
                raise PersistenceError(
                    f"Could not persist {description}: {e}", outcome=outcome
                ) from e
            self._pending_writes.pop(0)

    def retry_persistence(self) -> None:
        """
        Flush writes that failed earlier.

        Raises:
            PersistenceError: If the store is still failing
        """
        if self._resolving:
            logger.warning("Ignoring persistence retry while the match is resolving")
            return
        self._flush_writes()

    # Properties

    @property
    def state(self) -> MatchState:
        """Get the match state."""
        return self._state

    @property
    def phase(self) -> BattleState:
        """Get the current phase."""
        return self._state.phase

    @property
    def player(self) -> Optional[Combatant]:
        return self._state.player

    @property
    def enemy(self) -> Optional[Combatant]:
        return self._state.enemy

    @property
    def result(self) -> Optional[MatchResult]:
        """Final result once the match has ended."""
        return self._result

    @property
    def is_active(self) -> bool:
        """Check if a match is being played."""
        return self._state.phase in (BattleState.PLAYER_TURN, BattleState.ENEMY_TURN)

    @property
    def is_over(self) -> bool:
        return self._state.is_over

    @property
    def is_resolving(self) -> bool:
        """Check if events are still being published or writes flushed."""
        return self._resolving

    @property
    def has_pending_writes(self) -> bool:
        """Check if some progress still has to reach the store."""
        return bool(self._pending_writes)
