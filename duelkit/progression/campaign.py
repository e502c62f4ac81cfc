"""
Campaign - the flow between matches.

A run climbs one level per win. Losing and then retrying or quitting starts
the run over; quitting after a win keeps it for a later continue.
"""

from __future__ import annotations

import logging
from typing import Optional

from duelcore.core.errors import DuelError
from duelcore.core.events import EventBus
from duelcore.core.rng import RNG
from duelkit.battle.config import BattleConfig
from duelkit.battle.outcome import MatchResult
from duelkit.battle.system import ActionOutcome, BattleState, BattleSystem
from duelkit.save.manager import ProgressStore

logger = logging.getLogger(__name__)


class CampaignError(DuelError):
    """Raised when a campaign step does not fit the current match."""


class MatchInProgressError(CampaignError):
    """Raised when a new match is requested while one is still being played."""


class Campaign:
    """
    Runs matches back to back against one progress store.

    Usage:
        campaign = Campaign(config, JsonProgressStore("saves/progress.json"))
        if not campaign.can_continue:
            campaign.new_game()
        campaign.start_match()
        campaign.battle.choose_attack()
        ...
        if campaign.battle.phase == BattleState.WON:
            campaign.next_battle()
        else:
            campaign.retry()
    """

    def __init__(
        self,
        config: BattleConfig,
        store: ProgressStore,
        event_bus: Optional[EventBus] = None,
        rng: Optional[RNG] = None,
        player_name: str = "Player",
        enemy_name: str = "Enemy",
    ):
        self.config = config
        self.store = store
        self.event_bus = event_bus
        self.rng = rng or RNG()
        self.player_name = player_name
        self.enemy_name = enemy_name

        self.battle: Optional[BattleSystem] = None
        self.results: list[MatchResult] = []
        self.matches_played: int = 0

    # Run control

    @property
    def can_continue(self) -> bool:
        """Check if there is a saved run to continue."""
        return self.store.can_continue

    @property
    def best_level(self) -> int:
        return self.store.get_best_level()

    def new_game(self) -> None:
        """Start a fresh run at the configured level."""
        self._require_idle()
        self._close_current()
        self.store.start_new_game(self.config.new_game_level)
        logger.info("New game at level %d", self.config.new_game_level)

    def start_match(self) -> ActionOutcome:
        """Set up a match at the saved level."""
        self._require_idle()
        self._close_current()

        self.battle = BattleSystem(
            self.config,
            self.store,
            events=self.event_bus,
            rng=self.rng,
            player_name=self.player_name,
            enemy_name=self.enemy_name,
        )
        self.matches_played += 1
        return self.battle.setup()

    def next_battle(self) -> ActionOutcome:
        """Fight the next enemy after a win."""
        self._require_phase(BattleState.WON, "next battle")
        return self.start_match()

    def retry(self) -> ActionOutcome:
        """Start the run over after a loss."""
        self._require_phase(BattleState.LOST, "retry")
        self._close_current()
        self.store.reset_progress()
        return self.start_match()

    def abandon(self) -> None:
        """Give up the run: progress is reset, best level kept."""
        self._close_current()
        self.store.reset_progress()
        logger.info("Run abandoned")

    def quit(self) -> None:
        """
        Leave the current match.

        Progress is kept, unless the match was lost: quitting a lost run
        resets it like abandon() does.
        """
        lost = self.battle is not None and self.battle.phase == BattleState.LOST
        self._close_current()
        if lost:
            self.store.reset_progress()
            logger.info("Quit after a loss, progress reset")

    # Tally

    @property
    def wins(self) -> int:
        return sum(1 for r in self._all_results() if r.won)

    @property
    def losses(self) -> int:
        return sum(1 for r in self._all_results() if not r.won)

    def _all_results(self) -> list[MatchResult]:
        if self.battle is not None and self.battle.result is not None:
            return self.results + [self.battle.result]
        return self.results

    # Internals

    def _require_idle(self) -> None:
        if self.battle is not None and self.battle.is_active:
            raise MatchInProgressError("A match is still being played")

    def _require_phase(self, phase: BattleState, step: str) -> None:
        self._require_idle()
        if self.battle is None or self.battle.phase != phase:
            current = self.battle.phase.name if self.battle else "no match"
            raise CampaignError(f"Cannot {step} after {current}")

    def _close_current(self) -> None:
        """
        Tally the finished match and drop it.

        Raises:
            MatchInProgressError: If the match is still publishing its events
            PersistenceError: If writes the match left queued still fail;
                the match is kept so the step can be retried
        """
        if self.battle is None:
            return
        if self.battle.is_resolving:
            raise MatchInProgressError("The match is still resolving")
        if self.battle.has_pending_writes:
            self.battle.retry_persistence()
        if self.battle.result is not None:
            self.results.append(self.battle.result)
        self.battle = None
