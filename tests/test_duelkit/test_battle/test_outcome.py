from duelkit.battle.actor import Combatant, Side
from duelkit.battle.config import StatProfile
from duelkit.battle.events import BattleEvent
from duelkit.battle.outcome import MatchOutcomeHandler
from duelkit.battle.stats import StatScaler
from duelkit.save.manager import MemoryProgressStore


def make_pair(player_level=3):
    scaler = StatScaler(StatProfile())
    player = Combatant.spawn("Hero", Side.PLAYER, scaler, player_level)
    enemy = Combatant.spawn("Slime", Side.ENEMY, scaler, 2)
    return player, enemy


def run(writes):
    for _, write in writes:
        write()


def test_win_levels_up_and_defers_writes():
    store = MemoryProgressStore()
    handler = MatchOutcomeHandler(store, level_up_amount=2)
    player, enemy = make_pair(3)

    result, events, writes = handler.resolve(player, enemy, won=True, turns=5)

    assert player.level == 5
    assert result.won
    assert result.previous_player_level == 3
    assert result.levels_gained == 2
    assert result.turns == 5
    assert [e.type for e in events] == [BattleEvent.LEVELED_UP, BattleEvent.MATCH_ENDED]
    assert events[0]["previous_level"] == 3
    assert events[0]["level"] == 5
    assert [d for d, _ in writes] == ["player level", "best level"]
    assert store.snapshot() == {}

    run(writes)

    assert store.get_player_level() == 5
    assert store.get_best_level() == 5


def test_loss_only_offers_best_level():
    store = MemoryProgressStore({"player_level": 3, "best_level": 1})
    handler = MatchOutcomeHandler(store)
    player, enemy = make_pair(3)

    result, events, writes = handler.resolve(player, enemy, won=False, turns=4)

    assert player.level == 3
    assert result.result == "lost"
    assert [e.type for e in events] == [BattleEvent.MATCH_ENDED]
    assert [d for d, _ in writes] == ["best level"]

    run(writes)
    assert store.get_player_level() == 3
    assert store.get_best_level() == 3


def test_best_level_never_lowered():
    store = MemoryProgressStore({"best_level": 10})
    handler = MatchOutcomeHandler(store)
    player, enemy = make_pair(3)

    _, _, writes = handler.resolve(player, enemy, won=True, turns=2)
    run(writes)

    assert store.get_player_level() == 4
    assert store.get_best_level() == 10


def test_zero_level_up_amount():
    store = MemoryProgressStore()
    handler = MatchOutcomeHandler(store, level_up_amount=0)
    player, enemy = make_pair(3)

    result, events, writes = handler.resolve(player, enemy, won=True, turns=2)
    run(writes)

    assert result.levels_gained == 0
    assert [e.type for e in events] == [BattleEvent.MATCH_ENDED]
    assert store.get_player_level() == 3
