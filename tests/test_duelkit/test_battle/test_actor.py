import pytest

from duelcore.core.rng import RNG
from duelkit.battle.actor import Combatant, Side
from duelkit.battle.config import StatProfile
from duelkit.battle.stats import StatScaler


def make_actor(level=5, side=Side.PLAYER, **profile):
    return Combatant.spawn("Hero", side, StatScaler(StatProfile(**profile)), level)


def test_spawn_at_full_health():
    actor = make_actor(5)

    assert actor.level == 5
    assert actor.max_hp == 89
    assert actor.current_hp == 89
    assert actor.is_alive
    assert actor.is_player_controlled
    assert not actor.is_defending


def test_spawn_clamps_level():
    actor = make_actor(0)
    assert actor.level == 1


def test_side_opponent():
    assert Side.PLAYER.opponent is Side.ENEMY
    assert Side.ENEMY.opponent is Side.PLAYER
    assert not make_actor(side=Side.ENEMY).is_player_controlled


def test_level_up_heals_exactly_the_increase():
    actor = make_actor(5)
    actor.take_damage(30)
    assert actor.current_hp == 59

    healed = actor.level_up()

    # floor(20 * ln 7 * 2.5) = 97
    assert actor.level == 6
    assert actor.max_hp == 97
    assert healed == 8
    assert actor.current_hp == 67


def test_level_up_several_levels():
    actor = make_actor(5)
    actor.level_up(5)

    # floor(20 * ln 11 * 2.5) = 119
    assert actor.level == 10
    assert actor.max_hp == 119
    assert actor.current_hp == 119


@pytest.mark.parametrize("levels", [0, -2])
def test_level_up_ignores_non_positive(levels):
    actor = make_actor(5)
    actor.take_damage(10)

    assert actor.level_up(levels) == 0
    assert actor.level == 5
    assert actor.current_hp == 79


def test_defend_mitigates_hit():
    actor = make_actor(5, base_defense=50)
    actor.start_defending()

    # round(20 * 100 / 150) = 13
    assert actor.mitigate_damage(20) == 13
    actor.take_damage(20)

    assert actor.current_hp == 76
    # The stance survives the hit; it ends when the actor's turn starts
    assert actor.is_defending
    actor.start_turn()
    assert not actor.is_defending


def test_no_mitigation_without_defend():
    actor = make_actor(5, base_defense=50)
    actor.take_damage(20)
    assert actor.current_hp == 69


def test_mitigated_damage_at_least_one():
    actor = make_actor(5, base_defense=100000)
    actor.start_defending()

    assert actor.mitigate_damage(1) == 1
    assert actor.mitigate_damage(50) == 1
    assert actor.mitigate_damage(0) == 0


def test_zero_defense_defend_changes_nothing():
    actor = make_actor(5)
    actor.start_defending()
    assert actor.mitigate_damage(17) == 17


def test_mitigation_does_not_grow_with_defense():
    previous = None
    for defense in range(0, 400, 7):
        actor = make_actor(5, base_defense=defense)
        actor.start_defending()
        damage = actor.mitigate_damage(40)
        if previous is not None:
            assert damage <= previous
        previous = damage


def test_take_damage_reports_defeat():
    actor = make_actor(1)
    assert not actor.take_damage(actor.max_hp - 1)
    assert actor.take_damage(500)
    assert actor.current_hp == 0
    assert not actor.is_alive


def test_hp_stays_in_bounds():
    rng = RNG(42)
    actor = make_actor(8)

    for _ in range(300):
        if rng.random() < 0.5:
            actor.take_damage(rng.randint(0, 60))
        else:
            actor.heal(rng.randint(0, 60))
        assert 0 <= actor.current_hp <= actor.max_hp
