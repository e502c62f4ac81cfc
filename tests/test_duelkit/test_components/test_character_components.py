import pytest
from pydantic import ValidationError

from duelkit.components import DerivedStats, Health


def test_health_init_clamps_current():
    health = Health(current=150, max_hp=100)
    assert health.current == 100
    assert health.is_full


def test_health_damage_and_heal_stay_in_bounds():
    health = Health(current=10, max_hp=10)

    assert health.take_damage(4) == 4
    assert health.current == 6

    assert health.take_damage(50) == 6
    assert health.current == 0
    assert health.is_dead

    assert health.heal(25) == 10
    assert health.current == 10

    assert health.take_damage(-5) == 0
    assert health.heal(-5) == 0
    assert health.current == 10


def test_health_set_max_clamps_current():
    health = Health(current=10, max_hp=10)
    health.set_max_hp(7)
    assert health.current == 7

    health.set_max_hp(12)
    assert health.current == 7
    assert health.missing == 5


def test_health_initialize_fills():
    health = Health(current=1, max_hp=5)
    health.initialize(40)
    assert health.current == 40
    assert health.max_hp == 40


def test_health_rejects_zero_max():
    with pytest.raises(ValidationError):
        Health(current=0, max_hp=0)


def test_derived_stats_minimums():
    with pytest.raises(ValidationError):
        DerivedStats(max_hp=0)
    with pytest.raises(ValidationError):
        DerivedStats(defense=-1)

    stats = DerivedStats(max_hp=10, attack=3, speed=2, defense=0)
    with pytest.raises(ValidationError):
        stats.attack = 0


def test_clone_is_independent():
    health = Health(current=5, max_hp=10)
    copy = health.clone()
    copy.take_damage(5)

    assert health.current == 5
    assert copy.current == 0


def test_type_name():
    assert Health.get_type_name() == "Health"
    assert DerivedStats().get_type_name() == "DerivedStats"
