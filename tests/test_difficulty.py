from __future__ import annotations

import pytest

from voxel_invaders.difficulty import (
    WaveDifficulty,
    barrier_health,
    dive_interval,
    max_divers,
    move_speed,
    shoot_chance,
    strafe_interval,
)


def test_shoot_chance_ramps_from_first_to_hundredth_wave() -> None:
    assert shoot_chance(1) == pytest.approx(0.005)
    assert shoot_chance(100) == pytest.approx(0.05)
    assert shoot_chance(250) == pytest.approx(0.05)


def test_shoot_chance_is_non_decreasing_and_bounded() -> None:
    values = [shoot_chance(w) for w in range(1, 101)]
    assert values == sorted(values)
    assert all(0.005 - 1e-12 <= v <= 0.05 + 1e-12 for v in values)


def test_move_speed_grows_linearly_per_wave() -> None:
    assert move_speed(1) == pytest.approx(1.0)
    assert move_speed(3) == pytest.approx(1.4)
    assert move_speed(11) == pytest.approx(3.0)


def test_dive_interval_bounds_shrink_with_waves() -> None:
    assert dive_interval(1) == pytest.approx((3.0, 8.0))
    assert dive_interval(100) == pytest.approx((0.8, 2.0))
    low, high = dive_interval(50)
    assert 0.8 < low < 3.0
    assert 2.0 < high < 8.0


def test_max_divers_floors_the_ramp() -> None:
    assert max_divers(1) == 1
    assert max_divers(2) == 1
    assert max_divers(50) == 2
    assert max_divers(100) == 5


def test_strafe_interval_ramps_between_second_and_seventy_fifth_wave() -> None:
    assert strafe_interval(1) == pytest.approx(1.0)
    assert strafe_interval(2) == pytest.approx(1.0)
    assert strafe_interval(75) == pytest.approx(0.4)
    assert strafe_interval(120) == pytest.approx(0.4)


def test_barrier_health_drops_from_three_to_one() -> None:
    assert barrier_health(1) == 3
    assert barrier_health(100) == 1
    healths = [barrier_health(w) for w in range(1, 101)]
    assert healths == sorted(healths, reverse=True)
    assert set(healths) == {1, 2, 3}


def test_wave_difficulty_snapshot_enables_dives_from_wave_two() -> None:
    first = WaveDifficulty.for_wave(1)
    second = WaveDifficulty.for_wave(2)

    assert first.dives_enabled is False
    assert second.dives_enabled is True
    assert second.shoot_chance == pytest.approx(shoot_chance(2))
    assert second.barrier_health == barrier_health(2)
