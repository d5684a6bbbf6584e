from __future__ import annotations

import pytest

from conftest import ScriptedRandom

from voxel_invaders.config import DEFAULT_CONFIG
from voxel_invaders.entities import AlienKind
from voxel_invaders.formation import Formation, brightness_for
from voxel_invaders.geometry import Vec3

BASE_INTERVAL = 55 / 60


@pytest.fixture
def formation() -> Formation:
    return Formation(rng=ScriptedRandom(0.99))


def _alien(formation: Formation, column: int, row: int):
    return next(
        a for a in formation.aliens if a.column == column and a.row == row
    )


def test_build_lays_out_the_grid(formation: Formation) -> None:
    assert formation.total_count == 55
    assert formation.alive_count == 55

    corner = _alien(formation, 0, 0)
    back = _alien(formation, 10, 4)
    assert corner.position == Vec3(-80.0, 60.0, -400.0)
    assert back.position == Vec3(80.0, 60.0, -544.0)


def test_kinds_and_points_follow_rows(formation: Formation) -> None:
    by_row = {a.row: a for a in formation.aliens}

    assert [by_row[r].kind for r in range(5)] == [
        AlienKind.CRAB,
        AlienKind.BUG,
        AlienKind.BUG,
        AlienKind.SQUID,
        AlienKind.SQUID,
    ]
    assert [by_row[r].points for r in range(5)] == [10, 20, 20, 30, 30]
    assert [a.can_dive for a in formation.aliens if a.row == 3][0] is True
    assert not any(a.can_dive for a in formation.aliens if a.row < 3)


def test_move_interval_with_one_survivor_hits_the_floor(
    formation: Formation,
) -> None:
    for alien in formation.aliens[1:]:
        alien.hide()

    assert formation.alive_count == 1
    assert formation.move_interval == pytest.approx(BASE_INTERVAL * 0.3)


def test_move_interval_scales_with_survivors(formation: Formation) -> None:
    assert formation.move_interval == pytest.approx(BASE_INTERVAL)

    for alien in formation.aliens[:22]:
        alien.hide()
    assert formation.move_interval == pytest.approx(BASE_INTERVAL * 33 / 55)


def test_advance_steps_once_the_timer_reaches_the_interval(
    formation: Formation,
) -> None:
    assert formation.advance(0.5) == 55
    assert formation.transform.offset_x == 0.0

    formation.advance(0.5)
    assert formation.transform.offset_x == pytest.approx(4.0)
    assert formation.transform.move_timer == 0.0
    assert _alien(formation, 0, 0).position.x == pytest.approx(-76.0)


def test_later_waves_sweep_faster() -> None:
    formation = Formation(wave=3, rng=ScriptedRandom(0.99))

    # 0.66 s * 1.4 > 55/60 s
    formation.advance(0.66)
    assert formation.transform.offset_x == pytest.approx(4.0)


def test_edge_bounce_reverses_and_drops(formation: Formation) -> None:
    formation.transform.offset_x = 28.0

    formation.sweep_step()

    t = formation.transform
    assert t.direction == -1.0
    assert t.depth_z == pytest.approx(-385.0)
    assert t.offset_x == pytest.approx(28.0)
    assert _alien(formation, 0, 0).position.z == pytest.approx(-385.0)


def test_left_edge_bounce(formation: Formation) -> None:
    formation.transform.offset_x = -28.0
    formation.transform.direction = -1.0

    formation.sweep_step()

    assert formation.transform.direction == 1.0
    assert formation.transform.offset_x == pytest.approx(-28.0)


def test_edge_uses_only_alive_aliens(formation: Formation) -> None:
    for alien in formation.aliens:
        if alien.column == 10:
            alien.hide()
    formation.transform.offset_x = 28.0

    formation.sweep_step()

    assert formation.transform.direction == 1.0
    assert formation.transform.offset_x == pytest.approx(32.0)


def test_sweep_toggles_animation_frames(formation: Formation) -> None:
    formation.sweep_step()
    assert all(a.frame == 1 for a in formation.aliens)
    formation.sweep_step()
    assert all(a.frame == 0 for a in formation.aliens)


def test_brightness_dims_toward_the_back(formation: Formation) -> None:
    column = sorted(
        (a for a in formation.aliens if a.column == 4), key=lambda a: a.row
    )

    assert [a.brightness for a in column] == pytest.approx(
        [1.0, 0.85, 0.7, 0.55, 0.4]
    )


def test_brightness_recovers_when_the_front_dies(formation: Formation) -> None:
    _alien(formation, 4, 0).hide()
    formation.refresh_brightness()

    assert _alien(formation, 4, 1).brightness == pytest.approx(1.0)
    assert _alien(formation, 4, 4).brightness == pytest.approx(0.55)


def test_brightness_floor() -> None:
    cfg = DEFAULT_CONFIG.formation

    assert brightness_for(10, cfg) == pytest.approx(0.3)
    values = [brightness_for(n, cfg) for n in range(12)]
    assert values == sorted(values, reverse=True)
    assert min(values) >= 0.3


def test_divers_are_full_bright_and_not_counted_ahead(
    formation: Formation,
) -> None:
    diver = _alien(formation, 4, 3)
    assert formation.start_dive(diver, 0.0)

    assert diver.brightness == 1.0
    assert _alien(formation, 4, 4).brightness == pytest.approx(0.55)


def test_danger_line(formation: Formation) -> None:
    assert not formation.has_reached_danger_line()

    formation.transform.depth_z = -90.0
    formation.sweep_step()

    assert formation.has_reached_danger_line()
