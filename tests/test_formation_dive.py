from __future__ import annotations

import pytest

from conftest import ScriptedRandom

from voxel_invaders.entities import DivePhase, Diving, ShotType
from voxel_invaders.formation import Formation
from voxel_invaders.geometry import Vec3

RETREAT_Z = -200.0


def _alien(formation: Formation, column: int, row: int):
    return next(
        a for a in formation.aliens if a.column == column and a.row == row
    )


@pytest.fixture
def formation() -> Formation:
    return Formation(wave=2, rng=ScriptedRandom(0.99))


def test_start_dive_is_a_no_op_for_ineligible_aliens(
    formation: Formation,
) -> None:
    crab = _alien(formation, 0, 0)
    dead_squid = _alien(formation, 1, 3)
    dead_squid.hide()
    squid = _alien(formation, 2, 3)

    assert formation.start_dive(crab, 0.0) is False
    assert formation.start_dive(dead_squid, 0.0) is False
    assert crab.in_formation and dead_squid.in_formation

    assert formation.start_dive(squid, 0.0) is True
    motion = squid.motion
    assert isinstance(motion, Diving)
    assert formation.start_dive(squid, 0.0) is False
    assert squid.motion is motion


def test_try_start_dive_needs_an_escort(formation: Formation) -> None:
    for alien in formation.aliens:
        if not alien.can_dive:
            alien.hide()

    assert formation.try_start_dive() is None
    assert formation.diver_count == 0


def test_try_start_dive_respects_the_diver_cap(formation: Formation) -> None:
    first = formation.try_start_dive()

    assert first is not None
    assert first.can_dive
    # wave 2 allows a single diver
    assert formation.try_start_dive() is None
    assert formation.diver_count == 1


def test_first_dive_waits_for_the_initial_delay(formation: Formation) -> None:
    formation.advance(4.9)
    assert formation.diver_count == 0

    formation.advance(0.2)
    assert formation.diver_count == 1
    low, high = formation.difficulty.dive_interval
    assert formation.next_dive_time == pytest.approx(low + 0.99 * (high - low))


def test_no_dives_on_the_first_wave() -> None:
    formation = Formation(wave=1, rng=ScriptedRandom(0.99))

    for _ in range(100):
        formation.advance(0.1)

    assert formation.diver_count == 0


def test_dive_never_passes_the_retreat_line_and_returns_to_its_slot(
    formation: Formation,
) -> None:
    diver = _alien(formation, 0, 3)
    assert formation.start_dive(diver, 20.0)

    deepest = diver.position.z
    for _ in range(1000):
        formation.advance(0.1, player_x=20.0)
        if isinstance(diver.motion, Diving):
            if diver.motion.phase is DivePhase.DIVING:
                deepest = max(deepest, diver.position.z)
        if diver.in_formation:
            break

    assert diver.in_formation
    assert deepest <= RETREAT_Z + 1e-9
    assert diver.position == formation.grid_position(diver)


def test_dive_reaches_the_player_column(formation: Formation) -> None:
    diver = _alien(formation, 0, 3)
    formation.start_dive(diver, 20.0)

    for _ in range(1000):
        formation.advance(0.1, player_x=20.0)
        motion = diver.motion
        if isinstance(motion, Diving) and motion.phase is DivePhase.RETURNING:
            break

    assert diver.position.z == pytest.approx(RETREAT_Z)
    assert diver.position.x == pytest.approx(20.0)
    assert diver.position.y == pytest.approx(10.0)


def test_safety_clamp_turns_a_diver_around(formation: Formation) -> None:
    diver = _alien(formation, 0, 3)
    formation.start_dive(diver, 0.0)
    diver.set_position(Vec3(0.0, 10.0, -150.0))

    formation.advance(0.016)

    assert isinstance(diver.motion, Diving)
    assert diver.motion.phase is DivePhase.RETURNING


def test_dive_from_past_the_retreat_line_returns_immediately(
    formation: Formation,
) -> None:
    formation.transform.depth_z = 0.0
    formation.sweep_step()
    diver = _alien(formation, 0, 3)
    assert diver.position.z > RETREAT_Z
    formation.start_dive(diver, 0.0)

    formation.advance(0.016)

    assert diver.motion.phase is DivePhase.RETURNING


def test_pinning_skips_divers(formation: Formation) -> None:
    diver = _alien(formation, 0, 3)
    formation.start_dive(diver, 0.0)
    diver.set_position(Vec3(1.0, 2.0, -300.0))

    formation.sweep_step()

    assert diver.position == Vec3(1.0, 2.0, -300.0)


def test_strafe_fires_only_mid_dive(formation: Formation) -> None:
    diver = _alien(formation, 0, 3)
    formation.start_dive(diver, 30.0)
    motion = diver.motion

    motion.progress = 0.1
    assert formation.strafe_shots(10.0, player_x=30.0) == []

    motion.progress = 0.9
    assert formation.strafe_shots(10.0, player_x=30.0) == []

    motion.progress = 0.5
    shots = formation.strafe_shots(10.0, player_x=30.0)
    assert len(shots) == 1
    shot = shots[0]
    assert shot.source == formation.index_of(diver)
    assert shot.shot_type is ShotType.PLUNGER
    assert shot.velocity.x > 0.0
    assert shot.velocity.length() == pytest.approx(80.0)
    assert motion.last_shot_time == 10.0


def test_strafe_respects_the_interval(formation: Formation) -> None:
    diver = _alien(formation, 0, 3)
    formation.start_dive(diver, 0.0, game_time=0.0)
    diver.motion.progress = 0.5

    assert len(formation.strafe_shots(1.0)) == 1
    assert formation.strafe_shots(1.5) == []
    assert len(formation.strafe_shots(2.0)) == 1


def test_strafe_needs_the_first_interval_after_the_dive_starts(
    formation: Formation,
) -> None:
    diver = _alien(formation, 0, 3)
    formation.start_dive(diver, 0.0, game_time=5.0)
    diver.motion.progress = 0.5

    assert formation.strafe_shots(5.5) == []


def test_returning_divers_hold_fire(formation: Formation) -> None:
    diver = _alien(formation, 0, 3)
    formation.start_dive(diver, 0.0)
    diver.motion.phase = DivePhase.RETURNING
    diver.motion.progress = 0.5

    assert formation.strafe_shots(100.0) == []


def test_return_starting_next_to_the_slot_snaps_home(
    formation: Formation,
) -> None:
    diver = _alien(formation, 0, 3)
    formation.start_dive(diver, 0.0)
    diver.motion.phase = DivePhase.RETURNING
    diver.motion.start = formation.grid_position(diver) + Vec3(0.5, 0.0, 0.0)

    formation.advance(0.016)

    assert diver.in_formation
    assert diver.position == formation.grid_position(diver)
