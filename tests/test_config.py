from __future__ import annotations

import math

import pytest

from voxel_invaders.config import DEFAULT_CONFIG, ConfigError, GameConfig
from voxel_invaders.entities import AlienKind


def test_from_dict_overlays_nested_values_on_defaults() -> None:
    config = GameConfig.from_dict({"formation": {"columns": 8, "step": 2.0}})

    assert config.formation.columns == 8
    assert config.formation.step == pytest.approx(2.0)
    assert config.formation.rows == DEFAULT_CONFIG.formation.rows
    assert config.barrier == DEFAULT_CONFIG.barrier


def test_from_dict_turns_lists_into_tuples() -> None:
    config = GameConfig.from_dict({"intro": {"side_weights": [1.0, 0.0, 0.0]}})

    assert config.intro.side_weights == (1.0, 0.0, 0.0)


def test_dict_round_trip_keeps_defaults() -> None:
    assert GameConfig.from_dict(DEFAULT_CONFIG.to_dict()) == DEFAULT_CONFIG


@pytest.mark.parametrize(
    "data",
    [
        {"bogus": {}},
        {"formation": {"colums": 3}},
        {"formation": 11},
        {"formation": {"columns": "11"}},
        {"formation": {"rows": 2.5}},
        {"intro": {"side_weights": 3}},
        {"intro": {"side_weights": [0.5, 0.5]}},
        {"alien_types": {"squid": {"can_dive": 1}}},
    ],
)
def test_from_dict_rejects_unknown_or_malformed_input(data: dict) -> None:
    with pytest.raises(ConfigError):
        GameConfig.from_dict(data)


def test_non_positive_grid_is_a_config_error() -> None:
    with pytest.raises(ConfigError):
        GameConfig.from_dict({"formation": {"rows": 0}})
    # still a ValueError for callers that only know the builtin
    with pytest.raises(ValueError):
        GameConfig.from_dict({"formation": {"columns": -1}})


def test_alien_hit_radius_is_half_the_scaled_sprite_diagonal() -> None:
    types = DEFAULT_CONFIG.alien_types

    assert types.for_kind(AlienKind.CRAB).hit_radius(2.0) == pytest.approx(
        math.hypot(11, 8)
    )
    assert types.for_kind(AlienKind.SQUID).hit_radius(2.0) == pytest.approx(
        math.hypot(8, 8)
    )


def test_derived_timing_and_barrier_values() -> None:
    assert DEFAULT_CONFIG.timing.base_move_interval == pytest.approx(55 / 60)
    assert DEFAULT_CONFIG.barrier.cell_packing == pytest.approx(3.0)
    assert DEFAULT_CONFIG.barrier.blast_radius == pytest.approx(3.0)
    assert DEFAULT_CONFIG.formation.total == 55


def test_from_dict_accepts_ints_for_float_fields_and_resized_row_lists() -> None:
    config = GameConfig.from_dict(
        {
            "formation": {"step": 3},
            "alien_types": {"squid": {"rows": [2, 3, 4]}},
        }
    )

    assert config.formation.step == 3
    assert config.alien_types.squid.rows == (2, 3, 4)
