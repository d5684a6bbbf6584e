from __future__ import annotations

import random
import sys
from pathlib import Path
from typing import Sequence, TypeVar

import pytest

T = TypeVar("T")


def pytest_configure(config: pytest.Config) -> None:
    # Make the local `src/` tree win over any installed copy.
    src_dir = Path(__file__).resolve().parents[1] / "src"
    src_str = str(src_dir)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


class ScriptedRandom:
    """Random source that always rolls the same value and picks the first item."""

    def __init__(self, value: float = 0.5) -> None:
        self.value = value

    def random(self) -> float:
        return self.value

    def choice(self, seq: Sequence[T]) -> T:
        return seq[0]


class RecordingView:
    def __init__(self, target: object) -> None:
        self.target = target
        self.transforms: list[tuple[object, object]] = []
        self.visibility: list[bool] = []
        self.released = False

    def set_transform(self, position, rotation) -> None:
        self.transforms.append((position, rotation))

    def set_visible(self, visible: bool) -> None:
        self.visibility.append(visible)

    def release(self) -> None:
        self.released = True


@pytest.fixture
def scripted_rng() -> ScriptedRandom:
    return ScriptedRandom(0.5)


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def views() -> list[RecordingView]:
    return []


@pytest.fixture
def view_factory(views: list[RecordingView]):
    def factory(target: object) -> RecordingView:
        view = RecordingView(target)
        views.append(view)
        return view

    return factory
