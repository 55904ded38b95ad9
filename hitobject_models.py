# -*- coding: utf-8 -*-
########################
# hitobject_models.py
########################
# Purpose:
# - Immutable hit object models consumed by the autoplay pipeline.
# - Circles, sliders (with nested ticks and repeat points) and spinners, already resolved to stacked positions.
#
# Design notes:
# - Keep these models frozen. The pipeline never mutates a target after it is handed in.
# - Times are milliseconds. Positions are playfield coordinates (512x384 playfield).
# - Beatmap parsing lives outside this project. Callers build these objects directly.
#
########################
# Interfaces:
# Public type aliases:
# - Vector2 = tuple[float, float]
#
# Public dataclasses:
# - Circle(start_time: float, position: Vector2)
# - SliderTick(start_time: float, position: Vector2)
# - RepeatPoint(start_time: float, position: Vector2)
# - Slider(start_time: float, position: Vector2, end_time: float, end_position: Vector2, nested: tuple[SliderTick | RepeatPoint, ...])
# - Spinner(start_time: float, position: Vector2, end_time: float, end_position: Vector2)
# - Chart(targets: list[HitObject], title: str)
#   - first_start_time() -> float
#   - is_empty() -> bool
#
# Inputs/Outputs:
# - Plain values. The hitpoint extractor reads them once and never again.
#
########################

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple, Union


Vector2 = Tuple[float, float]

PLAYFIELD_WIDTH = 512.0
PLAYFIELD_HEIGHT = 384.0
PLAYFIELD_CENTRE: Vector2 = (PLAYFIELD_WIDTH / 2.0, PLAYFIELD_HEIGHT / 2.0)


def _validate_span(kind: str, start_time: float, end_time: float) -> None:
    if float(end_time) <= float(start_time):
        raise ValueError(f"{kind} end_time ({end_time}) must be after start_time ({start_time})")


@dataclass(frozen=True)
class Circle:
    start_time: float
    position: Vector2


@dataclass(frozen=True)
class SliderTick:
    start_time: float
    position: Vector2


@dataclass(frozen=True)
class RepeatPoint:
    start_time: float
    position: Vector2


SliderNested = Union[SliderTick, RepeatPoint]


@dataclass(frozen=True)
class Slider:
    start_time: float
    position: Vector2
    end_time: float
    end_position: Vector2
    nested: Tuple[SliderNested, ...] = ()

    def __post_init__(self) -> None:
        _validate_span("Slider", self.start_time, self.end_time)
        # Nested objects may arrive as any iterable; keep a tuple.
        object.__setattr__(self, "nested", tuple(self.nested))


@dataclass(frozen=True)
class Spinner:
    start_time: float
    position: Vector2
    end_time: float
    end_position: Vector2 = PLAYFIELD_CENTRE

    def __post_init__(self) -> None:
        _validate_span("Spinner", self.start_time, self.end_time)


HitObject = Union[Circle, Slider, Spinner]


@dataclass(frozen=True)
class Chart:
    targets: List[HitObject] = field(default_factory=list)
    title: str = ""

    def is_empty(self) -> bool:
        return len(self.targets) == 0

    def first_start_time(self) -> float:
        if not self.targets:
            raise ValueError("Chart has no targets")
        return float(self.targets[0].start_time)


def _run_unit_tests() -> None:
    slider = Slider(
        start_time=0.0,
        position=(100.0, 100.0),
        end_time=500.0,
        end_position=(300.0, 100.0),
        nested=[SliderTick(start_time=250.0, position=(200.0, 100.0))],
    )
    assert isinstance(slider.nested, tuple)
    assert len(slider.nested) == 1

    try:
        Spinner(start_time=1000.0, position=PLAYFIELD_CENTRE, end_time=1000.0)
    except ValueError:
        pass
    else:
        raise AssertionError("Expected ValueError for zero length spinner")

    chart = Chart(targets=[Circle(start_time=42.0, position=(0.0, 0.0)), slider])
    assert chart.first_start_time() == 42.0
    assert not chart.is_empty()
    assert Chart().is_empty()


if __name__ == "__main__":
    _run_unit_tests()
    print("hitobject_models.py: ok")
