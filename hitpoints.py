# -*- coding: utf-8 -*-
########################
# hitpoints.py
########################
# Purpose:
# - Flatten chart targets into timed hitpoints and bucket them by exact timestamp.
# - Owns the Hitpoint record that the button engine annotates and the frame synthesizer reads.
#
# Design notes:
# - No I/O. Pure data transformation.
# - Buckets iterate in ascending time. Order inside a bucket is insertion order:
#   target order, then head before nested ticks/repeats before tail, spinner start before end.
# - Coincident hitpoints are never merged or reordered.
# - A hitpoint's kind is fixed at extraction. Only left_action/right_action change afterwards.
#
########################
# Interfaces:
# Public enums:
# - class HitpointKind(enum.Enum): CIRCLE | SLIDER_HEAD | SLIDER_TICK | SLIDER_TAIL | SPINNER_START | SPINNER_END
# - class ButtonAction(enum.Enum): NONE | CLICK | HOLD | RELEASE
#
# Public dataclasses:
# - Hitpoint(time: float, kind: HitpointKind, position: Vector2, left_action: ButtonAction, right_action: ButtonAction)
#
# Public classes:
# - class HitpointTimeline
#   - add(hitpoint: Hitpoint) -> None
#   - buckets() -> list[tuple[float, list[Hitpoint]]]
#   - times() -> list[float]
#   - bucket_at(time: float) -> list[Hitpoint]
#   - hitpoints() -> list[Hitpoint]
#
# Public functions:
# - extract_hitpoints(targets: Iterable[HitObject]) -> HitpointTimeline
#
########################

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Tuple

from hitobject_models import Circle, HitObject, RepeatPoint, Slider, SliderTick, Spinner, Vector2


class HitpointKind(enum.Enum):
    CIRCLE = "circle"
    SLIDER_HEAD = "slider_head"
    SLIDER_TICK = "slider_tick"
    SLIDER_TAIL = "slider_tail"
    SPINNER_START = "spinner_start"
    SPINNER_END = "spinner_end"


HOLD_OPENING_KINDS = frozenset({HitpointKind.SLIDER_HEAD, HitpointKind.SPINNER_START})
HOLD_CLOSING_KINDS = frozenset({HitpointKind.SLIDER_TAIL, HitpointKind.SPINNER_END})


class ButtonAction(enum.Enum):
    NONE = "none"
    CLICK = "click"
    HOLD = "hold"
    RELEASE = "release"


@dataclass
class Hitpoint:
    time: float
    kind: HitpointKind
    position: Vector2
    left_action: ButtonAction = ButtonAction.NONE
    right_action: ButtonAction = ButtonAction.NONE


class HitpointTimeline:
    def __init__(self) -> None:
        self._buckets: Dict[float, List[Hitpoint]] = {}

    def add(self, hitpoint: Hitpoint) -> None:
        self._buckets.setdefault(float(hitpoint.time), []).append(hitpoint)

    def times(self) -> List[float]:
        return sorted(self._buckets.keys())

    def buckets(self) -> List[Tuple[float, List[Hitpoint]]]:
        return [(time, self._buckets[time]) for time in self.times()]

    def bucket_at(self, time: float) -> List[Hitpoint]:
        return list(self._buckets.get(float(time), []))

    def hitpoints(self) -> List[Hitpoint]:
        flattened: List[Hitpoint] = []
        for _time, bucket in self.buckets():
            flattened.extend(bucket)
        return flattened

    def __len__(self) -> int:
        return len(self._buckets)

    def __iter__(self) -> Iterator[Tuple[float, List[Hitpoint]]]:
        return iter(self.buckets())


def _nested_hitpoints(slider: Slider) -> Iterator[Hitpoint]:
    for nested in slider.nested:
        # Ticks and repeat points are hit the same way, so both become SLIDER_TICK.
        if isinstance(nested, (SliderTick, RepeatPoint)):
            yield Hitpoint(float(nested.start_time), HitpointKind.SLIDER_TICK, nested.position)


def extract_hitpoints(targets: Iterable[HitObject]) -> HitpointTimeline:
    timeline = HitpointTimeline()

    for target in targets:
        if isinstance(target, Circle):
            timeline.add(Hitpoint(float(target.start_time), HitpointKind.CIRCLE, target.position))
        elif isinstance(target, Slider):
            timeline.add(Hitpoint(float(target.start_time), HitpointKind.SLIDER_HEAD, target.position))
            for nested_hitpoint in _nested_hitpoints(target):
                timeline.add(nested_hitpoint)
            timeline.add(Hitpoint(float(target.end_time), HitpointKind.SLIDER_TAIL, target.end_position))
        else:
            spinner: Spinner = target  # type: ignore[assignment]
            timeline.add(Hitpoint(float(spinner.start_time), HitpointKind.SPINNER_START, spinner.position))
            timeline.add(Hitpoint(float(spinner.end_time), HitpointKind.SPINNER_END, spinner.end_position))

    return timeline


def _run_unit_tests() -> None:
    targets = [
        Circle(start_time=500.0, position=(10.0, 10.0)),
        Slider(
            start_time=0.0,
            position=(100.0, 100.0),
            end_time=500.0,
            end_position=(300.0, 100.0),
            nested=(
                SliderTick(start_time=250.0, position=(200.0, 100.0)),
                RepeatPoint(start_time=400.0, position=(250.0, 100.0)),
            ),
        ),
        Spinner(start_time=1000.0, position=(256.0, 192.0), end_time=2000.0),
    ]
    timeline = extract_hitpoints(targets)

    assert timeline.times() == [0.0, 250.0, 400.0, 500.0, 1000.0, 2000.0]
    assert [h.kind for h in timeline.bucket_at(500.0)] == [HitpointKind.CIRCLE, HitpointKind.SLIDER_TAIL]
    assert [h.kind for h in timeline.bucket_at(400.0)] == [HitpointKind.SLIDER_TICK]
    assert all(h.left_action is ButtonAction.NONE and h.right_action is ButtonAction.NONE for h in timeline.hitpoints())


if __name__ == "__main__":
    _run_unit_tests()
    print("hitpoints.py: ok")
