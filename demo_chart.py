# demo_chart.py
from __future__ import annotations

import hashlib
import random
from typing import Callable, Dict, List

from hitobject_models import PLAYFIELD_CENTRE, Chart, Circle, HitObject, RepeatPoint, Slider, SliderTick, Spinner


def _stream_chart() -> Chart:
    return Chart(
        title="stream",
        targets=[
            Circle(start_time=0.0, position=(100.0, 100.0)),
            Circle(start_time=100.0, position=(200.0, 100.0)),
            Circle(start_time=1000.0, position=(300.0, 100.0)),
        ],
    )


def _slider_chart() -> Chart:
    return Chart(
        title="slider",
        targets=[Slider(start_time=0.0, position=(100.0, 200.0), end_time=500.0, end_position=(400.0, 200.0))],
    )


def _spinner_chart() -> Chart:
    return Chart(
        title="spinner",
        targets=[
            Spinner(start_time=0.0, position=PLAYFIELD_CENTRE, end_time=2000.0),
            Circle(start_time=1000.0, position=(64.0, 64.0)),
        ],
    )


def _seed_for(name: str) -> int:
    digest = hashlib.sha256(name.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=False)


def _mixed_chart() -> Chart:
    # Deterministic pattern: bursts of circles, sliders with ticks and repeats, back-to-back sliders, a spinner.
    random_generator = random.Random(_seed_for("mixed"))
    beat_ms = 500.0
    targets: List[HitObject] = []
    time_ms = 1000.0

    for _ in range(8):
        x = float(random_generator.randint(32, 480))
        y = float(random_generator.randint(32, 352))
        targets.append(Circle(start_time=time_ms, position=(x, y)))
        time_ms += beat_ms / 4.0

    time_ms += beat_ms
    for _ in range(2):
        # Back to back: the next slider starts exactly where this one ends.
        end_time = time_ms + beat_ms * 2.0
        targets.append(
            Slider(
                start_time=time_ms,
                position=(100.0, 100.0),
                end_time=end_time,
                end_position=(300.0, 100.0),
                nested=(
                    SliderTick(start_time=time_ms + beat_ms * 0.5, position=(150.0, 100.0)),
                    RepeatPoint(start_time=time_ms + beat_ms, position=(300.0, 100.0)),
                    SliderTick(start_time=time_ms + beat_ms * 1.5, position=(200.0, 100.0)),
                ),
            )
        )
        time_ms = end_time

    time_ms += beat_ms
    targets.append(Spinner(start_time=time_ms, position=PLAYFIELD_CENTRE, end_time=time_ms + beat_ms * 4.0))
    targets.append(Circle(start_time=time_ms + beat_ms * 2.0, position=(64.0, 320.0)))
    time_ms += beat_ms * 5.0

    targets.append(Circle(start_time=time_ms, position=(448.0, 64.0)))
    return Chart(title="mixed", targets=targets)


DEMO_CHARTS: Dict[str, Callable[[], Chart]] = {
    "stream": _stream_chart,
    "slider": _slider_chart,
    "spinner": _spinner_chart,
    "mixed": _mixed_chart,
}


def build_demo_chart(*, name: str) -> Chart:
    normalized_name = (name or "stream").strip().lower() or "stream"
    builder = DEMO_CHARTS.get(normalized_name)
    if builder is None:
        raise ValueError("demo chart must be one of: " + ", ".join(sorted(DEMO_CHARTS)))
    return builder()
