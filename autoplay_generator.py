# -*- coding: utf-8 -*-
########################
# autoplay_generator.py
########################
# Purpose:
# - Generate a perfect-clear replay frame stream for a chart.
# - Runs the pipeline: hitpoint extraction -> button assignment -> frame synthesis.
#
########################
# Key Logic:
# - Stages are strictly sequential and separately testable:
#   - every button decision is made chart-wide before any frame is emitted
#   - no stage reads chart targets after extraction
# - Each run builds its own timeline, engine and synthesizer. Nothing is shared between runs.
# - Strict contract:
#   - An empty chart is rejected before any stage runs (EmptyChartError).
#   - A hold zone closing with nothing held aborts the run (button_engine.HoldStateError).
#
########################
# Interfaces:
# Public exceptions:
# - class EmptyChartError(ValueError)
#
# Public dataclasses:
# - @dataclass(frozen=True) class GenerationResult
#   - frames: list[ReplayFrame]
#   - timeline: HitpointTimeline
#   - session_state: ButtonSessionState
#   - preferred_easing: str
#   - reaction_time_ms: float
#
# Public classes:
# - class AutoplayGenerator
#   - __init__(generator_config: Optional[GeneratorConfig] = None)
#   - generate(chart: Chart | Sequence[HitObject]) -> GenerationResult
#
# Public functions:
# - generate_frames(chart, *, generator_config=None) -> list[ReplayFrame]
# - main() -> int
#
########################
# Smoke Tests:
#   - python autoplay_generator.py --run-tests
#   - python autoplay_generator.py --demo mixed
########################

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import demo_chart
import logging_setup
from button_engine import ButtonAssignmentEngine
from click_arbiter import ButtonSessionState
from config import GeneratorConfig, load_config
from frame_synthesizer import FrameSynthesizer, ReplayFrame, frames_to_rows
from hitobject_models import Chart, HitObject
from hitpoints import HitpointTimeline, extract_hitpoints


logger = logging.getLogger(__name__)


class EmptyChartError(ValueError):
    """Raised when a chart without targets is passed to the generator."""


@dataclass(frozen=True)
class GenerationResult:
    frames: List[ReplayFrame]
    timeline: HitpointTimeline
    session_state: ButtonSessionState
    preferred_easing: str
    reaction_time_ms: float


def _as_chart(chart: Union[Chart, Sequence[HitObject]]) -> Chart:
    if isinstance(chart, Chart):
        return chart
    return Chart(targets=list(chart))


class AutoplayGenerator:
    def __init__(self, generator_config: Optional[GeneratorConfig] = None) -> None:
        self._config = generator_config if generator_config is not None else GeneratorConfig()

    def config(self) -> GeneratorConfig:
        return self._config

    def generate(self, chart: Union[Chart, Sequence[HitObject]]) -> GenerationResult:
        resolved_chart = _as_chart(chart)
        if resolved_chart.is_empty():
            raise EmptyChartError("Cannot generate frames for a chart without targets")

        timeline = extract_hitpoints(resolved_chart.targets)

        engine = ButtonAssignmentEngine(
            alternating_threshold_ms=self._config.alternating_threshold_ms,
            release_delay_ms=self._config.key_up_delay_ms,
        )
        session_state = engine.assign(timeline)
        if session_state.active_hold_count != 0:
            logger.warning("Hold zones still open after the last bucket: %d", session_state.active_hold_count)

        synthesizer = FrameSynthesizer(key_up_delay_ms=self._config.key_up_delay_ms)
        frames = synthesizer.synthesize(timeline, first_start_time=resolved_chart.first_start_time())

        logger.info(
            "Generated %d frames for %r (%d targets, %d buckets)",
            len(frames),
            resolved_chart.title,
            len(resolved_chart.targets),
            len(timeline),
        )

        return GenerationResult(
            frames=frames,
            timeline=timeline,
            session_state=session_state,
            preferred_easing=self._config.preferred_easing,
            reaction_time_ms=float(self._config.reaction_time_ms),
        )


def generate_frames(
    chart: Union[Chart, Sequence[HitObject]],
    *,
    generator_config: Optional[GeneratorConfig] = None,
) -> List[ReplayFrame]:
    return AutoplayGenerator(generator_config).generate(chart).frames


def _assert(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def _run_chunk_tests() -> None:
    generator = AutoplayGenerator()

    stream = generator.generate(demo_chart.build_demo_chart(name="stream"))
    pressed = [int(frame.buttons) for frame in stream.frames if int(frame.buttons) != 0]
    _assert(pressed == [1, 2, 1], "Expected clicks to alternate left, right, left")

    slider = generator.generate(demo_chart.build_demo_chart(name="slider"))
    _assert(int(slider.frames[-1].buttons) == 0, "Expected slider hold to be released at the tail")
    _assert(slider.session_state.active_hold_count == 0, "Expected all hold zones closed")

    mixed = generator.generate(demo_chart.build_demo_chart(name="mixed"))
    # An anchor can land behind the previous key-up frame, by at most anchor lead + key-up delay.
    max_step_back = 100.0
    _assert(
        all(later.time >= earlier.time - max_step_back for earlier, later in zip(mixed.frames, mixed.frames[1:])),
        "Expected anchors to step back by at most anchor lead + key-up delay",
    )
    _assert(int(mixed.frames[-1].buttons) == 0, "Expected every hold released by the end")
    _assert(mixed.session_state.active_hold_count == 0, "Expected all hold zones closed")

    try:
        generator.generate(Chart())
    except EmptyChartError:
        pass
    else:
        raise AssertionError("Expected EmptyChartError for empty chart")


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate autoplay replay frames for a demo chart.")
    parser.add_argument("--demo", default="stream", choices=sorted(demo_chart.DEMO_CHARTS), help="Demo chart to play.")
    parser.add_argument("--run-tests", action="store_true", help="Run pipeline chunk tests.")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors.")
    parser.add_argument("--debug", action="store_true", help="Log every button decision.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_argument_parser().parse_args(argv)

    try:
        app_config, _config_path = load_config()
    except Exception as exception:
        print(json.dumps({"ok": False, "error": str(exception)}, ensure_ascii=False, indent=2))
        return 2

    logging_setup.setup_logging(args, default_level=app_config.logging.level_number())

    if args.run_tests:
        try:
            _run_chunk_tests()
        except Exception as exc:
            print("Autoplay pipeline chunk tests: FAIL")
            print(str(exc))
            return 2
        print("Autoplay pipeline chunk tests: PASS")
        return 0

    try:
        result = AutoplayGenerator(app_config.generator).generate(demo_chart.build_demo_chart(name=args.demo))
    except Exception as exception:
        print(json.dumps({"ok": False, "error": str(exception)}, ensure_ascii=False, indent=2))
        return 2

    output_payload = {
        "ok": True,
        "demo": args.demo,
        "preferred_easing": result.preferred_easing,
        "reaction_time_ms": result.reaction_time_ms,
        "frames": frames_to_rows(result.frames),
    }
    print(json.dumps(output_payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
