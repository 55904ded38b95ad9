# -*- coding: utf-8 -*-
########################
# frame_synthesizer.py
########################
# Purpose:
# - Turn an annotated hitpoint timeline into the final ordered replay frame stream.
# - Emits anchor frames only. Cursor interpolation between frames belongs to the consumer.
#
# Design notes:
# - No I/O. Reads hitpoint actions, never writes them.
# - Three warm-up frames are always emitted first.
# - Per bucket the rule table is consulted in priority order: release > click > hold > movement.
#   - Each rule acts on the first hitpoint in bucket order carrying its action (left checked before right).
#   - The release rule does not end the bucket: a slider head that force-releases one button
#     and holds the other carries both actions on the same hitpoint, and both must be emitted.
#   - Click and hold end the bucket.
#   - Movement fires only when no other rule fired in the bucket.
# - Holds have no restore frame. A held bit stays set until a release rule clears it.
# - Pre-action anchor frames sit a fixed lead before their press. In dense patterns an anchor
#   can fall before the previous frame (e.g. the key-up frame of a click less than 100ms earlier).
#
########################
# Interfaces:
# Public enums:
# - class ButtonState(enum.IntFlag): NONE | LEFT | RIGHT
#
# Public dataclasses:
# - ReplayFrame(time: float, x: float, y: float, buttons: ButtonState)
# - FrameRule(name: str, action: ButtonAction, ends_bucket: bool)
#
# Public classes:
# - class FrameSynthesizer
#   - __init__(*, key_up_delay_ms: float = KEY_UP_DELAY_MS, anchor_lead_ms: float = ANCHOR_LEAD_MS)
#   - frames() -> list[ReplayFrame]
#   - emit_warmup(first_start_time: float) -> None
#   - synthesize_bucket(bucket: list[Hitpoint]) -> list[str]
#   - synthesize(timeline: HitpointTimeline, *, first_start_time: float) -> list[ReplayFrame]
#
# Public functions:
# - frames_to_rows(frames: Iterable[ReplayFrame]) -> list[dict]
#
########################

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from button_engine import KEY_UP_DELAY_MS
from click_arbiter import Button
from hitobject_models import PLAYFIELD_CENTRE, Vector2
from hitpoints import ButtonAction, Hitpoint, HitpointTimeline


ANCHOR_LEAD_MS = 50.0

WARMUP_FRAMES: Tuple[Tuple[Optional[float], Vector2], ...] = (
    # (offset from first target start, position); None means an absolute time far in the past.
    (None, (256.0, 500.0)),
    (-1500.0, (256.0, 500.0)),
    (-1000.0, PLAYFIELD_CENTRE),
)
WARMUP_ABSOLUTE_TIME = -100000.0


class ButtonState(enum.IntFlag):
    NONE = 0
    LEFT = 1
    RIGHT = 2


_BUTTON_BITS = {
    Button.LEFT: ButtonState.LEFT,
    Button.RIGHT: ButtonState.RIGHT,
}


@dataclass(frozen=True)
class ReplayFrame:
    time: float
    x: float
    y: float
    buttons: ButtonState = ButtonState.NONE

    @property
    def position(self) -> Vector2:
        return (self.x, self.y)


@dataclass(frozen=True)
class FrameRule:
    name: str
    action: ButtonAction
    ends_bucket: bool


FRAME_RULES: Tuple[FrameRule, ...] = (
    FrameRule(name="release", action=ButtonAction.RELEASE, ends_bucket=False),
    FrameRule(name="click", action=ButtonAction.CLICK, ends_bucket=True),
    FrameRule(name="hold", action=ButtonAction.HOLD, ends_bucket=True),
)
MOVEMENT_RULE_NAME = "movement"


def _find_action(bucket: List[Hitpoint], action: ButtonAction) -> Optional[Tuple[Hitpoint, Button]]:
    for hitpoint in bucket:
        if hitpoint.left_action is action:
            return hitpoint, Button.LEFT
        if hitpoint.right_action is action:
            return hitpoint, Button.RIGHT
    return None


class FrameSynthesizer:
    def __init__(self, *, key_up_delay_ms: float = KEY_UP_DELAY_MS, anchor_lead_ms: float = ANCHOR_LEAD_MS) -> None:
        self._key_up_delay_ms = float(key_up_delay_ms)
        self._anchor_lead_ms = float(anchor_lead_ms)
        self._frames: List[ReplayFrame] = []

    def frames(self) -> List[ReplayFrame]:
        return list(self._frames)

    def _last_buttons(self) -> ButtonState:
        if not self._frames:
            return ButtonState.NONE
        return self._frames[-1].buttons

    def _append(self, time: float, position: Vector2, buttons: ButtonState) -> None:
        self._frames.append(ReplayFrame(time=float(time), x=float(position[0]), y=float(position[1]), buttons=buttons))

    def _append_anchor(self, hitpoint: Hitpoint, buttons: ButtonState) -> None:
        self._append(hitpoint.time - self._anchor_lead_ms, hitpoint.position, buttons)

    def emit_warmup(self, first_start_time: float) -> None:
        for offset, position in WARMUP_FRAMES:
            time = WARMUP_ABSOLUTE_TIME if offset is None else float(first_start_time) + offset
            self._append(time, position, ButtonState.NONE)

    def _emit(self, rule: FrameRule, hitpoint: Hitpoint, button: Button) -> None:
        bit = _BUTTON_BITS[button]
        previous = self._last_buttons()

        if rule.action is ButtonAction.RELEASE:
            self._append(hitpoint.time, hitpoint.position, previous & ~bit)
        elif rule.action is ButtonAction.CLICK:
            self._append_anchor(hitpoint, previous)
            self._append(hitpoint.time, hitpoint.position, previous | bit)
            self._append(hitpoint.time + self._key_up_delay_ms, hitpoint.position, previous)
        elif rule.action is ButtonAction.HOLD:
            self._append_anchor(hitpoint, previous)
            self._append(hitpoint.time, hitpoint.position, previous | bit)

    def synthesize_bucket(self, bucket: List[Hitpoint]) -> List[str]:
        """Emit frames for one bucket and return the names of the rules that fired."""
        fired: List[str] = []
        for rule in FRAME_RULES:
            match = _find_action(bucket, rule.action)
            if match is None:
                continue
            hitpoint, button = match
            self._emit(rule, hitpoint, button)
            fired.append(rule.name)
            if rule.ends_bucket:
                return fired

        if not fired:
            first = bucket[0]
            self._append(first.time, first.position, self._last_buttons())
            fired.append(MOVEMENT_RULE_NAME)
        return fired

    def synthesize(self, timeline: HitpointTimeline, *, first_start_time: float) -> List[ReplayFrame]:
        self.emit_warmup(first_start_time)
        for _time, bucket in timeline.buckets():
            self.synthesize_bucket(bucket)
        return self.frames()


def frames_to_rows(frames: Iterable[ReplayFrame]) -> List[Dict[str, Any]]:
    return [
        {"time": float(frame.time), "x": float(frame.x), "y": float(frame.y), "buttons": int(frame.buttons)}
        for frame in frames
    ]


def _run_unit_tests() -> None:
    from hitpoints import HitpointKind

    timeline = HitpointTimeline()
    timeline.add(Hitpoint(0.0, HitpointKind.SLIDER_HEAD, (10.0, 10.0), left_action=ButtonAction.HOLD))
    timeline.add(Hitpoint(250.0, HitpointKind.SLIDER_TICK, (20.0, 10.0)))
    timeline.add(Hitpoint(500.0, HitpointKind.SLIDER_TAIL, (30.0, 10.0), left_action=ButtonAction.RELEASE))

    frames = FrameSynthesizer().synthesize(timeline, first_start_time=0.0)
    assert [f.time for f in frames] == [-100000.0, -1500.0, -1000.0, -50.0, 0.0, 250.0, 500.0]
    assert [int(f.buttons) for f in frames[3:]] == [0, 1, 1, 0]

    synthesizer = FrameSynthesizer()
    synthesizer.emit_warmup(0.0)
    fired = synthesizer.synthesize_bucket(
        [Hitpoint(100.0, HitpointKind.CIRCLE, (0.0, 0.0), right_action=ButtonAction.CLICK)]
    )
    assert fired == ["click"]
    assert [int(f.buttons) for f in synthesizer.frames()[-3:]] == [0, 2, 0]


if __name__ == "__main__":
    _run_unit_tests()
    print("frame_synthesizer.py: ok")
