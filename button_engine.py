# -*- coding: utf-8 -*-
########################
# button_engine.py
########################
# Purpose:
# - Button assignment engine.
# - Walks the hitpoint timeline bucket by bucket and writes left/right actions
#   (click, hold, release) onto hitpoints in place.
#
# Design notes:
# - No I/O. Deterministic. Produces no frames itself.
# - Buckets are resolved in ascending time and one bucket is fully resolved before the next.
# - Four passes per bucket, in this order:
#   1) open hold zones (slider heads, spinner starts)
#   2) close hold zones (slider tails, spinner ends) and release if no zone remains
#   3) primary click: first slider head (becomes a hold), else first circle
#   4) spinner engagement when nothing is held, a zone is active and the bucket was not consumed
# - At most one hitpoint per bucket receives a click/hold from passes 3 and 4.
# - Session state is owned by the engine instance for one run. Build a new engine per run.
#
########################
# Interfaces:
# Public exceptions:
# - class HoldStateError(RuntimeError)
#
# Public classes:
# - class ButtonAssignmentEngine
#   - __init__(*, alternating_threshold_ms: float, release_delay_ms: float = KEY_UP_DELAY_MS)
#   - session_state() -> ButtonSessionState
#   - assign(timeline: HitpointTimeline) -> ButtonSessionState
#   - resolve_bucket(bucket: list[Hitpoint]) -> None
#
# Inputs:
# - HitpointTimeline from hitpoints.extract_hitpoints.
#
# Outputs:
# - The same timeline, with actions written onto its hitpoints.
# - Raises HoldStateError if a hold zone closes while neither button is held.
#
########################

from __future__ import annotations

import logging
from typing import List, Optional

from click_arbiter import Button, ButtonSessionState, choose_button
from hitpoints import (
    HOLD_CLOSING_KINDS,
    HOLD_OPENING_KINDS,
    ButtonAction,
    Hitpoint,
    HitpointKind,
    HitpointTimeline,
)


KEY_UP_DELAY_MS = 50.0

logger = logging.getLogger(__name__)


class HoldStateError(RuntimeError):
    """Raised when a hold zone closes while neither button is held."""

    def __init__(self, hitpoint: Hitpoint) -> None:
        super().__init__(
            f"Hold zone closed at t={hitpoint.time} ({hitpoint.kind.value}) while neither button was held"
        )
        self.time = float(hitpoint.time)
        self.kind = hitpoint.kind


def _set_action(hitpoint: Hitpoint, button: Button, action: ButtonAction) -> None:
    if button is Button.LEFT:
        hitpoint.left_action = action
    else:
        hitpoint.right_action = action


def _first_of_kind(bucket: List[Hitpoint], kind: HitpointKind) -> Optional[Hitpoint]:
    for hitpoint in bucket:
        if hitpoint.kind is kind:
            return hitpoint
    return None


class ButtonAssignmentEngine:
    def __init__(self, *, alternating_threshold_ms: float, release_delay_ms: float = KEY_UP_DELAY_MS) -> None:
        self._alternating_threshold_ms = float(alternating_threshold_ms)
        self._release_delay_ms = float(release_delay_ms)
        self._state = ButtonSessionState()

    def session_state(self) -> ButtonSessionState:
        return self._state

    def assign(self, timeline: HitpointTimeline) -> ButtonSessionState:
        for _time, bucket in timeline.buckets():
            self.resolve_bucket(bucket)
        return self._state

    def resolve_bucket(self, bucket: List[Hitpoint]) -> None:
        # Open before closing, so a tail sharing a timestamp with the next head does not release.
        for hitpoint in bucket:
            if hitpoint.kind in HOLD_OPENING_KINDS:
                self._state.active_hold_count += 1

        for hitpoint in bucket:
            if hitpoint.kind in HOLD_CLOSING_KINDS:
                self._state.active_hold_count -= 1
                self._release(hitpoint)

        consumed = False
        slider_head = _first_of_kind(bucket, HitpointKind.SLIDER_HEAD)
        if slider_head is not None:
            self._click(slider_head, reengage=True)
            consumed = True
        else:
            circle = _first_of_kind(bucket, HitpointKind.CIRCLE)
            if circle is not None:
                self._click(circle, reengage=False)
                consumed = True

        if not consumed and not self._state.any_held() and self._state.in_hold_zone:
            spinner_start = _first_of_kind(bucket, HitpointKind.SPINNER_START)
            if spinner_start is not None:
                self._click(spinner_start, reengage=False)

    def _release(self, hitpoint: Hitpoint) -> None:
        if self._state.in_hold_zone:
            return

        if self._state.left_held:
            button = Button.LEFT
        elif self._state.right_held:
            button = Button.RIGHT
        else:
            raise HoldStateError(hitpoint)

        self._state.end_hold(button, last_click_time=hitpoint.time + self._release_delay_ms)
        _set_action(hitpoint, button, ButtonAction.RELEASE)
        logger.debug("release %s at t=%s", button.value, hitpoint.time)

    def _hold(self, hitpoint: Hitpoint, button: Button) -> None:
        self._state.start_hold(button)
        _set_action(hitpoint, button, ButtonAction.HOLD)
        logger.debug("hold %s at t=%s (%s)", button.value, hitpoint.time, hitpoint.kind.value)

    def _click(self, hitpoint: Hitpoint, *, reengage: bool) -> None:
        button = choose_button(self._state, hitpoint.time, self._alternating_threshold_ms)
        other = button.other

        if reengage:
            if self._state.is_held(other):
                # The release is recorded on this hitpoint, not on the one that opened the hold.
                self._state.end_hold(other, last_click_time=hitpoint.time + self._release_delay_ms)
                _set_action(hitpoint, other, ButtonAction.RELEASE)
                logger.debug("forced release %s at t=%s", other.value, hitpoint.time)
            self._hold(hitpoint, button)
            return

        if self._state.in_hold_zone and not self._state.is_held(other):
            self._hold(hitpoint, button)
            return

        self._state.record_click(button, last_click_time=hitpoint.time + self._release_delay_ms)
        _set_action(hitpoint, button, ButtonAction.CLICK)


def _run_unit_tests() -> None:
    from hitobject_models import Circle, Slider, Spinner
    from hitpoints import extract_hitpoints

    timeline = extract_hitpoints(
        [
            Circle(start_time=0.0, position=(0.0, 0.0)),
            Circle(start_time=100.0, position=(10.0, 0.0)),
            Circle(start_time=1000.0, position=(20.0, 0.0)),
        ]
    )
    ButtonAssignmentEngine(alternating_threshold_ms=500.0).assign(timeline)
    lefts = [h.left_action for h in timeline.hitpoints()]
    rights = [h.right_action for h in timeline.hitpoints()]
    assert lefts == [ButtonAction.CLICK, ButtonAction.NONE, ButtonAction.CLICK]
    assert rights == [ButtonAction.NONE, ButtonAction.CLICK, ButtonAction.NONE]

    timeline = extract_hitpoints(
        [Slider(start_time=0.0, position=(0.0, 0.0), end_time=500.0, end_position=(100.0, 0.0))]
    )
    state = ButtonAssignmentEngine(alternating_threshold_ms=500.0).assign(timeline)
    head, tail = timeline.hitpoints()
    assert head.left_action is ButtonAction.HOLD
    assert tail.left_action is ButtonAction.RELEASE
    assert state.active_hold_count == 0

    timeline = extract_hitpoints(
        [
            Spinner(start_time=0.0, position=(256.0, 192.0), end_time=2000.0),
            Circle(start_time=1000.0, position=(50.0, 50.0)),
        ]
    )
    ButtonAssignmentEngine(alternating_threshold_ms=500.0).assign(timeline)
    start, circle, end = timeline.hitpoints()
    assert start.left_action is ButtonAction.HOLD
    assert circle.right_action is ButtonAction.CLICK
    assert end.left_action is ButtonAction.RELEASE

    broken = HitpointTimeline()
    broken.add(Hitpoint(0.0, HitpointKind.SLIDER_TAIL, (0.0, 0.0)))
    try:
        ButtonAssignmentEngine(alternating_threshold_ms=500.0).assign(broken)
    except HoldStateError:
        pass
    else:
        raise AssertionError("Expected HoldStateError for tail without head")


if __name__ == "__main__":
    _run_unit_tests()
    print("button_engine.py: ok")
