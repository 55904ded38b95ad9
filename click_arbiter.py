# -*- coding: utf-8 -*-
########################
# click_arbiter.py
########################
# Purpose:
# - Per-run button session state (hold zones, held flags, last click times).
# - Pure decision of which of the two buttons performs the next click or hold.
#
# Design notes:
# - One ButtonSessionState per generation run. Never shared between runs.
# - A held button's last click time is NaN. NaN compares false against everything,
#   so a held right button never wins the "left clicked more recently" comparison.
# - Last click times start at -inf, so the first click of a run always uses LEFT.
#
########################
# Interfaces:
# Public enums:
# - class Button(enum.Enum): LEFT | RIGHT
#   - other -> Button
#
# Public dataclasses:
# - ButtonSessionState(active_hold_count: int, left_held: bool, right_held: bool,
#                      left_last_click_time: float, right_last_click_time: float)
#   - in_hold_zone -> bool
#   - is_held(button) -> bool
#   - any_held() -> bool
#   - last_click_time(button) -> float
#   - start_hold(button) -> None
#   - end_hold(button, *, last_click_time: float) -> None
#   - record_click(button, *, last_click_time: float) -> None
#
# Public functions:
# - choose_button(state: ButtonSessionState, time_ms: float, alternating_threshold_ms: float) -> Button
#
########################

from __future__ import annotations

import enum
import math
from dataclasses import dataclass


class Button(enum.Enum):
    LEFT = "left"
    RIGHT = "right"

    @property
    def other(self) -> "Button":
        return Button.RIGHT if self is Button.LEFT else Button.LEFT


@dataclass
class ButtonSessionState:
    active_hold_count: int = 0
    left_held: bool = False
    right_held: bool = False
    left_last_click_time: float = -math.inf
    right_last_click_time: float = -math.inf

    @property
    def in_hold_zone(self) -> bool:
        return self.active_hold_count > 0

    def is_held(self, button: Button) -> bool:
        return self.left_held if button is Button.LEFT else self.right_held

    def any_held(self) -> bool:
        return self.left_held or self.right_held

    def last_click_time(self, button: Button) -> float:
        return self.left_last_click_time if button is Button.LEFT else self.right_last_click_time

    def _set(self, button: Button, *, held: bool, last_click_time: float) -> None:
        if button is Button.LEFT:
            self.left_held = held
            self.left_last_click_time = float(last_click_time)
        else:
            self.right_held = held
            self.right_last_click_time = float(last_click_time)

    def start_hold(self, button: Button) -> None:
        self._set(button, held=True, last_click_time=math.nan)

    def end_hold(self, button: Button, *, last_click_time: float) -> None:
        self._set(button, held=False, last_click_time=last_click_time)

    def record_click(self, button: Button, *, last_click_time: float) -> None:
        self._set(button, held=False, last_click_time=last_click_time)


def choose_button(state: ButtonSessionState, time_ms: float, alternating_threshold_ms: float) -> Button:
    if state.left_held:
        # Never hold both buttons at once.
        return Button.RIGHT

    if float(time_ms) - state.left_last_click_time > float(alternating_threshold_ms) or state.right_held:
        # Single tapping, or right is busy holding.
        return Button.LEFT

    if state.left_last_click_time > state.right_last_click_time:
        # Left was used more recently; alternate.
        return Button.RIGHT

    return Button.LEFT


def _run_unit_tests() -> None:
    state = ButtonSessionState()
    assert choose_button(state, 0.0, 500.0) is Button.LEFT

    state.record_click(Button.LEFT, last_click_time=50.0)
    assert choose_button(state, 100.0, 500.0) is Button.RIGHT
    assert choose_button(state, 1000.0, 500.0) is Button.LEFT

    state.start_hold(Button.LEFT)
    assert math.isnan(state.left_last_click_time)
    assert choose_button(state, 100.0, 500.0) is Button.RIGHT

    state.end_hold(Button.LEFT, last_click_time=150.0)
    state.start_hold(Button.RIGHT)
    assert choose_button(state, 160.0, 500.0) is Button.LEFT


if __name__ == "__main__":
    _run_unit_tests()
    print("click_arbiter.py: ok")
