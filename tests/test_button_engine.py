import pytest

from button_engine import ButtonAssignmentEngine, HoldStateError
from hitobject_models import Circle, Slider, SliderTick, Spinner
from hitpoints import ButtonAction, Hitpoint, HitpointKind, HitpointTimeline, extract_hitpoints


def assign(targets, threshold_ms=500.0):
    timeline = extract_hitpoints(targets)
    engine = ButtonAssignmentEngine(alternating_threshold_ms=threshold_ms)
    state = engine.assign(timeline)
    return timeline, state


def actions(timeline):
    return [(h.kind, h.left_action, h.right_action) for h in timeline.hitpoints()]


def held_counts(timeline):
    # Replays HOLD/RELEASE actions and yields how many buttons are held after each hitpoint.
    held = {"left": False, "right": False}
    for hitpoint in timeline.hitpoints():
        for name, action in (("left", hitpoint.left_action), ("right", hitpoint.right_action)):
            if action is ButtonAction.RELEASE:
                held[name] = False
        for name, action in (("left", hitpoint.left_action), ("right", hitpoint.right_action)):
            if action is ButtonAction.HOLD:
                held[name] = True
        yield sum(held.values())


def back_to_back_sliders():
    return [
        Slider(start_time=0.0, position=(0.0, 0.0), end_time=400.0, end_position=(100.0, 0.0)),
        Slider(start_time=400.0, position=(100.0, 0.0), end_time=800.0, end_position=(200.0, 0.0)),
        Spinner(start_time=1000.0, position=(256.0, 192.0), end_time=2000.0),
        Circle(start_time=1500.0, position=(50.0, 50.0)),
        Slider(start_time=1600.0, position=(0.0, 0.0), end_time=1800.0, end_position=(10.0, 0.0)),
    ]


def test_three_circles_alternate_left_right_left():
    timeline, _state = assign(
        [
            Circle(start_time=0.0, position=(0.0, 0.0)),
            Circle(start_time=100.0, position=(1.0, 0.0)),
            Circle(start_time=1000.0, position=(2.0, 0.0)),
        ]
    )
    assert actions(timeline) == [
        (HitpointKind.CIRCLE, ButtonAction.CLICK, ButtonAction.NONE),
        (HitpointKind.CIRCLE, ButtonAction.NONE, ButtonAction.CLICK),
        (HitpointKind.CIRCLE, ButtonAction.CLICK, ButtonAction.NONE),
    ]


def test_circles_spaced_past_threshold_stay_on_left():
    timeline, _state = assign(
        [Circle(start_time=t, position=(0.0, 0.0)) for t in (0.0, 600.0, 1200.0)]
    )
    assert [h.left_action for h in timeline.hitpoints()] == [ButtonAction.CLICK] * 3


def test_fast_stream_alternates():
    timeline, _state = assign([Circle(start_time=t * 120.0, position=(0.0, 0.0)) for t in range(6)])
    used = ["L" if h.left_action is ButtonAction.CLICK else "R" for h in timeline.hitpoints()]
    assert used == ["L", "R", "L", "R", "L", "R"]


def test_slider_holds_then_releases():
    timeline, state = assign(
        [
            Slider(
                start_time=0.0,
                position=(0.0, 0.0),
                end_time=500.0,
                end_position=(100.0, 0.0),
                nested=(SliderTick(start_time=250.0, position=(50.0, 0.0)),),
            )
        ]
    )
    assert actions(timeline) == [
        (HitpointKind.SLIDER_HEAD, ButtonAction.HOLD, ButtonAction.NONE),
        (HitpointKind.SLIDER_TICK, ButtonAction.NONE, ButtonAction.NONE),
        (HitpointKind.SLIDER_TAIL, ButtonAction.RELEASE, ButtonAction.NONE),
    ]
    assert state.active_hold_count == 0
    assert not state.any_held()
    assert state.left_last_click_time == 550.0


def test_hold_count_between_head_and_tail():
    timeline = extract_hitpoints(
        [Slider(start_time=0.0, position=(0.0, 0.0), end_time=500.0, end_position=(100.0, 0.0))]
    )
    engine = ButtonAssignmentEngine(alternating_threshold_ms=500.0)
    (_t0, head_bucket), (_t1, tail_bucket) = timeline.buckets()

    engine.resolve_bucket(head_bucket)
    assert engine.session_state().active_hold_count == 1
    assert engine.session_state().left_held

    engine.resolve_bucket(tail_bucket)
    assert engine.session_state().active_hold_count == 0
    assert not engine.session_state().left_held


def test_spinner_overlapping_circle_clicks_other_button():
    timeline, state = assign(
        [
            Spinner(start_time=0.0, position=(256.0, 192.0), end_time=2000.0),
            Circle(start_time=1000.0, position=(50.0, 50.0)),
        ]
    )
    assert actions(timeline) == [
        (HitpointKind.SPINNER_START, ButtonAction.HOLD, ButtonAction.NONE),
        (HitpointKind.CIRCLE, ButtonAction.NONE, ButtonAction.CLICK),
        (HitpointKind.SPINNER_END, ButtonAction.RELEASE, ButtonAction.NONE),
    ]
    assert state.active_hold_count == 0


def test_back_to_back_sliders_swap_buttons_on_shared_timestamp():
    timeline, _state = assign(back_to_back_sliders()[:2])
    bucket = timeline.bucket_at(400.0)
    tail, head = bucket
    assert tail.kind is HitpointKind.SLIDER_TAIL
    assert (tail.left_action, tail.right_action) == (ButtonAction.NONE, ButtonAction.NONE)
    # The new head releases the first slider's button and holds the other one.
    assert (head.left_action, head.right_action) == (ButtonAction.RELEASE, ButtonAction.HOLD)
    final_tail = timeline.bucket_at(800.0)[0]
    assert final_tail.right_action is ButtonAction.RELEASE


def test_never_holds_both_buttons():
    timeline, state = assign(back_to_back_sliders())
    assert max(held_counts(timeline)) <= 1
    assert state.active_hold_count == 0


def test_hold_zone_conservation():
    targets = back_to_back_sliders()
    timeline, state = assign(targets)
    kinds = [h.kind for h in timeline.hitpoints()]
    opened = sum(1 for k in kinds if k in (HitpointKind.SLIDER_HEAD, HitpointKind.SPINNER_START))
    closed = sum(1 for k in kinds if k in (HitpointKind.SLIDER_TAIL, HitpointKind.SPINNER_END))
    assert state.active_hold_count == opened - closed == 0


def test_at_most_one_click_or_hold_per_bucket():
    timeline, _state = assign(
        [
            Circle(start_time=0.0, position=(0.0, 0.0)),
            Circle(start_time=0.0, position=(5.0, 5.0)),
            Slider(start_time=0.0, position=(9.0, 9.0), end_time=300.0, end_position=(20.0, 9.0)),
        ]
    )
    bucket = timeline.bucket_at(0.0)
    engaged = [
        h for h in bucket
        if h.left_action in (ButtonAction.CLICK, ButtonAction.HOLD) or h.right_action in (ButtonAction.CLICK, ButtonAction.HOLD)
    ]
    assert len(engaged) == 1
    assert engaged[0].kind is HitpointKind.SLIDER_HEAD


def test_spinner_start_with_circle_holds_on_circle():
    timeline, _state = assign(
        [
            Circle(start_time=0.0, position=(0.0, 0.0)),
            Spinner(start_time=0.0, position=(256.0, 192.0), end_time=1000.0),
        ]
    )
    circle, start = timeline.bucket_at(0.0)
    assert circle.left_action is ButtonAction.HOLD
    assert start.left_action is ButtonAction.NONE
    assert timeline.bucket_at(1000.0)[0].left_action is ButtonAction.RELEASE


def test_buckets_resolved_in_time_order():
    seen = []

    class RecordingEngine(ButtonAssignmentEngine):
        def resolve_bucket(self, bucket):
            seen.append(bucket[0].time)
            super().resolve_bucket(bucket)

    timeline = extract_hitpoints(
        [
            Circle(start_time=900.0, position=(0.0, 0.0)),
            Circle(start_time=100.0, position=(0.0, 0.0)),
            Circle(start_time=500.0, position=(0.0, 0.0)),
        ]
    )
    RecordingEngine(alternating_threshold_ms=500.0).assign(timeline)
    assert seen == [100.0, 500.0, 900.0]


def test_tail_without_hold_raises():
    timeline = HitpointTimeline()
    timeline.add(Hitpoint(250.0, HitpointKind.SPINNER_END, (0.0, 0.0)))
    with pytest.raises(HoldStateError) as excinfo:
        ButtonAssignmentEngine(alternating_threshold_ms=500.0).assign(timeline)
    assert excinfo.value.time == 250.0
    assert excinfo.value.kind is HitpointKind.SPINNER_END
