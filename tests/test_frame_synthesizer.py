from button_engine import ButtonAssignmentEngine
from frame_synthesizer import ButtonState, FrameSynthesizer, ReplayFrame, frames_to_rows
from hitobject_models import Circle, Slider
from hitpoints import ButtonAction, Hitpoint, HitpointKind, HitpointTimeline, extract_hitpoints


def make_timeline(*hitpoints):
    timeline = HitpointTimeline()
    for hitpoint in hitpoints:
        timeline.add(hitpoint)
    return timeline


def rows(frames):
    return [(f.time, int(f.buttons)) for f in frames]


def warmed_up(first_start_time=0.0):
    synthesizer = FrameSynthesizer()
    synthesizer.emit_warmup(first_start_time)
    return synthesizer


def test_warmup_frames():
    frames = FrameSynthesizer().synthesize(
        make_timeline(Hitpoint(2000.0, HitpointKind.SLIDER_TICK, (1.0, 1.0))),
        first_start_time=2000.0,
    )
    assert frames[:3] == [
        ReplayFrame(time=-100000.0, x=256.0, y=500.0, buttons=ButtonState.NONE),
        ReplayFrame(time=500.0, x=256.0, y=500.0, buttons=ButtonState.NONE),
        ReplayFrame(time=1000.0, x=256.0, y=192.0, buttons=ButtonState.NONE),
    ]


def test_click_emits_anchor_press_and_restore():
    synthesizer = warmed_up()
    fired = synthesizer.synthesize_bucket(
        [Hitpoint(500.0, HitpointKind.CIRCLE, (40.0, 60.0), left_action=ButtonAction.CLICK)]
    )
    assert fired == ["click"]
    click_frames = synthesizer.frames()[3:]
    assert rows(click_frames) == [(450.0, 0), (500.0, 1), (550.0, 0)]
    assert all(f.position == (40.0, 60.0) for f in click_frames)


def test_hold_has_no_restore_frame():
    synthesizer = warmed_up()
    fired = synthesizer.synthesize_bucket(
        [Hitpoint(0.0, HitpointKind.SLIDER_HEAD, (0.0, 0.0), right_action=ButtonAction.HOLD)]
    )
    assert fired == ["hold"]
    assert rows(synthesizer.frames()[3:]) == [(-50.0, 0), (0.0, 2)]


def test_click_during_hold_keeps_held_bit():
    timeline = make_timeline(
        Hitpoint(0.0, HitpointKind.SPINNER_START, (256.0, 192.0), left_action=ButtonAction.HOLD),
        Hitpoint(1000.0, HitpointKind.CIRCLE, (50.0, 50.0), right_action=ButtonAction.CLICK),
        Hitpoint(2000.0, HitpointKind.SPINNER_END, (256.0, 192.0), left_action=ButtonAction.RELEASE),
    )
    frames = FrameSynthesizer().synthesize(timeline, first_start_time=0.0)
    assert rows(frames[3:]) == [
        (-50.0, 0),
        (0.0, 1),
        (950.0, 1),
        (1000.0, 3),
        (1050.0, 1),
        (2000.0, 0),
    ]


def test_movement_carries_state_forward():
    synthesizer = warmed_up()
    synthesizer.synthesize_bucket([Hitpoint(0.0, HitpointKind.SLIDER_HEAD, (0.0, 0.0), left_action=ButtonAction.HOLD)])
    fired = synthesizer.synthesize_bucket(
        [
            Hitpoint(250.0, HitpointKind.SLIDER_TICK, (25.0, 0.0)),
            Hitpoint(250.0, HitpointKind.SLIDER_TICK, (99.0, 99.0)),
        ]
    )
    assert fired == ["movement"]
    last = synthesizer.frames()[-1]
    assert (last.time, last.position, last.buttons) == (250.0, (25.0, 0.0), ButtonState.LEFT)


def test_only_first_release_in_bucket_is_used():
    synthesizer = warmed_up()
    synthesizer.synthesize_bucket([Hitpoint(0.0, HitpointKind.SLIDER_HEAD, (0.0, 0.0), left_action=ButtonAction.HOLD)])
    before = len(synthesizer.frames())
    fired = synthesizer.synthesize_bucket(
        [
            Hitpoint(500.0, HitpointKind.SLIDER_TAIL, (1.0, 1.0), right_action=ButtonAction.RELEASE),
            Hitpoint(500.0, HitpointKind.SPINNER_END, (2.0, 2.0), left_action=ButtonAction.RELEASE),
        ]
    )
    assert fired == ["release"]
    new_frames = synthesizer.frames()[before:]
    assert len(new_frames) == 1
    assert new_frames[0].position == (1.0, 1.0)
    # Clearing the right bit leaves the left hold untouched.
    assert new_frames[0].buttons == ButtonState.LEFT


def test_forced_release_and_new_hold_on_same_hitpoint():
    synthesizer = warmed_up()
    synthesizer.synthesize_bucket([Hitpoint(0.0, HitpointKind.SLIDER_HEAD, (0.0, 0.0), left_action=ButtonAction.HOLD)])
    fired = synthesizer.synthesize_bucket(
        [
            Hitpoint(400.0, HitpointKind.SLIDER_TAIL, (100.0, 0.0)),
            Hitpoint(
                400.0,
                HitpointKind.SLIDER_HEAD,
                (100.0, 0.0),
                left_action=ButtonAction.RELEASE,
                right_action=ButtonAction.HOLD,
            ),
        ]
    )
    assert fired == ["release", "hold"]
    # The hold anchor keeps its fixed lead even though the release frame came first.
    assert rows(synthesizer.frames()[-3:]) == [(400.0, 0), (350.0, 0), (400.0, 2)]


def test_click_beats_hold_in_same_bucket():
    synthesizer = warmed_up()
    fired = synthesizer.synthesize_bucket(
        [
            Hitpoint(0.0, HitpointKind.SLIDER_HEAD, (0.0, 0.0), left_action=ButtonAction.HOLD),
            Hitpoint(0.0, HitpointKind.CIRCLE, (5.0, 5.0), right_action=ButtonAction.CLICK),
        ]
    )
    assert fired == ["click"]


def test_anchor_sits_fixed_lead_before_press_in_dense_stream():
    timeline = make_timeline(
        Hitpoint(0.0, HitpointKind.CIRCLE, (0.0, 0.0), left_action=ButtonAction.CLICK),
        Hitpoint(60.0, HitpointKind.CIRCLE, (10.0, 0.0), right_action=ButtonAction.CLICK),
    )
    frames = FrameSynthesizer().synthesize(timeline, first_start_time=0.0)
    assert rows(frames[3:6]) == [(-50.0, 0), (0.0, 1), (50.0, 0)]
    # The second anchor lands before the first key-up frame.
    assert rows(frames[6:]) == [(10.0, 0), (60.0, 2), (110.0, 0)]
    assert frames[6].position == (10.0, 0.0)


def test_release_then_click_on_shared_timestamp():
    timeline = extract_hitpoints(
        [
            Slider(start_time=0.0, position=(0.0, 0.0), end_time=500.0, end_position=(100.0, 0.0)),
            Circle(start_time=500.0, position=(100.0, 0.0)),
        ]
    )
    ButtonAssignmentEngine(alternating_threshold_ms=500.0).assign(timeline)

    synthesizer = warmed_up()
    fired = [synthesizer.synthesize_bucket(bucket) for _time, bucket in timeline.buckets()]
    assert fired == [["hold"], ["release", "click"]]
    # Left is released at the tail; the circle alternates onto right.
    assert rows(synthesizer.frames()[3:]) == [
        (-50.0, 0),
        (0.0, 1),
        (500.0, 0),
        (450.0, 0),
        (500.0, 2),
        (550.0, 0),
    ]


def test_frames_to_rows():
    assert frames_to_rows([ReplayFrame(time=1.0, x=2.0, y=3.0, buttons=ButtonState.LEFT | ButtonState.RIGHT)]) == [
        {"time": 1.0, "x": 2.0, "y": 3.0, "buttons": 3}
    ]
