import numpy as np
import pytest

from voicevizlib.live import (
    AmplitudeStream, LiveStreamState, PickRing, normalize_amplitude,
)
from voicevizlib.models import LiveState


class TestNormalizeAmplitude:
    def test_absolute_and_clipped(self):
        assert normalize_amplitude(-0.3) == pytest.approx(0.3)
        assert normalize_amplitude(1.7) == 1.0
        assert normalize_amplitude(float("nan")) == 0.0


class TestAmplitudeStream:
    def test_consume_latest_returns_newest(self):
        s = AmplitudeStream()
        s.extend([0.1, 0.9, 0.4])
        assert s.consume_latest() == pytest.approx(0.4)

    def test_consumed_backlog_is_not_reread(self):
        s = AmplitudeStream()
        s.push(0.5)
        assert s.consume_latest() == pytest.approx(0.5)
        assert s.consume_latest() is None

    def test_bounded(self):
        s = AmplitudeStream(maxlen=8)
        s.extend([0.1] * 20)
        assert len(s) == 8
        assert s.total == 20

    def test_clear(self):
        s = AmplitudeStream()
        s.push(0.2)
        s.clear()
        assert s.consume_latest() is None
        assert s.total == 0


class TestPickRing:
    def test_length_is_capacity(self):
        ring = PickRing(5)
        assert len(ring) == 5
        ring.push(0.1)
        assert len(ring) == 5

    def test_push_appends_at_right_and_shifts_left(self):
        ring = PickRing(3)
        for v in (0.1, 0.2, 0.3, 0.4):
            ring.push(v)
        np.testing.assert_allclose(ring.amplitudes(), [0.2, 0.3, 0.4])
        assert ring.current.amplitude == pytest.approx(0.4)

    def test_unfilled_slots_are_none(self):
        ring = PickRing(3)
        ring.push(0.5)
        picks = ring.picks()
        assert picks[0] is None and picks[1] is None
        assert picks[2].amplitude == 0.5

    def test_resize_keeps_newest_right_aligned(self):
        ring = PickRing(4)
        for v in (0.1, 0.2, 0.3, 0.4):
            ring.push(v)
        ring.resize(2)
        np.testing.assert_allclose(ring.amplitudes(), [0.3, 0.4])
        ring.resize(4)
        np.testing.assert_allclose(ring.amplitudes(), [0.0, 0.0, 0.3, 0.4])
        assert len(ring) == 4

    def test_zero_capacity(self):
        ring = PickRing(0)
        assert ring.push(0.5) is None
        assert ring.current is None


class TestLiveStreamState:
    def test_transitions(self):
        live = LiveStreamState()
        assert live.state is LiveState.IDLE
        assert live.start(10)
        assert live.state is LiveState.STREAMING
        assert live.toggle_pause()
        assert live.state is LiveState.PAUSED
        assert live.toggle_pause()
        assert live.state is LiveState.STREAMING
        assert live.stop()
        assert live.state is LiveState.IDLE
        assert live.ring is None

    def test_start_only_from_idle(self):
        live = LiveStreamState()
        live.start(4)
        assert not live.start(4)

    def test_pause_requires_streaming(self):
        live = LiveStreamState()
        assert not live.pause()
        assert not live.toggle_pause()

    def test_throttle_accepts_every_speed_ticks(self):
        live = LiveStreamState(speed=3)
        live.start(50)
        stream = AmplitudeStream()
        accepted = [live.tick(stream) for _ in range(12)]
        assert accepted.count(True) == 4
        assert accepted[2] and accepted[5] and not accepted[0]

    def test_speed_one_accepts_every_tick(self):
        live = LiveStreamState(speed=1)
        live.start(5)
        assert all(live.tick(None) for _ in range(5))

    def test_paused_ticks_do_nothing(self):
        live = LiveStreamState(speed=1)
        live.start(5)
        live.pause()
        assert not live.tick(None)
        assert live.accepted_ticks == 0

    def test_empty_stream_appends_zero(self):
        live = LiveStreamState(speed=1)
        live.start(3)
        live.tick(AmplitudeStream())
        assert live.ring.current.amplitude == 0.0

    def test_tick_uses_newest_value(self):
        live = LiveStreamState(speed=1)
        live.start(3)
        stream = AmplitudeStream()
        stream.extend([0.9, 0.2])
        live.tick(stream)
        assert live.ring.current.amplitude == pytest.approx(0.2)

    def test_force_next(self):
        live = LiveStreamState(speed=5)
        live.start(3)
        live.force_next()
        assert live.tick(None)

    def test_set_capacity_resizes_ring(self):
        live = LiveStreamState(speed=1)
        live.start(3)
        live.tick(None)
        live.set_capacity(6)
        assert len(live.ring) == 6
        assert live.has_data

    def test_emphasis_cycles(self):
        live = LiveStreamState(speed=1)
        live.start(3)
        values = set()
        for _ in range(6):
            live.tick(None)
            values.add(round(live.emphasis, 6))
        assert len(values) > 1
        assert all(0.45 <= v <= 1.0 for v in values)

    def test_emphasis_constant_without_animation(self):
        live = LiveStreamState(speed=1, animate_current_pick=False)
        live.start(3)
        live.tick(None)
        assert live.emphasis == 1.0

    def test_speed_clamped(self):
        live = LiveStreamState(speed=0)
        assert live.speed == 1
