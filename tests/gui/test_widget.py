import numpy as np
import pytest

from PySide6.QtCore import QPoint, Qt
from PySide6.QtTest import QTest

from voicevizlib.config import VisualizerOptions
from voicevizlib.geometry import live_capacity
from voicevizlib.models import LiveState
from voicevizgui.waveform import VoiceVisualizerWidget


def _options(**overrides):
    base = dict(resize_debounce_ms=10, mobile_breakpoint=0, frame_interval_ms=5,
                speed=1)
    base.update(overrides)
    return VisualizerOptions(**base)


def _wait_until(predicate, timeout_ms=2000):
    waited = 0
    while not predicate() and waited < timeout_ms:
        QTest.qWait(10)
        waited += 10
    return predicate()


@pytest.fixture
def make_widget(qapp):
    widgets = []

    def factory(**overrides):
        w = VoiceVisualizerWidget(_options(**overrides))
        w.resize(300, 100)
        w.show()
        assert _wait_until(lambda: w.geometry_info is not None)
        widgets.append(w)
        return w

    yield factory
    for w in widgets:
        w.shutdown()
        w.close()
        w.deleteLater()


def test_geometry_follows_widget_size(make_widget):
    w = make_widget()
    g = w.geometry_info
    assert g.logical_width == 300
    assert g.pixel_width == round(300 * g.device_pixel_ratio)
    assert w.surface is not None
    assert w.surface.width() == g.pixel_width


def test_recording_is_extracted(make_widget):
    w = make_widget()
    w.set_recording(np.sin(np.linspace(0, 40, 8000)), 10.0)
    assert _wait_until(lambda: w.bars.size > 0)
    assert len(w.bars) == w.geometry_info.slot_count
    assert not w.is_processing


def test_click_emits_seek_time(make_widget):
    w = make_widget()
    w.set_recording(np.ones(4000), 10.0)
    assert _wait_until(lambda: w.bars.size > 0)
    seeks = []
    w.seek_requested.connect(seeks.append)
    QTest.mouseClick(w, Qt.LeftButton, Qt.NoModifier, QPoint(150, 50))
    assert seeks == [pytest.approx(5.0)]


def test_no_seek_without_duration(make_widget):
    w = make_widget()
    w.set_recording(np.ones(4000), 0.0)
    seeks = []
    w.seek_requested.connect(seeks.append)
    QTest.mouseClick(w, Qt.LeftButton, Qt.NoModifier, QPoint(150, 50))
    assert seeks == []


def test_only_recording_mode_suppresses_static_and_seek(make_widget):
    w = make_widget(only_recording=True)
    w.set_recording(np.ones(4000), 10.0)
    QTest.qWait(50)
    assert w.bars.size == 0
    assert not w.has_recording
    seeks = []
    w.seek_requested.connect(seeks.append)
    QTest.mouseClick(w, Qt.LeftButton, Qt.NoModifier, QPoint(150, 50))
    assert seeks == []


def test_live_stream_appends_picks(make_widget):
    w = make_widget()
    w.start_recording()
    assert w.live_state is LiveState.STREAMING
    w.amplitude_stream.push(0.8)
    assert _wait_until(lambda: w.live.accepted_ticks > 2)
    assert len(w.live.ring) == live_capacity(w.geometry_info, fullscreen=False)
    assert len(w.live.ring) < w.geometry_info.slot_count
    assert max(w.live.ring.amplitudes()) == pytest.approx(0.8)


def test_full_width_stream_uses_every_slot(make_widget):
    w = make_widget(fullscreen=True)
    w.start_recording()
    assert len(w.live.ring) == w.geometry_info.slot_count


def test_switching_layout_resizes_the_ring(make_widget):
    w = make_widget()
    w.start_recording()
    half = len(w.live.ring)
    w.set_options(_options(fullscreen=True))
    assert len(w.live.ring) == w.geometry_info.slot_count
    assert len(w.live.ring) > half


def test_pause_holds_the_ring(make_widget):
    w = make_widget()
    w.start_recording()
    assert _wait_until(lambda: w.live.accepted_ticks > 0)
    w.toggle_pause_resume()
    assert w.live_state is LiveState.PAUSED
    ticks = w.live.accepted_ticks
    QTest.qWait(50)
    assert w.live.accepted_ticks == ticks
    w.toggle_pause_resume()
    assert w.live_state is LiveState.STREAMING


def test_stop_and_clear(make_widget):
    w = make_widget()
    w.start_recording()
    w.stop_recording()
    assert w.live_state is LiveState.IDLE
    assert w.live.ring is None
    w.set_recording(np.ones(2000), 5.0)
    assert _wait_until(lambda: w.bars.size > 0)
    w.clear()
    assert w.is_cleared
    assert w.bars.size == 0
    assert not w.has_recording


def test_recording_ignored_while_streaming(make_widget):
    w = make_widget()
    w.start_recording()
    w.set_recording(np.ones(2000), 5.0)
    assert not w.has_recording
