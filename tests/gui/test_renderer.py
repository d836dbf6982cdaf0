import numpy as np
import pytest

from PySide6.QtGui import QColor, QPainter

from voicevizlib.config import VisualizerOptions
from voicevizlib.geometry import live_capacity
from voicevizlib.live import LiveStreamState
from voicevizlib.models import PlaybackState, SurfaceGeometry
from voicevizgui.waveform.renderer import (
    BarPaintCtx, LiveBarRenderer, StaticBarRenderer, new_surface,
    render_static_image,
)

WHITE = QColor("#ffffff")
GREY = QColor("#5e5e5e")

OPTIONS = VisualizerOptions(rounded=0, main_bar_color="#ffffff",
                            secondary_bar_color="#5e5e5e")
FULL_WIDTH = VisualizerOptions(rounded=0, main_bar_color="#ffffff",
                               secondary_bar_color="#5e5e5e", fullscreen=True)


def _pixel(image, x, y) -> QColor:
    return image.pixelColor(x, y)


def _paint(renderer, geometry, *args, options=OPTIONS, **kwargs):
    image = new_surface(geometry)
    painter = QPainter(image)
    try:
        drawn = renderer.paint(painter, BarPaintCtx.from_options(geometry, options),
                               *args, **kwargs)
    finally:
        painter.end()
    return image, drawn


@pytest.fixture
def geometry():
    # 10 bars of 4px with 2px gaps
    return SurfaceGeometry(60, 40, 4, 2)


class TestStaticRenderer:
    def test_played_bars_use_primary_color(self, qapp, geometry):
        r = StaticBarRenderer()
        r.set_bars(np.ones(10), geometry.pixel_width)
        image, drawn = _paint(r, geometry, PlaybackState(5.0, 10.0))
        assert drawn
        assert _pixel(image, 1, 20) == WHITE      # bar 0, played
        assert _pixel(image, 55, 20) == GREY      # bar 9, unplayed

    def test_zero_duration_paints_all_secondary(self, qapp, geometry):
        r = StaticBarRenderer()
        r.set_bars(np.ones(10), geometry.pixel_width)
        image, _ = _paint(r, geometry, PlaybackState(0.0, 0.0))
        assert _pixel(image, 1, 20) == GREY

    def test_gap_stays_background(self, qapp, geometry):
        r = StaticBarRenderer()
        r.set_bars(np.ones(10), geometry.pixel_width)
        image, _ = _paint(r, geometry, PlaybackState(0.0, 10.0))
        assert _pixel(image, 5, 20).alpha() == 0

    def test_bars_mirrored_about_centre(self, qapp, geometry):
        r = StaticBarRenderer()
        r.set_bars(np.full(10, 0.5), geometry.pixel_width)
        image, _ = _paint(r, geometry, PlaybackState(0.0, 10.0))
        assert _pixel(image, 1, 20).alpha() == 255
        assert _pixel(image, 1, 12).alpha() == 255
        assert _pixel(image, 1, 2).alpha() == 0
        assert _pixel(image, 1, 37).alpha() == 0

    def test_empty_sequence_only_clears(self, qapp, geometry):
        image, drawn = _paint(StaticBarRenderer(), geometry, PlaybackState(0, 10))
        assert drawn
        assert _pixel(image, 1, 20).alpha() == 0

    def test_cleared_flag_empties_bars(self, qapp, geometry):
        r = StaticBarRenderer()
        r.set_bars(np.ones(10), geometry.pixel_width)
        _, drawn = _paint(r, geometry, PlaybackState(0, 10), cleared=True)
        assert not drawn
        assert not r.has_bars

    def test_skips_while_resizing(self, qapp, geometry):
        r = StaticBarRenderer()
        r.set_bars(np.ones(10), geometry.pixel_width)
        image, drawn = _paint(r, geometry, PlaybackState(0, 10), resizing=True)
        assert not drawn
        assert _pixel(image, 1, 20).alpha() == 0

    def test_bars_for_other_width_are_not_drawn(self, qapp, geometry):
        r = StaticBarRenderer()
        r.set_bars(np.ones(10), 120)
        image, _ = _paint(r, geometry, PlaybackState(0, 10))
        assert _pixel(image, 1, 20).alpha() == 0

    def test_background_color_filled(self, qapp, geometry):
        opts = VisualizerOptions(background_color="#ff0000")
        image = render_static_image(np.zeros(0), geometry, PlaybackState(), opts)
        assert _pixel(image, 5, 5) == QColor("#ff0000")

    def test_empty_geometry_gives_no_image(self, qapp):
        g = SurfaceGeometry(0, 40, 4, 2)
        assert render_static_image(np.ones(3), g, PlaybackState(), OPTIONS) is None


class TestLiveRenderer:
    def test_idle_draws_nothing(self, qapp, geometry):
        _, drawn = _paint(LiveBarRenderer(), geometry, LiveStreamState())
        assert not drawn

    def test_full_width_newest_pick_at_right_edge(self, qapp, geometry):
        live = LiveStreamState(speed=1, animate_current_pick=False)
        live.start(live_capacity(geometry, fullscreen=True))
        live.ring.push(1.0)
        image, drawn = _paint(LiveBarRenderer(), geometry, live, options=FULL_WIDTH)
        assert drawn
        assert _pixel(image, 58, 5) == WHITE
        assert _pixel(image, 1, 5).alpha() == 0

    def test_full_width_older_picks_shift_left(self, qapp, geometry):
        live = LiveStreamState(speed=1, animate_current_pick=False)
        live.start(live_capacity(geometry, fullscreen=True))
        live.ring.push(1.0)
        live.ring.push(0.0)
        image, _ = _paint(LiveBarRenderer(), geometry, live, options=FULL_WIDTH)
        # previous slot sits one pitch to the left of the last one
        assert _pixel(image, 52, 5) == WHITE
        assert _pixel(image, 58, 5).alpha() == 0

    def test_centred_stream_ends_at_middle(self, qapp, geometry):
        live = LiveStreamState(speed=1, animate_current_pick=False)
        live.start(live_capacity(geometry, fullscreen=False))
        assert len(live.ring) == 5
        live.ring.push(1.0)
        image, _ = _paint(LiveBarRenderer(), geometry, live)
        # last slot spans [26, 30): flush with the centre
        assert _pixel(image, 28, 5) == WHITE
        assert _pixel(image, 31, 5).alpha() == 0
        assert _pixel(image, 58, 5).alpha() == 0

    def test_centred_stream_fills_left_half_only(self, qapp, geometry):
        live = LiveStreamState(speed=1, animate_current_pick=False)
        live.start(live_capacity(geometry, fullscreen=False))
        for _ in range(10):
            live.ring.push(1.0)
        image, _ = _paint(LiveBarRenderer(), geometry, live)
        assert _pixel(image, 2, 5) == WHITE       # slot 0 at [2, 6)
        assert _pixel(image, 22, 5) == WHITE
        for x in range(31, 60):
            assert _pixel(image, x, 5).alpha() == 0

    def test_centre_line_while_streaming(self, qapp, geometry):
        live = LiveStreamState(speed=1)
        live.start(live_capacity(geometry))
        image, _ = _paint(LiveBarRenderer(), geometry, live)
        assert _pixel(image, 1, 20) == GREY

    def test_no_centre_line_while_paused(self, qapp, geometry):
        live = LiveStreamState(speed=1)
        live.start(live_capacity(geometry))
        live.pause()
        image, _ = _paint(LiveBarRenderer(), geometry, live)
        assert _pixel(image, 1, 20).alpha() == 0
