import dataclasses

import numpy as np
import pytest

from voicevizlib.models import (
    ExtractionRequest, ExtractionResult, PlaybackState, SurfaceGeometry,
)


def test_geometry_is_immutable():
    g = SurfaceGeometry(300, 100, 2, 1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        g.pixel_width = 10


def test_geometry_derived_values():
    g = SurfaceGeometry(300, 100, 2, 1)
    assert g.pitch == 3
    assert g.slot_count == 100
    assert not g.is_empty
    assert SurfaceGeometry(0, 100, 2, 1).is_empty


def test_playback_progress():
    assert PlaybackState(5.0, 10.0).progress == pytest.approx(0.5)
    assert PlaybackState(5.0, 0.0).progress == 0.0
    assert PlaybackState(15.0, 10.0).progress == 1.0


def test_request_holds_read_only_copy():
    samples = np.array([0.1, 0.2, 0.3])
    req = ExtractionRequest.build(7, samples, SurfaceGeometry(30, 10, 2, 1))
    samples[0] = 9.0
    assert req.samples[0] == pytest.approx(0.1)
    assert not req.samples.flags.writeable
    assert (req.generation, req.pixel_width, req.bar_width) == (7, 30, 2)


def test_result_defaults_to_empty_bars():
    res = ExtractionResult(3, error="boom")
    assert res.bars.size == 0
    assert not res.ok


def test_request_keeps_only_first_channel():
    stereo = np.zeros((40, 2))
    stereo[:, 1] = 1.0
    stereo[5, 0] = 0.25
    req = ExtractionRequest.build(1, stereo, SurfaceGeometry(30, 10, 2, 1))
    assert req.samples.shape == (40,)
    assert req.samples.max() == pytest.approx(0.25)
