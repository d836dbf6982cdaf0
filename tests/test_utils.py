from voicevizlib.utils import format_duration, format_recording_time, format_time


def test_minutes_and_seconds():
    assert format_time(0) == "00:00"
    assert format_time(65.9) == "01:05"
    assert format_time(3599) == "59:59"


def test_hours_shown_when_needed():
    assert format_time(3600) == "01:00:00"
    assert format_time(3725) == "01:02:05"


def test_negative_clamps_to_zero():
    assert format_time(-5) == "00:00"


def test_recording_clock():
    assert format_recording_time(42) == "00:42"


def test_duration_label():
    assert format_duration(12.34) == "12.3s"
    assert format_duration(90) == "01:30"
