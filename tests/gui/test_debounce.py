from PySide6.QtTest import QTest

from voicevizgui.waveform.debounce import Debouncer


def test_burst_collapses_into_one_call(qapp):
    calls = []
    d = Debouncer(40, lambda: calls.append(1))
    for _ in range(5):
        d.trigger()
        QTest.qWait(10)
    assert calls == []
    QTest.qWait(120)
    assert calls == [1]


def test_fired_signal(qapp):
    fired = []
    d = Debouncer(10)
    d.fired.connect(lambda: fired.append(True))
    d.trigger()
    QTest.qWait(80)
    assert fired == [True]


def test_cancel(qapp):
    calls = []
    d = Debouncer(20, lambda: calls.append(1))
    d.trigger()
    d.cancel()
    QTest.qWait(60)
    assert calls == []
    assert not d.pending


def test_flush_runs_pending_immediately(qapp):
    calls = []
    d = Debouncer(10_000, lambda: calls.append(1))
    d.flush()
    assert calls == []
    d.trigger()
    assert d.pending
    d.flush()
    assert calls == [1]
    assert not d.pending
