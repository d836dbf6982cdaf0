from voicevizlib.generation import GenerationGate


def test_generations_increase():
    gate = GenerationGate()
    a = gate.next()
    b = gate.next()
    assert b > a
    assert gate.latest == b


def test_only_latest_is_current():
    gate = GenerationGate()
    first = gate.next()
    second = gate.next()
    assert not gate.is_current(first)
    assert gate.is_current(second)


def test_invalidate_supersedes_in_flight():
    gate = GenerationGate()
    gen = gate.next()
    gate.invalidate()
    assert not gate.is_current(gen)
