import os

import numpy as np
import soundfile as sf

import voiceviz


def _write_tone(path, seconds=1.0, sr=8000):
    t = np.linspace(0, seconds, int(sr * seconds), endpoint=False)
    sf.write(path, 0.5 * np.sin(2 * np.pi * 220 * t), sr)


def test_renders_png(qapp, tmp_path):
    wav = str(tmp_path / "tone.wav")
    png = str(tmp_path / "tone.png")
    _write_tone(wav)
    code = voiceviz.render([wav, "-o", png, "--width", "120", "--height", "40",
                            "--progress", "0.5"])
    assert code == 0
    assert os.path.getsize(png) > 0


def test_missing_input(tmp_path):
    assert voiceviz.render([str(tmp_path / "missing.wav")]) == 1


def test_invalid_option_is_reported(tmp_path):
    wav = str(tmp_path / "tone.wav")
    _write_tone(wav)
    assert voiceviz.render([wav, "--gap", "-3"]) == 1


def test_summary_without_output(tmp_path, capsys):
    wav = str(tmp_path / "tone.wav")
    _write_tone(wav, seconds=2.0)
    assert voiceviz.render([wav, "--width", "90"]) == 0
    out = capsys.readouterr().out
    assert "Bars" in out
    assert "2.0s" in out
