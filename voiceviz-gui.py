"""
VoiceViz GUI: live and recorded voice waveform visualizer.

Usage:
    python voiceviz-gui.py

Requires: PySide6, sounddevice (install via `pip install voiceviz[gui]`)
"""

from voicevizgui import main

if __name__ == "__main__":
    main()
