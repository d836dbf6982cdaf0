"""VoiceViz GUI: PySide6 front-end for the voice visualizer."""


def main():
    from .mainwindow import main as _main
    _main()


__all__ = ["main"]
