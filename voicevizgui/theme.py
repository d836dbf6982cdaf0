"""Dark window palette and visualizer color parsing."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

COLORS = {
    "window": "#181818",
    "panel": "#242424",
    "raised": "#333333",
    "border": "#4a4a4a",
    "text": "#e0e0e0",
    "muted": "#8c8c8c",
    "disabled": "#5f5f5f",
    "indicator": "#ffffff",
    "hover": "#9a9a9a",
    "selection": "#3d7bd9",
    "recording": "#e5484d",
}


def to_qcolor(value: str | QColor) -> QColor:
    """Parse a CSS-ish color string; ``transparent`` and invalid names are clear."""
    if isinstance(value, QColor):
        return QColor(value)
    name = (value or "").strip()
    if not name or name.lower() == "transparent":
        return QColor(Qt.transparent)
    color = QColor(name)
    return color if color.isValid() else QColor(Qt.transparent)


def _stylesheet(c: dict[str, str]) -> str:
    return f"""
    QMainWindow, QWidget#visualizerHost {{ background-color: {c['window']}; }}
    QToolBar {{ background-color: {c['panel']}; border: none;
               border-bottom: 1px solid {c['border']}; spacing: 4px; padding: 3px; }}
    QToolBar QToolButton {{ color: {c['text']}; padding: 4px 10px; border-radius: 3px; }}
    QToolBar QToolButton:hover {{ background-color: {c['raised']}; }}
    QToolBar QToolButton:disabled {{ color: {c['disabled']}; }}
    QStatusBar {{ background-color: {c['panel']}; color: {c['muted']}; }}
    QStatusBar QLabel {{ color: {c['text']}; padding: 0 6px; }}
    """


_PALETTE_ROLES = (
    (QPalette.Window, "window"),
    (QPalette.WindowText, "text"),
    (QPalette.Base, "panel"),
    (QPalette.AlternateBase, "raised"),
    (QPalette.Button, "raised"),
    (QPalette.ButtonText, "text"),
    (QPalette.Text, "text"),
    (QPalette.Highlight, "selection"),
    (QPalette.HighlightedText, "indicator"),
)


def apply_dark_theme(window) -> None:
    """Install the dark palette on the application and style *window*."""
    palette = QPalette()
    for role, key in _PALETTE_ROLES:
        palette.setColor(role, QColor(COLORS[key]))
    palette.setColor(QPalette.Disabled, QPalette.ButtonText, QColor(COLORS["disabled"]))
    palette.setColor(QPalette.Disabled, QPalette.Text, QColor(COLORS["disabled"]))
    QApplication.instance().setPalette(palette)
    window.setStyleSheet(_stylesheet(COLORS))
