"""Waveform visualizer subpackage."""

from .widget import VoiceVisualizerWidget
from .compute import BarsComputeChannel, ExtractionWorker
from .coordinator import ResizeCoordinator
from .debounce import Debouncer
from .renderer import LiveBarRenderer, StaticBarRenderer, render_static_image

__all__ = ["VoiceVisualizerWidget", "BarsComputeChannel", "ExtractionWorker",
           "ResizeCoordinator", "Debouncer", "LiveBarRenderer",
           "StaticBarRenderer", "render_static_image"]
