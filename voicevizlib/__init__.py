from ._version import __version__
from .models import (
    LiveState,
    SurfaceGeometry,
    PlaybackState,
    LivePick,
    ExtractionRequest,
    ExtractionResult,
)
from .bars import bar_count, channel_zero, extract_bars, extract_for_request
from .geometry import (
    compute_geometry,
    seek_time,
    hover_time,
    played_mask,
    bar_rect,
)
from .live import AmplitudeStream, PickRing, LiveStreamState
from .generation import GenerationGate
from .config import (
    default_config,
    merge_configs,
    validate_config,
    validate_param_values,
    ConfigError,
    ConfigFieldError,
    ParamSpec,
    VISUALIZER_PARAMS,
    VisualizerOptions,
)
from .utils import format_time, format_recording_time

__all__ = [
    "__version__",
    "LiveState",
    "SurfaceGeometry",
    "PlaybackState",
    "LivePick",
    "ExtractionRequest",
    "ExtractionResult",
    "bar_count",
    "channel_zero",
    "extract_bars",
    "extract_for_request",
    "compute_geometry",
    "seek_time",
    "hover_time",
    "played_mask",
    "bar_rect",
    "AmplitudeStream",
    "PickRing",
    "LiveStreamState",
    "GenerationGate",
    "default_config",
    "merge_configs",
    "validate_config",
    "validate_param_values",
    "ConfigError",
    "ConfigFieldError",
    "ParamSpec",
    "VISUALIZER_PARAMS",
    "VisualizerOptions",
    "format_time",
    "format_recording_time",
]
