from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


@dataclass
class ConfigFieldError:
    """A single validation error for one configuration field.

    Attributes:
        key:     The config key that failed validation.
        value:   The offending value.
        message: Human-readable explanation of what is wrong.
    """
    key: str
    value: Any
    message: str


@dataclass(frozen=True)
class ParamSpec:
    """Declarative specification for a single visualizer parameter."""
    key: str
    type: type | tuple              # expected Python type(s)
    default: Any
    label: str                       # short UI label
    description: str = ""            # longer tooltip / help text
    min: float | int | None = None   # inclusive lower bound
    max: float | int | None = None   # inclusive upper bound


# ---------------------------------------------------------------------------
# Visualizer parameters
# ---------------------------------------------------------------------------

VISUALIZER_PARAMS: list[ParamSpec] = [
    ParamSpec(
        key="bar_width", type=(int, float), default=2, min=1,
        label="Bar width (px)",
        description="Width of each bar in device pixels. Truncated to an integer.",
    ),
    ParamSpec(
        key="gap", type=(int, float), default=1, min=0,
        label="Gap (px)",
        description="Space between neighbouring bars in device pixels.",
    ),
    ParamSpec(
        key="rounded", type=(int, float), default=5, min=0,
        label="Corner rounding",
        description="Bar corner radius. Clamped to half the bar width when drawn.",
    ),
    ParamSpec(
        key="speed", type=(int, float), default=3, min=1,
        label="Live speed divisor",
        description=(
            "A new live pick is appended once every N animation frames. "
            "Higher values scroll the live waveform more slowly."
        ),
    ),
    ParamSpec(
        key="background_color", type=str, default="transparent",
        label="Background color",
    ),
    ParamSpec(
        key="main_bar_color", type=str, default="#FFFFFF",
        label="Primary bar color",
        description="Live bars and the played portion of a recording.",
    ),
    ParamSpec(
        key="secondary_bar_color", type=str, default="#5e5e5e",
        label="Secondary bar color",
        description="Unplayed portion of a recording and the live centre line.",
    ),
    ParamSpec(
        key="animate_current_pick", type=bool, default=True,
        label="Animate current pick",
        description="Pulse the rightmost live bar on every accepted frame.",
    ),
    ParamSpec(
        key="fullscreen", type=bool, default=False,
        label="Full-width live stream",
        description=(
            "Let live bars span the whole surface. When off, the newest bar "
            "sits at the centre and the stream fills the left half."
        ),
    ),
    ParamSpec(
        key="only_recording", type=bool, default=False,
        label="Only live recording",
        description=(
            "Suppress the recorded waveform, progress indicators and seeking. "
            "The surface is cleared once recording stops."
        ),
    ),
    ParamSpec(
        key="resize_debounce_ms", type=int, default=500, min=0,
        label="Resize debounce (ms)",
        description="Quiet period after the last resize before geometry is recomputed.",
    ),
    ParamSpec(
        key="mobile_breakpoint", type=int, default=768, min=0,
        label="Narrow viewport breakpoint (px)",
        description="Below this viewport width bars are drawn 1px wider when gap > 0.",
    ),
    ParamSpec(
        key="frame_interval_ms", type=int, default=16, min=1, max=1000,
        label="Animation frame interval (ms)",
    ),
    ParamSpec(
        key="progress_indicator_shown", type=bool, default=True,
        label="Show progress indicator",
    ),
    ParamSpec(
        key="hover_indicator_shown", type=bool, default=True,
        label="Show hover indicator",
    ),
    ParamSpec(
        key="processing_text_shown", type=bool, default=True,
        label="Show processing text",
    ),
]


def default_config() -> dict[str, Any]:
    """Returns the built-in default visualizer configuration."""
    return {p.key: p.default for p in VISUALIZER_PARAMS}


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge config dicts left-to-right; later values override earlier ones."""
    result: dict[str, Any] = {}
    for cfg in configs:
        result.update(cfg)
    return result


# ---------------------------------------------------------------------------
# Validation  (ParamSpec-driven)
# ---------------------------------------------------------------------------

def _type_label(expected: type | tuple) -> str:
    if isinstance(expected, tuple):
        names = [t.__name__ for t in expected]
        if set(names) == {"int", "float"}:
            return "a number"
        return " or ".join(names)
    return {"int": "an integer", "float": "a number", "str": "a string",
            "bool": "true or false"}.get(expected.__name__, expected.__name__)


def validate_param_values(
    params: list[ParamSpec],
    values: dict[str, Any],
) -> list[ConfigFieldError]:
    """Validate *values* against a list of :class:`ParamSpec` definitions.

    Returns a (possibly empty) list of :class:`ConfigFieldError` objects.
    Only keys present in *values* are checked; missing keys are not errors
    (they will receive their default).
    """
    errors: list[ConfigFieldError] = []

    for spec in params:
        if spec.key not in values:
            continue

        value = values[spec.key]

        if value is None:
            errors.append(ConfigFieldError(
                spec.key, value,
                f"{spec.label} must not be empty.",
            ))
            continue

        # -- type (bool ⊄ int guard) --
        expected = spec.type
        if expected is not bool and isinstance(value, bool):
            errors.append(ConfigFieldError(
                spec.key, value,
                f"{spec.label} must be {_type_label(expected)}, got boolean.",
            ))
            continue
        if not isinstance(value, expected):
            errors.append(ConfigFieldError(
                spec.key, value,
                f"{spec.label} must be {_type_label(expected)}, "
                f"got {type(value).__name__}.",
            ))
            continue

        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if spec.min is not None and value < spec.min:
                errors.append(ConfigFieldError(
                    spec.key, value,
                    f"{spec.label} must be at least {spec.min}.",
                ))
                continue
            if spec.max is not None and value > spec.max:
                errors.append(ConfigFieldError(
                    spec.key, value,
                    f"{spec.label} must be at most {spec.max}.",
                ))
                continue

    return errors


def validate_config(config: dict[str, Any]) -> None:
    """Validate a visualizer config dict.

    Raises :class:`ConfigError` listing every invalid field.
    """
    errors = validate_param_values(VISUALIZER_PARAMS, config)
    if errors:
        lines = [e.message for e in errors]
        raise ConfigError(
            "Configuration has invalid values:\n  • " + "\n  • ".join(lines)
        )


# ---------------------------------------------------------------------------
# Typed view
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VisualizerOptions:
    """Validated, normalized snapshot of the visualizer configuration."""
    bar_width: int = 2
    gap: int = 1
    rounded: float = 5.0
    speed: int = 3
    background_color: str = "transparent"
    main_bar_color: str = "#FFFFFF"
    secondary_bar_color: str = "#5e5e5e"
    animate_current_pick: bool = True
    fullscreen: bool = False
    only_recording: bool = False
    resize_debounce_ms: int = 500
    mobile_breakpoint: int = 768
    frame_interval_ms: int = 16
    progress_indicator_shown: bool = True
    hover_indicator_shown: bool = True
    processing_text_shown: bool = True

    @classmethod
    def from_config(cls, config: dict[str, Any] | None = None) -> "VisualizerOptions":
        """Validate *config* (merged over defaults) and build options.

        Raises :class:`ConfigError` on invalid values.
        """
        merged = merge_configs(default_config(), config or {})
        validate_config(merged)
        return cls(
            bar_width=int(merged["bar_width"]),
            gap=int(merged["gap"]),
            rounded=float(merged["rounded"]),
            speed=int(merged["speed"]),
            background_color=merged["background_color"],
            main_bar_color=merged["main_bar_color"],
            secondary_bar_color=merged["secondary_bar_color"],
            animate_current_pick=merged["animate_current_pick"],
            fullscreen=merged["fullscreen"],
            only_recording=merged["only_recording"],
            resize_debounce_ms=merged["resize_debounce_ms"],
            mobile_breakpoint=merged["mobile_breakpoint"],
            frame_interval_ms=merged["frame_interval_ms"],
            progress_indicator_shown=merged["progress_indicator_shown"],
            hover_indicator_shown=merged["hover_indicator_shown"],
            processing_text_shown=merged["processing_text_shown"],
        )
