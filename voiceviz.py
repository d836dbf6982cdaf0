import os
import sys
import argparse

try:
    from rich.console import Console
    from rich.panel import Panel
except ImportError:
    print("Error: The 'rich' library is required for the CLI but not installed.", file=sys.stderr)
    print("Please install it with: pip install voiceviz[cli]", file=sys.stderr)
    sys.exit(1)

import numpy as np

from voicevizlib import __version__
from voicevizlib.audio import AUDIO_EXTENSIONS, duration_seconds, load_recording
from voicevizlib.bars import extract_bars
from voicevizlib.config import ConfigError, VisualizerOptions
from voicevizlib.geometry import compute_geometry
from voicevizlib.models import PlaybackState
from voicevizlib.utils import format_duration

console = Console()


def positive_int(value):
    ivalue = int(value)
    if ivalue <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return ivalue


def unit_float(value):
    fvalue = float(value)
    if not 0.0 <= fvalue <= 1.0:
        raise argparse.ArgumentTypeError("must be between 0.0 and 1.0")
    return fvalue


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description="VoiceViz: render a recording as a bar waveform",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--version", action="version",
                        version=f"voiceviz {__version__}")

    parser.add_argument("input", type=str,
                        help=f"Audio file to render ({', '.join(AUDIO_EXTENSIONS)})")
    parser.add_argument("-o", "--output", type=str, default=None,
                        help="Write the waveform to this PNG file")

    # Surface
    parser.add_argument("--width", type=positive_int, default=600,
                        help="Surface width (logical px)")
    parser.add_argument("--height", type=positive_int, default=200,
                        help="Surface height (logical px)")
    parser.add_argument("--dpr", type=float, default=1.0,
                        help="Device pixel ratio")

    # Bars
    parser.add_argument("--bar-width", type=positive_int, default=2,
                        help="Bar width (px)")
    parser.add_argument("--gap", type=int, default=1,
                        help="Gap between bars (px)")
    parser.add_argument("--rounded", type=float, default=5.0,
                        help="Bar corner radius (px)")
    parser.add_argument("--progress", type=unit_float, default=0.0,
                        help="Played fraction drawn in the main color")

    # Colors
    parser.add_argument("--main-color", type=str, default="#FFFFFF",
                        help="Color of played bars")
    parser.add_argument("--secondary-color", type=str, default="#5e5e5e",
                        help="Color of unplayed bars")
    parser.add_argument("--background-color", type=str, default="transparent",
                        help="Surface background color")

    return parser.parse_args(argv)


def build_options(args) -> VisualizerOptions:
    return VisualizerOptions.from_config({
        "bar_width": args.bar_width,
        "gap": args.gap,
        "rounded": args.rounded,
        "main_bar_color": args.main_color,
        "secondary_bar_color": args.secondary_color,
        "background_color": args.background_color,
    })


def write_png(bars, geometry, playback, options, path) -> bool:
    """Paint *bars* with the static renderer on an offscreen QImage."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtGui import QGuiApplication
    from voicevizgui.waveform.renderer import render_static_image

    app = QGuiApplication.instance() or QGuiApplication([sys.argv[0]])  # noqa: F841
    image = render_static_image(bars, geometry, playback, options)
    if image is None:
        return False
    return image.save(path, "PNG")


def render(argv=None) -> int:
    args = parse_arguments(argv)

    if not os.path.isfile(args.input):
        console.print(f"[bold red]Error:[/] File '{args.input}' not found.")
        return 1
    if args.dpr <= 0:
        console.print("[bold red]Error:[/] --dpr must be greater than 0.")
        return 1

    try:
        options = build_options(args)
    except ConfigError as e:
        console.print(f"[bold red]Error:[/] {e}")
        return 1

    try:
        samples, samplerate = load_recording(args.input)
    except Exception as e:
        console.print(f"[bold red]Error:[/] Could not decode '{args.input}': {e}")
        return 1

    # Rendered for a desktop-sized viewport: no narrow-screen bar bump.
    geometry = compute_geometry(
        args.width, args.height, args.dpr,
        bar_width=options.bar_width, gap=options.gap,
        viewport_width=max(args.width, options.mobile_breakpoint),
        breakpoint=options.mobile_breakpoint,
    )
    bars = extract_bars(samples, geometry.pixel_width, geometry.pixel_height,
                        geometry.bar_width, geometry.gap)
    duration = duration_seconds(samples, samplerate)
    playback = PlaybackState(args.progress * duration, duration)
    peak = float(np.max(np.abs(samples))) if samples.size else 0.0

    console.print(Panel.fit(
        f"[bold]{os.path.basename(args.input)}[/]\n"
        f"Duration: [cyan]{format_duration(duration)}[/] | "
        f"Samplerate: [cyan]{samplerate} Hz[/]\n"
        f"Surface: [cyan]{geometry.pixel_width}x{geometry.pixel_height} px[/] "
        f"(dpr {geometry.device_pixel_ratio:g})\n"
        f"Bars: [cyan]{len(bars)}[/] | Peak: [cyan]{peak:.3f}[/]",
        title="VoiceViz"
    ))

    if args.output:
        if not write_png(bars, geometry, playback, options, args.output):
            console.print(f"[bold red]Error:[/] Could not write '{args.output}'.")
            return 1
        console.print(f"\n[dim]Waveform saved to: {args.output}[/]")
    return 0


def main():
    sys.exit(render())


if __name__ == "__main__":
    main()
