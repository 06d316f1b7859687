"""Shared utilities for CLI commands."""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.text import Text

from ..error_handling import GifeError
from ..meta import GifStructure

LOGO_STYLES = ("red", "yellow", "green", "blue")

# Each line is split into the four coloured letters G, i, f, E
LOGO_LINES = (
    ("   ________", ".__ ", " _____", "___________"),
    ("  /  _____/", "|__|", "/ ____", "\\_   _____/"),
    (" /   \\  ___", "|  \\", "   __\\ ", "|    __)_"),
    (" \\    \\_\\  \\", "  |", "|  |   ", "|        \\"),
    ("  \\______  /", "__|", "|__|  ", "/_______  /"),
    ("         \\/", "", "                  ", "\\/  "),
)


def get_console() -> Console:
    """Console bound to the current stdout."""
    return Console(highlight=False)


def print_logo(version: str, console: Console | None = None) -> None:
    """Print the coloured gife banner."""
    console = console or get_console()
    for index, parts in enumerate(LOGO_LINES):
        line = Text()
        for part, style in zip(parts, LOGO_STYLES):
            line.append(part, style=style)
        if index == len(LOGO_LINES) - 1:
            line.append(f"v.{version}")
        console.print(line)
    console.print()


def handle_gife_error(error: GifeError) -> None:
    """Report a fatal gife error and exit with status 1."""
    click.echo(f"❌ {error.message}", err=True)
    if error.cause is not None:
        click.echo(f"   caused by: {error.cause}", err=True)
    sys.exit(1)


def handle_generic_error(command_name: str, error: Exception) -> None:
    """Handle generic command errors with consistent formatting."""
    click.echo(f"❌ {command_name} failed: {error}", err=True)
    sys.exit(1)


def handle_keyboard_interrupt(command_name: str) -> None:
    """Handle keyboard interrupt with consistent formatting."""
    click.echo(f"\n⏹️  {command_name} interrupted by user", err=True)
    sys.exit(1)


def display_path_info(label: str, path: Path, emoji: str = "📁") -> None:
    """Display path information with consistent formatting."""
    click.echo(f"{emoji} {label}: {path}")


def display_results_summary(result: dict, structure: GifStructure | None = None) -> None:
    """Display the metadata returned by an encoding run.

    When the written file's *structure* is given, frame count and looping
    are reported from the file itself.
    """
    click.echo("\n📊 Results:")
    if structure is not None:
        loop = "forever" if structure.loops_forever else str(structure.loop_count)
        click.echo(f"   • Frames: {structure.frame_count}")
        click.echo(f"   • Canvas: {structure.width}x{structure.height}")
        click.echo(f"   • Loop: {loop}")
    else:
        click.echo(f"   • Frames: {result['frames']}")
        click.echo(f"   • Canvas: {result['width']}x{result['height']}")
    click.echo(f"   • Delay: {result['delay_cs']} cs")
    click.echo(f"   • Kilobytes: {result['kilobytes']:.1f}")
    click.echo(f"   • Render time: {result['render_ms']} ms")
    click.echo(f"   • Results saved to: {result['output_path']}")


def display_success(message: str, console: Console | None = None) -> None:
    console = console or get_console()
    console.print(Text(message, style="green"))
