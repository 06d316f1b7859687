"""Encode a sequence of still images into one animated GIF."""

import logging
from pathlib import Path

import click

from .. import __version__
from ..config import MAX_DELAY_CS, MAX_DIMENSION, EncodeConfig, derive_delay, resolve_size
from ..error_handling import GifeError
from ..io import setup_logging
from ..meta import read_gif_structure
from ..pipeline import encode_animation
from ..validation import validate_input_paths, validate_output_path
from .utils import (
    display_path_info,
    display_results_summary,
    display_success,
    handle_generic_error,
    handle_gife_error,
    handle_keyboard_interrupt,
    print_logo,
)

logger = logging.getLogger(__name__)


@click.command(
    "gife",
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(version=__version__, prog_name="gife")
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(path_type=Path),
)
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="Path to where the GIF shall be written to",
)
@click.option(
    "--overwrite",
    "-O",
    is_flag=True,
    help="Overwrites the output file if it already exists",
)
@click.option(
    "--delay",
    "-d",
    type=click.IntRange(0, MAX_DELAY_CS),
    default=None,
    help="Frame delay in units of 10 ms (alternative to --fps)",
)
@click.option(
    "--fps",
    "-f",
    type=click.IntRange(0, MAX_DELAY_CS),
    default=None,
    help="Targeted frames per second, maximum 100 (alternative to --delay)",
)
@click.option(
    "--preserve-transparency",
    "-t",
    "preserve_transparency",
    is_flag=True,
    help="Preserve transparency if found in an image",
)
@click.option(
    "--width",
    type=click.IntRange(1, MAX_DIMENSION),
    default=None,
    help="Width of each frame (requires --height, the image is stretched)",
)
@click.option(
    "--height",
    type=click.IntRange(1, MAX_DIMENSION),
    default=None,
    help="Height of each frame (requires --width, the image is stretched)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Prints current steps and progress",
)
def encode(
    files: tuple[Path, ...],
    output: Path,
    overwrite: bool,
    delay: int | None,
    fps: int | None,
    preserve_transparency: bool,
    width: int | None,
    height: int | None,
    verbose: bool,
) -> None:
    """🎞️ gife — magic GIF encoding tool.

    Encodes FILES, in the given order, into one endlessly looping GIF. The
    first image sets the frame size unless --width and --height are given;
    every other image is stretched to match.
    """
    setup_logging("INFO" if verbose else "WARNING")

    try:
        delay_cs = derive_delay(fps=fps, delay=delay)
        size = resolve_size(width, height)
        output_path = validate_output_path(output, overwrite=overwrite)

        if verbose:
            print_logo(__version__)
            display_path_info("Output", output_path, "💾")

        logger.info("Checking files...")
        input_paths = validate_input_paths(files)

        config = EncodeConfig(
            output_path=output_path,
            input_paths=input_paths,
            delay_cs=delay_cs,
            size=size,
            preserve_alpha=preserve_transparency,
            overwrite=overwrite,
            verbose=verbose,
        )
        result = encode_animation(config)
    except GifeError as e:
        handle_gife_error(e)
    except KeyboardInterrupt:
        handle_keyboard_interrupt("Encoding")
    except Exception as e:
        handle_generic_error("Encoding", e)

    if verbose:
        display_results_summary(result, read_gif_structure(result["output_path"]))
    display_success("Encoding complete!")
