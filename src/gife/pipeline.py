"""Still images to animated GIF.

Streams the inputs one at a time: decode, normalize onto the canonical
canvas, write as the next frame record. Only one decoded raster and one
normalized frame are alive at any point, however many inputs there are.

Output goes to a temporary file next to the target and is moved into place
only after the stream has been finished, so a failed run never leaves a
truncated GIF behind.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from itertools import chain
from pathlib import Path
from typing import Any

from .config import DEFAULT_ENCODER_CONFIG, EncodeConfig, EncoderConfig
from .encoder import open_session
from .error_handling import EncodingError, error_context
from .io import atomic_write
from .loader import RasterDecoder, RasterImage, load_raster
from .normalizer import CanonicalGeometry, Disposal, normalize_frame, resolve_geometry

logger = logging.getLogger(__name__)


def iter_rasters(
    paths: list[Path], decoder: RasterDecoder | None = None
) -> Iterator[tuple[Path, RasterImage]]:
    """Decode *paths* lazily, in order.

    A decode failure propagates immediately; later paths are never read.
    """
    for path in paths:
        logger.info(f"Reading image {path}")
        yield path, load_raster(path, decoder)


def encode_animation(
    config: EncodeConfig,
    decoder: RasterDecoder | None = None,
    encoder_config: EncoderConfig = DEFAULT_ENCODER_CONFIG,
) -> dict[str, Any]:
    """Encode ``config.input_paths`` into one looping GIF at ``config.output_path``.

    Args:
        config: Validated run options
        decoder: Still-image decoder (defaults to Pillow)
        encoder_config: Container writer parameters

    Returns:
        Metadata dict with ``output_path``, ``frames``, ``width``, ``height``,
        ``delay_cs``, ``render_ms`` and ``kilobytes``

    Raises:
        DecodeError: If an input cannot be decoded
        EncodingError: If the output cannot be created or written
    """
    if not config.input_paths:
        raise ValueError("encode_animation needs at least one input path")

    start = time.perf_counter()
    override = CanonicalGeometry(*config.size) if config.size else None
    rasters = iter_rasters(config.input_paths, decoder)

    # Geometry is fixed once, before the first frame is normalized
    first = next(rasters)
    geometry = resolve_geometry(override, first[1])
    logger.info(f"Canvas size {geometry} (from {'options' if override else first[0]})")
    sources = chain([first], rasters)
    del first

    logger.info("Creating output file...")
    with error_context(
        "write GIF output",
        EncodingError,
        context={"path": str(config.output_path)},
        logger=logger,
    ):
        with atomic_write(config.output_path) as handle:
            session = open_session(handle, geometry, encoder_config)

            for _path, raster in sources:
                logger.info("Processing file...")
                frame = normalize_frame(
                    raster,
                    geometry,
                    preserve_alpha=config.preserve_alpha,
                    delay_cs=config.delay_cs,
                    disposal=Disposal.BACKGROUND,
                )
                del raster

                logger.info("Writing frame...")
                session.write_frame(frame)
                del frame

            session.finish()

    render_ms = int((time.perf_counter() - start) * 1000)
    size_kb = config.output_path.stat().st_size / 1024.0
    logger.info(
        f"Wrote {session.frames_written} frame(s) at {geometry} to "
        f"{config.output_path} ({size_kb:.1f} KB, {render_ms} ms)"
    )

    return {
        "output_path": config.output_path,
        "frames": session.frames_written,
        "width": geometry.width,
        "height": geometry.height,
        "delay_cs": config.delay_cs,
        "render_ms": render_ms,
        "kilobytes": size_kb,
    }
