"""Frame normalization.

Brings every decoded raster onto the canonical canvas before it reaches the
container writer:

1. resample to the canonical geometry (Lanczos, stretched, no aspect-ratio
   correction) unless the raster already has that size,
2. collapse the alpha channel according to the transparency policy.

The canonical geometry itself is resolved once, before the first frame is
normalized, by :func:`resolve_geometry`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum

import numpy as np
from PIL import Image

from .config import MAX_DELAY_CS, MAX_DIMENSION
from .error_handling import ConfigurationError
from .loader import RasterImage

logger = logging.getLogger(__name__)

RESAMPLE_FILTER = Image.Resampling.LANCZOS


class Disposal(IntEnum):
    """GIF disposal methods (Graphic Control Extension, bits 2-4)."""

    UNSPECIFIED = 0
    KEEP = 1
    BACKGROUND = 2
    PREVIOUS = 3


@dataclass(frozen=True)
class CanonicalGeometry:
    """Width and height every frame of a session is written with."""

    width: int
    height: int

    def __post_init__(self) -> None:
        for name, value in (("width", self.width), ("height", self.height)):
            if not 1 <= value <= MAX_DIMENSION:
                raise ConfigurationError(
                    f"Frame {name} must be between 1 and {MAX_DIMENSION}, got {value}",
                    context={"option": name},
                )

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def buffer_length(self) -> int:
        return self.width * self.height * 4

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class NormalizedFrame:
    """Frame ready for the container writer."""

    width: int
    height: int
    pixels: bytes
    delay_cs: int = 0
    disposal: Disposal = Disposal.BACKGROUND

    def __post_init__(self) -> None:
        expected = self.width * self.height * 4
        if len(self.pixels) != expected:
            raise ValueError(
                f"Frame buffer holds {len(self.pixels)} bytes, expected {expected} "
                f"for {self.width}x{self.height}"
            )
        if not 0 <= self.delay_cs <= MAX_DELAY_CS:
            raise ValueError(f"delay_cs must fit in 16 bits, got {self.delay_cs}")

    @property
    def geometry(self) -> CanonicalGeometry:
        return CanonicalGeometry(self.width, self.height)

    def to_array(self) -> np.ndarray:
        """View the pixels as a ``(height, width, 4)`` uint8 array."""
        return np.frombuffer(self.pixels, dtype=np.uint8).reshape(
            self.height, self.width, 4
        )


def resolve_geometry(
    override: CanonicalGeometry | tuple[int, int] | None,
    first_raster: RasterImage,
) -> CanonicalGeometry:
    """Fix the canvas size for a whole session.

    An explicit override wins; otherwise the first raster's own dimensions are
    used. Later rasters are never consulted.
    """
    if override is not None:
        if isinstance(override, CanonicalGeometry):
            return override
        return CanonicalGeometry(*override)
    return CanonicalGeometry(first_raster.width, first_raster.height)


def resample(raster: RasterImage, geometry: CanonicalGeometry) -> RasterImage:
    """Stretch *raster* to exactly *geometry*.

    Rasters that already match are returned as is. Each band is filtered on
    its own, so the colour of transparent pixels survives resampling.
    """
    if raster.size == geometry.size:
        return raster

    logger.debug(f"Resampling {raster.width}x{raster.height} -> {geometry}")
    # RGBA resize works on premultiplied alpha and zeroes alpha-0 colour
    bands = [
        band.resize(geometry.size, RESAMPLE_FILTER) for band in raster.to_image().split()
    ]
    return RasterImage.from_image(Image.merge("RGBA", bands))


def collapse_alpha(pixels: bytes, preserve_alpha: bool) -> bytes:
    """Apply the transparency policy to an RGBA buffer.

    Without ``preserve_alpha`` every pixel becomes fully opaque and keeps its
    colour. With it, alpha passes through, except that fully transparent
    pixels lose their colour (R=G=B=0). Intermediate alpha values are left
    alone; GIF can only show them as opaque.
    """
    rgba = np.frombuffer(pixels, dtype=np.uint8).reshape(-1, 4).copy()

    if not preserve_alpha:
        rgba[:, 3] = 255
    else:
        rgba[rgba[:, 3] == 0, :3] = 0

    return rgba.tobytes()


def normalize_frame(
    raster: RasterImage,
    geometry: CanonicalGeometry,
    preserve_alpha: bool,
    delay_cs: int = 0,
    disposal: Disposal = Disposal.BACKGROUND,
) -> NormalizedFrame:
    """Resample and alpha-collapse *raster* into a frame of *geometry*."""
    resized = resample(raster, geometry)
    pixels = collapse_alpha(resized.pixels, preserve_alpha)
    return NormalizedFrame(
        width=geometry.width,
        height=geometry.height,
        pixels=pixels,
        delay_cs=delay_cs,
        disposal=disposal,
    )
