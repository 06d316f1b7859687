"""Still-image decoding.

The decoder is a black box to the rest of the pipeline: it takes a path and
hands back a row-major RGBA raster. Pillow sniffs the actual format from the
file contents, so nothing downstream ever branches on PNG vs JPEG vs BMP.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .error_handling import DecodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RasterImage:
    """Decoded still image.

    Attributes:
        width: Width in pixels
        height: Height in pixels
        pixels: Row-major RGBA bytes, ``width * height * 4`` long
    """

    width: int
    height: int
    pixels: bytes

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Raster dimensions must be positive, got {self.width}x{self.height}"
            )
        expected = self.width * self.height * 4
        if len(self.pixels) != expected:
            raise ValueError(
                f"RGBA buffer holds {len(self.pixels)} bytes, expected {expected}"
            )

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @classmethod
    def from_image(cls, image: Image.Image) -> RasterImage:
        """Build a raster from any Pillow image, converting to RGBA."""
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        width, height = image.size
        return cls(width=width, height=height, pixels=image.tobytes())

    def to_image(self) -> Image.Image:
        return Image.frombytes("RGBA", self.size, self.pixels)


class RasterDecoder(ABC):
    """Turns an image file into a :class:`RasterImage`.

    Implementations raise :class:`DecodeError` for anything they cannot read.
    """

    #: Human-readable name used in log messages
    NAME: str = "decoder"

    @abstractmethod
    def decode(self, path: Path) -> RasterImage:  # pragma: no cover
        """Decode *path* into an RGBA raster."""


class PillowDecoder(RasterDecoder):
    """Decoder backed by Pillow's format detection.

    Animated inputs contribute their first frame only.
    """

    NAME = "pillow"

    def decode(self, path: Path) -> RasterImage:
        try:
            with Image.open(path) as img:
                img.seek(0)
                logger.debug(f"Decoding {path} ({img.format}, {img.mode}, {img.size})")
                return RasterImage.from_image(img)
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(
                f"{path} is not a known image file", cause=e, context={"path": str(path)}
            ) from e


DEFAULT_DECODER: RasterDecoder = PillowDecoder()


def load_raster(path: str | Path, decoder: RasterDecoder | None = None) -> RasterImage:
    """Load *path* as an RGBA raster.

    Args:
        path: Image file, assumed to exist
        decoder: Decoder to use (defaults to Pillow)

    Returns:
        RasterImage with the file's native dimensions

    Raises:
        DecodeError: If the file is not a decodable still image
    """
    decoder = decoder or DEFAULT_DECODER
    logger.debug(f"Loading {path} with the {decoder.NAME} decoder")
    return decoder.decode(Path(path))
