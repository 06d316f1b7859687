"""Per-frame colour quantization.

GIF image records carry palette indices, so every normalized RGBA frame is
mapped onto a local colour table of at most 256 entries:

- any non-zero alpha counts as opaque, GIF has no partial transparency,
- frames with at most 256 distinct colours keep them exactly,
- larger frames go through Pillow's median-cut quantizer,
- fully transparent pixels share a single index that is flagged as the
  transparent colour.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image

from .normalizer import NormalizedFrame

MAX_COLORS = 256


@dataclass(frozen=True)
class IndexedFrame:
    """Palette-indexed frame data.

    Attributes:
        indices: One palette index per pixel, row-major
        palette: RGB triplets, padded to a power of two (at least 2 entries)
        transparent_index: Index flagged as transparent, or None
    """

    indices: bytes
    palette: bytes
    transparent_index: int | None = None

    @property
    def color_count(self) -> int:
        return len(self.palette) // 3


def pad_palette(palette: bytes) -> bytes:
    """Pad an RGB palette with black up to the next power of two (min 2)."""
    count = max(1, len(palette) // 3)
    bits = max(1, (count - 1).bit_length())
    return palette + bytes((1 << bits) * 3 - len(palette))


def _exact_palette(rgba: np.ndarray) -> tuple[bytes, np.ndarray, int | None]:
    packed = rgba.view(np.uint32).reshape(-1)
    colors, inverse = np.unique(packed, return_inverse=True)
    color_rgba = colors.view(np.uint8).reshape(-1, 4)

    transparent_index = None
    transparent = np.flatnonzero(color_rgba[:, 3] == 0)
    if transparent.size:
        transparent_index = int(transparent[0])
        # Every alpha-0 pixel shares the same index
        alpha = rgba.reshape(-1, 4)[:, 3]
        inverse = np.where(alpha == 0, transparent_index, inverse)

    palette = color_rgba[:, :3].tobytes()
    return palette, inverse.astype(np.uint8), transparent_index


def _quantized_palette(rgba: np.ndarray) -> tuple[bytes, np.ndarray, int | None]:
    alpha = rgba[:, :, 3].reshape(-1)
    has_transparency = bool((alpha == 0).any())
    colors = MAX_COLORS - 1 if has_transparency else MAX_COLORS

    rgb = Image.fromarray(np.ascontiguousarray(rgba[:, :, :3]))
    quantized = rgb.quantize(
        colors=colors, method=Image.Quantize.MEDIANCUT, dither=Image.Dither.NONE
    )
    indices = np.asarray(quantized, dtype=np.uint8).reshape(-1)
    palette = bytes(quantized.getpalette() or [])[: colors * 3]
    palette += bytes(colors * 3 - len(palette))

    transparent_index = None
    if has_transparency:
        transparent_index = colors
        palette += bytes(3)
        indices = np.where(alpha == 0, transparent_index, indices).astype(np.uint8)

    return palette, indices, transparent_index


def quantize_frame(frame: NormalizedFrame) -> IndexedFrame:
    """Map *frame* onto a local colour table."""
    rgba = frame.to_array().copy()
    rgba[:, :, 3] = np.where(rgba[:, :, 3] == 0, 0, 255).astype(np.uint8)

    unique_count = np.unique(rgba.view(np.uint32)).size
    if unique_count <= MAX_COLORS:
        palette, indices, transparent_index = _exact_palette(rgba)
    else:
        palette, indices, transparent_index = _quantized_palette(rgba)

    return IndexedFrame(
        indices=indices.tobytes(),
        palette=pad_palette(palette),
        transparent_index=transparent_index,
    )
