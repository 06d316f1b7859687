"""gife - encode still images into an animated GIF."""

__version__: str = "0.1.0"
__author__: str = "Post-Rex"

# Public re-exports for convenience ---------------------------------------------------

from .config import EncodeConfig, EncoderConfig, derive_delay, resolve_size
from .encoder import EncoderState, EncodingSession, open_session
from .error_handling import (
    ConfigurationError,
    DecodeError,
    EncodingError,
    GifeError,
    InputNotFoundError,
)
from .loader import PillowDecoder, RasterDecoder, RasterImage, load_raster
from .meta import GifStructure, read_gif_structure
from .normalizer import (
    CanonicalGeometry,
    Disposal,
    NormalizedFrame,
    collapse_alpha,
    normalize_frame,
    resample,
    resolve_geometry,
)
from .pipeline import encode_animation

__all__ = [
    "CanonicalGeometry",
    "ConfigurationError",
    "DecodeError",
    "Disposal",
    "EncodeConfig",
    "EncoderConfig",
    "EncoderState",
    "EncodingError",
    "EncodingSession",
    "GifStructure",
    "GifeError",
    "InputNotFoundError",
    "NormalizedFrame",
    "PillowDecoder",
    "RasterDecoder",
    "RasterImage",
    "collapse_alpha",
    "derive_delay",
    "encode_animation",
    "load_raster",
    "normalize_frame",
    "open_session",
    "read_gif_structure",
    "resample",
    "resolve_geometry",
    "resolve_size",
]
