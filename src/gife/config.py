"""Configuration settings for gife."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .error_handling import ConfigurationError, log_warning_with_context

logger = logging.getLogger(__name__)

# GIF stores dimensions and delays as little-endian u16
MAX_DIMENSION = 65535
MAX_DELAY_CS = 65535

# Highest frame rate that still maps to a non-zero centisecond delay
MAX_FPS = 100


@dataclass
class EncoderConfig:
    """Fixed parameters of the GIF container writer."""

    # Zero-filled placeholder handed to the header as the global colour table.
    # 256 bytes = 85 RGB entries, padded up to 128 entries on write.
    GLOBAL_PALETTE_PLACEHOLDER: bytes = bytes(256)

    # NETSCAPE2.0 loop count, 0 = replay forever
    LOOP_COUNT: int = 0

    def __post_init__(self) -> None:
        if not 0 < len(self.GLOBAL_PALETTE_PLACEHOLDER) <= 768:
            raise ValueError(
                "GLOBAL_PALETTE_PLACEHOLDER must hold between 1 and 768 bytes"
            )
        if not 0 <= self.LOOP_COUNT <= 65535:
            raise ValueError(f"LOOP_COUNT must fit in 16 bits, got {self.LOOP_COUNT}")


@dataclass
class EncodeConfig:
    """Validated options for one encoding run."""

    output_path: Path
    input_paths: list[Path] = field(default_factory=list)

    # Frame delay in hundredths of a second, shared by every frame
    delay_cs: int = 0

    # Explicit (width, height) override; None = take the first image's size
    size: tuple[int, int] | None = None

    preserve_alpha: bool = False
    overwrite: bool = False
    verbose: bool = False

    def __post_init__(self) -> None:
        self.output_path = Path(self.output_path)
        self.input_paths = [Path(p) for p in self.input_paths]

        if not 0 <= self.delay_cs <= MAX_DELAY_CS:
            raise ConfigurationError(
                f"--delay must be between 0 and {MAX_DELAY_CS}, got {self.delay_cs}",
                context={"option": "delay"},
            )

        if self.size is not None:
            width, height = self.size
            for name, value in (("width", width), ("height", height)):
                if not 1 <= value <= MAX_DIMENSION:
                    raise ConfigurationError(
                        f"--{name} must be between 1 and {MAX_DIMENSION}, got {value}",
                        context={"option": name},
                    )


def derive_delay(fps: int | None = None, delay: int | None = None) -> int:
    """Turn ``--fps`` or ``--delay`` into a frame delay in centiseconds.

    ``fps`` takes precedence when both are given. Integer division is kept as
    is: 3 fps gives 33, anything above 100 fps gives 0.

    Raises:
        ConfigurationError: If neither value is given or ``fps`` is zero
    """
    if fps is None and delay is None:
        raise ConfigurationError(
            "Either --fps or --delay has to be given", context={"option": "fps"}
        )

    if fps is not None:
        if fps <= 0:
            raise ConfigurationError(
                f"--fps must be greater than 0, got {fps}", context={"option": "fps"}
            )
        if fps > MAX_FPS:
            log_warning_with_context(
                f"--fps above {MAX_FPS} results in a frame delay of 0",
                context={"fps": fps},
                logger=logger,
            )
        return 100 // fps

    if not 0 <= delay <= MAX_DELAY_CS:
        raise ConfigurationError(
            f"--delay must be between 0 and {MAX_DELAY_CS}, got {delay}",
            context={"option": "delay"},
        )
    return delay


def resolve_size(width: int | None, height: int | None) -> tuple[int, int] | None:
    """Return the explicit frame size, which must be given as a pair."""
    if (width is None) != (height is None):
        raise ConfigurationError(
            "You can only set either both or none of --width and --height",
            context={"option": "width" if width is None else "height"},
        )
    if width is None:
        return None
    return (width, height)


DEFAULT_ENCODER_CONFIG = EncoderConfig()
