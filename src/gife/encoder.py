"""Incremental GIF89a writer.

A session is bound to one output handle and one canvas size. Its lifecycle
is strictly ``UNINITIALIZED -> OPEN -> CLOSED``:

- :func:`open_session` writes the header (logical screen descriptor and a
  zero-filled global colour table) and returns an open session,
- :meth:`EncodingSession.write_frame` appends one frame record, encoded by
  Pillow's GIF plugin with a local colour table,
- :meth:`EncodingSession.finish` appends the infinite-loop application
  extension and the trailer, then flushes and closes the handle.

A finished session refuses every further call.
"""

from __future__ import annotations

import logging
import struct
from enum import Enum
from typing import BinaryIO

from PIL import GifImagePlugin, Image

from .config import DEFAULT_ENCODER_CONFIG, EncoderConfig
from .error_handling import EncodingError, error_context
from .normalizer import CanonicalGeometry, NormalizedFrame
from .palette import IndexedFrame, quantize_frame

logger = logging.getLogger(__name__)

SIGNATURE = b"GIF89a"
EXTENSION_INTRODUCER = 0x21
APPLICATION_LABEL = 0xFF
TRAILER = 0x3B
NETSCAPE_IDENTIFIER = b"NETSCAPE2.0"


class EncoderState(Enum):
    UNINITIALIZED = "uninitialized"
    OPEN = "open"
    CLOSED = "closed"


def _color_table_field(entries: int) -> int:
    """Size field N such that the table holds ``2 ** (N + 1)`` entries."""
    return max(0, (max(entries, 2) - 1).bit_length() - 1)


def build_header(
    geometry: CanonicalGeometry, config: EncoderConfig = DEFAULT_ENCODER_CONFIG
) -> bytes:
    """Signature, logical screen descriptor and the placeholder global table."""
    placeholder = config.GLOBAL_PALETTE_PLACEHOLDER
    entries = max(1, len(placeholder) // 3)
    size_field = _color_table_field(entries)
    # Global table present, colour resolution and table size both from the table
    flags = 0x80 | (size_field << 4) | size_field

    table = placeholder[: entries * 3]
    table += bytes((1 << (size_field + 1)) * 3 - len(table))

    return (
        SIGNATURE
        + struct.pack("<HHBBB", geometry.width, geometry.height, flags, 0, 0)
        + table
    )


def frame_image(indexed: IndexedFrame, width: int, height: int) -> Image.Image:
    """Palette image carrying *indexed* as its pixels and colour table."""
    image = Image.frombytes("P", (width, height), indexed.indices)
    image.putpalette(indexed.palette, rawmode="RGB")
    return image


def build_frame_record(frame: NormalizedFrame) -> bytes:
    """Graphic Control Extension, Image Descriptor and LZW data for *frame*.

    Pillow encodes the record; the local colour table is always included and
    the global one is never referenced.
    """
    indexed = quantize_frame(frame)
    params = {
        "include_color_table": True,
        # Pillow takes milliseconds and stores centiseconds
        "duration": frame.delay_cs * 10,
        "disposal": int(frame.disposal),
    }
    if indexed.transparent_index is not None:
        params["transparency"] = indexed.transparent_index

    return b"".join(
        GifImagePlugin.getdata(frame_image(indexed, frame.width, frame.height), **params)
    )


def build_loop_extension(loop_count: int = 0) -> bytes:
    """NETSCAPE2.0 application extension, ``loop_count`` 0 = forever."""
    return (
        bytes([EXTENSION_INTRODUCER, APPLICATION_LABEL, len(NETSCAPE_IDENTIFIER)])
        + NETSCAPE_IDENTIFIER
        + struct.pack("<BBHB", 3, 1, loop_count, 0)
    )


class EncodingSession:
    """Open GIF stream bound to one handle and one canvas size.

    Use :func:`open_session` to create one. As a context manager the session
    finishes itself when the block exits normally; an exception leaves the
    stream unfinished.
    """

    def __init__(
        self,
        handle: BinaryIO,
        geometry: CanonicalGeometry,
        config: EncoderConfig = DEFAULT_ENCODER_CONFIG,
    ) -> None:
        self.handle = handle
        self.geometry = geometry
        self.config = config
        self.frames_written = 0
        self.state = EncoderState.UNINITIALIZED

    def __enter__(self) -> EncodingSession:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and self.state is EncoderState.OPEN:
            self.finish()

    def _require_open(self, operation: str) -> None:
        if self.state is not EncoderState.OPEN:
            raise EncodingError(
                f"Cannot {operation}: encoding session is {self.state.value}",
                context={"state": self.state.value},
            )

    def _open(self) -> None:
        if self.state is not EncoderState.UNINITIALIZED:
            raise EncodingError(
                f"Cannot open session: encoding session is {self.state.value}",
                context={"state": self.state.value},
            )
        with error_context("write GIF header", EncodingError, logger=logger):
            self.handle.write(build_header(self.geometry, self.config))
        self.state = EncoderState.OPEN

    def write_frame(self, frame: NormalizedFrame) -> None:
        """Append *frame* as the next record of the stream.

        The frame must already have the session's geometry.
        """
        self._require_open("write frame")
        with error_context(
            "write GIF frame",
            EncodingError,
            context={"frame": self.frames_written},
            logger=logger,
        ):
            self.handle.write(build_frame_record(frame))
        self.frames_written += 1

    def finish(self, close: bool = True) -> None:
        """Append the loop directive and trailer, then flush and close."""
        self._require_open("finish")
        with error_context("finish GIF stream", EncodingError, logger=logger):
            self.handle.write(build_loop_extension(self.config.LOOP_COUNT))
            self.handle.write(bytes([TRAILER]))
            self.handle.flush()
            if close:
                self.handle.close()
        self.state = EncoderState.CLOSED
        logger.debug(f"Finished GIF stream with {self.frames_written} frame(s)")


def open_session(
    handle: BinaryIO,
    geometry: CanonicalGeometry,
    config: EncoderConfig = DEFAULT_ENCODER_CONFIG,
) -> EncodingSession:
    """Write the GIF header to *handle* and return an open session.

    Raises:
        EncodingError: If the header cannot be written
    """
    session = EncodingSession(handle, geometry, config)
    session._open()
    return session
