"""Structural metadata extraction for GIF files.

Walks the block layout of a GIF (header, logical screen, extensions, image
records, trailer) without decompressing any pixel data. Used to summarise a
freshly written animation and to verify output in tests.
"""

import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from .normalizer import Disposal

NETSCAPE_IDS = (b"NETSCAPE2.0", b"ANIMEXTS1.0")


@dataclass
class FrameRecord:
    """One image record and the Graphic Control Extension preceding it."""

    left: int
    top: int
    width: int
    height: int
    delay_cs: int = 0
    disposal: Disposal = Disposal.UNSPECIFIED
    transparent_index: int | None = None
    local_color_table_size: int = 0
    interlaced: bool = False


@dataclass
class GifStructure:
    """Block-level description of a GIF file."""

    version: str
    width: int
    height: int
    global_color_table_size: int
    background_index: int
    frames: list[FrameRecord] = field(default_factory=list)
    loop_count: int | None = None
    # Number of image records seen before the looping extension
    loop_position: int | None = None
    has_trailer: bool = False

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @property
    def loops_forever(self) -> bool:
        return self.loop_count == 0


def _read(stream: BinaryIO, amount: int) -> bytes:
    data = stream.read(amount)
    if len(data) != amount:
        raise ValueError(f"Unexpected end of GIF data (wanted {amount} bytes)")
    return data


def _read_sub_blocks(stream: BinaryIO) -> bytes:
    data = bytearray()
    while True:
        size = _read(stream, 1)[0]
        if size == 0:
            return bytes(data)
        data.extend(_read(stream, size))


def _disposal(code: int) -> Disposal:
    # Codes 4-7 are reserved
    try:
        return Disposal(code)
    except ValueError:
        return Disposal.UNSPECIFIED


def _table_size(flags: int) -> int:
    return 1 << ((flags & 0x07) + 1) if flags & 0x80 else 0


def parse_gif_structure(stream: BinaryIO) -> GifStructure:
    """Parse the block structure from an open binary stream.

    Raises:
        ValueError: If the data is not a well-formed GIF
    """
    signature = _read(stream, 6)
    if signature[:3] != b"GIF" or signature[3:] not in (b"87a", b"89a"):
        raise ValueError(f"Not a GIF file (signature {signature!r})")

    width, height, flags, background, _aspect = struct.unpack("<HHBBB", _read(stream, 7))
    gct_size = _table_size(flags)
    _read(stream, gct_size * 3)

    structure = GifStructure(
        version=signature[3:].decode("ascii"),
        width=width,
        height=height,
        global_color_table_size=gct_size,
        background_index=background,
    )

    pending_control: dict | None = None
    while True:
        introducer = stream.read(1)
        if not introducer:
            break  # Truncated file without trailer

        block = introducer[0]
        if block == 0x3B:
            structure.has_trailer = True
            break

        if block == 0x21:
            label = _read(stream, 1)[0]
            if label == 0xF9:
                payload = _read_sub_blocks(stream)
                if len(payload) < 4:
                    raise ValueError("Graphic Control Extension too short")
                packed, delay, transparent = struct.unpack("<BHB", payload[:4])
                pending_control = {
                    "delay_cs": delay,
                    "disposal": _disposal((packed >> 2) & 0x07),
                    "transparent_index": transparent if packed & 0x01 else None,
                }
            elif label == 0xFF:
                identifier_size = _read(stream, 1)[0]
                identifier = _read(stream, identifier_size)
                payload = _read_sub_blocks(stream)
                if identifier in NETSCAPE_IDS and len(payload) >= 3 and payload[0] == 1:
                    structure.loop_count = struct.unpack("<H", payload[1:3])[0]
                    structure.loop_position = len(structure.frames)
            else:
                _read_sub_blocks(stream)
            continue

        if block == 0x2C:
            left, top, frame_w, frame_h, packed = struct.unpack(
                "<HHHHB", _read(stream, 9)
            )
            lct_size = _table_size(packed)
            _read(stream, lct_size * 3)
            _read(stream, 1)  # LZW minimum code size
            _read_sub_blocks(stream)

            record = FrameRecord(
                left=left,
                top=top,
                width=frame_w,
                height=frame_h,
                local_color_table_size=lct_size,
                interlaced=bool(packed & 0x40),
            )
            if pending_control:
                record.delay_cs = pending_control["delay_cs"]
                record.disposal = pending_control["disposal"]
                record.transparent_index = pending_control["transparent_index"]
            structure.frames.append(record)
            pending_control = None
            continue

        raise ValueError(f"Unknown GIF block 0x{block:02X}")

    return structure


def read_gif_structure(file_path: Path) -> GifStructure:
    """Parse the block structure of the GIF at *file_path*.

    Raises:
        ValueError: If the file is not a well-formed GIF
        OSError: If the file cannot be read
    """
    with open(file_path, "rb") as f:
        return parse_gif_structure(f)
