"""Tests for the end-to-end encoding pipeline."""

from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest

from gife.config import EncodeConfig
from gife.encoder import EncodingSession
from gife.error_handling import DecodeError, EncodingError
from gife.loader import PillowDecoder, RasterImage
from gife.meta import read_gif_structure
from gife.normalizer import Disposal
from gife.pipeline import encode_animation, iter_rasters


class SpyDecoder(PillowDecoder):
    """Pillow decoder that records every path it is asked to decode."""

    NAME = "spy"

    def __init__(self):
        self.seen: list[Path] = []

    def decode(self, path: Path) -> RasterImage:
        self.seen.append(path)
        return super().decode(path)


def leftovers(directory: Path) -> list[str]:
    if not directory.exists():
        return []
    return sorted(p.name for p in directory.iterdir())


class TestIterRasters:
    """Tests for lazy decoding."""

    def test_is_lazy(self, three_opaque_frames):
        decoder = SpyDecoder()

        rasters = iter_rasters(three_opaque_frames, decoder)
        assert decoder.seen == []

        path, raster = next(rasters)
        assert path == three_opaque_frames[0]
        assert raster.size == (64, 64)
        assert decoder.seen == three_opaque_frames[:1]


class TestEncodeAnimation:
    """Tests for encode_animation."""

    @pytest.mark.fast
    def test_three_frames(self, three_opaque_frames, output_path, decode_gif):
        config = EncodeConfig(output_path, three_opaque_frames, delay_cs=10)

        result = encode_animation(config)

        assert result["frames"] == 3
        assert (result["width"], result["height"]) == (64, 64)
        assert result["delay_cs"] == 10
        assert result["kilobytes"] > 0

        structure = read_gif_structure(output_path)
        assert (structure.width, structure.height) == (64, 64)
        assert structure.frame_count == 3
        for record in structure.frames:
            assert record.delay_cs == 10
            assert record.disposal is Disposal.BACKGROUND
            assert record.transparent_index is None
            assert (record.left, record.top, record.width, record.height) == (0, 0, 64, 64)
        assert structure.loop_count == 0
        # Loop directive follows the last image record
        assert structure.loop_position == 3
        assert structure.has_trailer

        decoded = decode_gif(output_path)
        expected = [(255, 0, 0), (0, 255, 0), (0, 0, 255)]
        for frame, colour in zip(decoded, expected):
            assert (frame[:, :, :3] == colour).all()

    def test_first_image_sets_canvas(self, make_image, output_path):
        inputs = [
            make_image("small.png", (100, 50), (10, 10, 10)),
            make_image("big.png", (200, 100), (240, 240, 240)),
        ]

        encode_animation(EncodeConfig(output_path, inputs, delay_cs=5))

        structure = read_gif_structure(output_path)
        assert (structure.width, structure.height) == (100, 50)
        assert all((f.width, f.height) == (100, 50) for f in structure.frames)

    def test_explicit_size_overrides_first_image(self, make_image, output_path, decode_gif):
        inputs = [
            make_image("wide.png", (100, 50), (0, 128, 0)),
            make_image("tall.png", (20, 80), (0, 128, 0)),
        ]

        encode_animation(EncodeConfig(output_path, inputs, delay_cs=5, size=(50, 50)))

        structure = read_gif_structure(output_path)
        assert (structure.width, structure.height) == (50, 50)
        for frame in decode_gif(output_path):
            assert frame.shape == (50, 50, 4)
            assert np.abs(frame[:, :, :3].astype(int) - [0, 128, 0]).max() <= 1

    def test_decode_failure_stops_early(self, make_image, not_an_image, output_path):
        """Nothing after the bad input is read and no output is left behind."""
        first = make_image("a.png", (16, 16), (1, 2, 3))
        last = make_image("c.png", (16, 16), (4, 5, 6))
        decoder = SpyDecoder()
        original_write_frame = EncodingSession.write_frame

        with patch.object(
            EncodingSession, "write_frame", autospec=True, side_effect=original_write_frame
        ) as write_frame:
            with pytest.raises(DecodeError) as exc_info:
                encode_animation(
                    EncodeConfig(output_path, [first, not_an_image, last], delay_cs=1),
                    decoder=decoder,
                )

        assert decoder.seen == [first, not_an_image]
        assert write_frame.call_count == 1
        assert str(not_an_image) in exc_info.value.message
        assert not output_path.exists()
        assert leftovers(output_path.parent) == []

    def test_first_input_undecodable_creates_nothing(self, not_an_image, output_path):
        with pytest.raises(DecodeError):
            encode_animation(EncodeConfig(output_path, [not_an_image], delay_cs=1))

        assert not output_path.parent.exists()

    def test_write_failure_leaves_no_output(self, three_opaque_frames, output_path):
        calls = []

        def fail_on_second(session, frame):
            calls.append(frame)
            if len(calls) == 2:
                raise EncodingError("disk full")

        with patch.object(
            EncodingSession, "write_frame", autospec=True, side_effect=fail_on_second
        ):
            with pytest.raises(EncodingError, match="disk full"):
                encode_animation(EncodeConfig(output_path, three_opaque_frames, delay_cs=1))

        assert len(calls) == 2
        assert not output_path.exists()
        assert leftovers(output_path.parent) == []

    def test_existing_output_replaced_only_on_success(self, three_opaque_frames, output_path):
        output_path.parent.mkdir(parents=True)
        output_path.write_bytes(b"old content")

        encode_animation(EncodeConfig(output_path, three_opaque_frames, delay_cs=3, overwrite=True))

        assert output_path.read_bytes()[:6] == b"GIF89a"
        assert leftovers(output_path.parent) == ["animation.gif"]

    def test_preserve_alpha(self, make_array_image, output_path, decode_gif):
        array = np.zeros((8, 8, 4), dtype=np.uint8)
        array[:, :] = [200, 0, 0, 255]
        array[:4, :] = [0, 0, 0, 0]
        path = make_array_image("alpha.png", array)

        encode_animation(EncodeConfig(output_path, [path], delay_cs=2, preserve_alpha=True))

        structure = read_gif_structure(output_path)
        assert structure.frames[0].transparent_index is not None
        frame = decode_gif(output_path)[0]
        assert (frame[:4, :, 3] == 0).all()
        assert (frame[4:, :, 3] == 255).all()

    def test_alpha_dropped_by_default(self, make_array_image, output_path, decode_gif):
        array = np.zeros((8, 8, 4), dtype=np.uint8)
        array[:, :] = [0, 0, 200, 0]
        path = make_array_image("ghost.png", array)

        encode_animation(EncodeConfig(output_path, [path], delay_cs=2))

        structure = read_gif_structure(output_path)
        assert structure.frames[0].transparent_index is None
        frame = decode_gif(output_path)[0]
        assert (frame[:, :, 3] == 255).all()
        assert (frame[:, :, :3] == [0, 0, 200]).all()

    def test_empty_input_list(self, output_path):
        with pytest.raises(ValueError, match="at least one input"):
            encode_animation(EncodeConfig(output_path, []))
