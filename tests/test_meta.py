"""Tests for gife.meta module."""

import io

import pytest
from PIL import Image

from gife.config import EncodeConfig
from gife.meta import parse_gif_structure, read_gif_structure
from gife.normalizer import Disposal
from gife.pipeline import encode_animation


class TestParseGifStructure:
    """Tests for parse_gif_structure function."""

    @pytest.mark.fast
    def test_rejects_non_gif(self):
        """Test that PNG data is refused."""
        with pytest.raises(ValueError, match="Not a GIF"):
            parse_gif_structure(io.BytesIO(b"\x89PNG\r\n\x1a\n" + bytes(16)))

    @pytest.mark.fast
    def test_truncated_header(self):
        """Test that a stream ending inside the header is refused."""
        with pytest.raises(ValueError, match="Unexpected end"):
            parse_gif_structure(io.BytesIO(b"GIF89a\x01\x00"))

    def test_missing_trailer(self):
        """Test a bare logical screen without any blocks."""
        data = b"GIF89a" + bytes([2, 0, 2, 0, 0, 0, 0])

        structure = parse_gif_structure(io.BytesIO(data))

        assert (structure.width, structure.height) == (2, 2)
        assert structure.global_color_table_size == 0
        assert structure.frame_count == 0
        assert not structure.has_trailer
        assert structure.loop_count is None

    def test_unknown_block(self):
        """Test that garbage after the header is refused."""
        data = b"GIF89a" + bytes([2, 0, 2, 0, 0, 0, 0]) + b"\x99"

        with pytest.raises(ValueError, match="Unknown GIF block 0x99"):
            parse_gif_structure(io.BytesIO(data))


class TestReadGifStructure:
    """Tests against GIFs written by Pillow."""

    def test_pillow_animation(self, tmp_path):
        """Test frame count, timing, disposal and loop of a Pillow-written GIF."""
        path = tmp_path / "pillow.gif"
        frames = [Image.new("RGB", (12, 8), c) for c in [(255, 0, 0), (0, 0, 255)]]
        frames[0].save(
            path, save_all=True, append_images=frames[1:], duration=80, loop=0, disposal=2
        )

        structure = read_gif_structure(path)

        assert structure.version == "89a"
        assert (structure.width, structure.height) == (12, 8)
        assert structure.frame_count == 2
        assert structure.frames[0].delay_cs == 8
        assert structure.frames[0].disposal is Disposal.BACKGROUND
        assert structure.loops_forever
        # Pillow places the loop extension ahead of the first image
        assert structure.loop_position == 0
        assert structure.has_trailer

    def test_still_image_has_no_loop(self, tmp_path):
        """Test that a single-frame GIF carries no loop directive."""
        path = tmp_path / "still.gif"
        Image.new("P", (3, 3), 1).save(path)

        structure = read_gif_structure(path)

        assert structure.frame_count == 1
        assert structure.loop_count is None
        assert not structure.loops_forever


class TestAgreesWithPillow:
    """The block walker agrees with Pillow's reader on frames and timing."""

    def test_encoded_animation(self, three_opaque_frames, output_path):
        encode_animation(EncodeConfig(output_path, three_opaque_frames, delay_cs=6))

        structure = read_gif_structure(output_path)
        with Image.open(output_path) as img:
            assert structure.frame_count == img.n_frames
            for index in range(img.n_frames):
                img.seek(index)
                assert structure.frames[index].delay_cs * 10 == img.info["duration"]
        assert structure.loop_position == structure.frame_count
