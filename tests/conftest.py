from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# ---------------------------------------------------------------------------
# Image fixtures are synthesised on the fly so the repo carries no binaries
# ---------------------------------------------------------------------------


def _save(image: Image.Image, path: Path, fmt: str | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, format=fmt)
    return path


@pytest.fixture
def make_image(tmp_path):
    """Factory writing a solid-colour image and returning its path.

    ``color`` may be RGB or RGBA; RGBA colours produce an RGBA PNG.
    """

    def _make(
        name: str,
        size: tuple[int, int] = (64, 64),
        color: tuple[int, ...] = (255, 0, 0),
        fmt: str | None = None,
    ) -> Path:
        mode = "RGBA" if len(color) == 4 else "RGB"
        return _save(Image.new(mode, size, color), tmp_path / "inputs" / name, fmt)

    return _make


@pytest.fixture
def make_array_image(tmp_path):
    """Factory writing a uint8 ``(h, w, 3|4)`` array as a PNG."""

    def _make(name: str, array: np.ndarray) -> Path:
        return _save(Image.fromarray(array), tmp_path / "inputs" / name)

    return _make


@pytest.fixture
def three_opaque_frames(make_image):
    """Three 64×64 opaque PNGs in red, green and blue."""
    return [
        make_image("frame_0.png", (64, 64), (255, 0, 0)),
        make_image("frame_1.png", (64, 64), (0, 255, 0)),
        make_image("frame_2.png", (64, 64), (0, 0, 255)),
    ]


@pytest.fixture
def not_an_image(tmp_path):
    """A file that exists but no decoder understands."""
    path = tmp_path / "inputs" / "notes.png"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"this is definitely not a PNG file\n" * 4)
    return path


@pytest.fixture
def output_path(tmp_path):
    return tmp_path / "out" / "animation.gif"


def gif_frames_rgba(path: Path) -> list[np.ndarray]:
    """Decode every frame of a GIF with Pillow as RGBA arrays."""
    frames = []
    with Image.open(path) as img:
        for index in range(img.n_frames):
            img.seek(index)
            frames.append(np.asarray(img.convert("RGBA")).copy())
    return frames


@pytest.fixture
def decode_gif():
    """Expose :func:`gif_frames_rgba` to tests."""
    return gif_frames_rgba
