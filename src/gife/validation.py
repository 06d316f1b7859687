"""Input validation utilities for gife.

Checks that run before any image is decoded: the output path must be
writable (and absent unless overwriting is allowed) and every input must
exist.
"""

import os
from collections.abc import Iterable
from pathlib import Path

from .error_handling import ConfigurationError, InputNotFoundError


def validate_path_security(path: str | Path) -> Path:
    """Reject empty paths and paths containing null bytes.

    Raises:
        ConfigurationError: If the path is unusable
    """
    if not path:
        raise ConfigurationError("Path cannot be empty")

    path_str = str(path)
    if "\x00" in path_str:
        raise ConfigurationError(f"Path contains null bytes: {path_str!r}")

    return Path(path)


def validate_output_path(path: str | Path, overwrite: bool = False) -> Path:
    """Validate the output GIF path.

    Args:
        path: Output path to validate
        overwrite: Whether an existing file may be replaced

    Returns:
        Validated Path object

    Raises:
        ConfigurationError: If the file exists without ``overwrite`` or the
            location is not writable
    """
    path_obj = validate_path_security(path)

    if path_obj.exists():
        if not overwrite:
            raise ConfigurationError(
                "The file already exists, to overwrite a file use the flag -O",
                context={"path": str(path_obj)},
            )
        if path_obj.is_dir():
            raise ConfigurationError(
                f"Output path is a directory: {path_obj}", context={"path": str(path_obj)}
            )

    parent = path_obj.parent
    if parent.exists() and not os.access(parent, os.W_OK):
        raise ConfigurationError(
            f"Parent directory is not writable: {parent}", context={"path": str(path_obj)}
        )

    return path_obj


def validate_input_paths(paths: Iterable[str | Path]) -> list[Path]:
    """Validate the ordered list of input images.

    Returns:
        The inputs as Path objects, order preserved

    Raises:
        ConfigurationError: If no input is given
        InputNotFoundError: For the first input that does not exist
    """
    validated = []
    for path in paths:
        path_obj = validate_path_security(path)
        if not path_obj.is_file():
            raise InputNotFoundError(
                f"File {path_obj} does not exist", context={"path": str(path_obj)}
            )
        validated.append(path_obj)

    if not validated:
        raise ConfigurationError("At least one input image is required")

    return validated
