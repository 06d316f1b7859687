"""I/O utilities for logging setup and atomic file writes."""

import logging
import os
import stat
import sys
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from shutil import move


def setup_logging(log_level: str = "INFO", log_dir: Path | None = None) -> logging.Logger:
    """Set up logging configuration for gife.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Optional directory for a timestamped log file

    Returns:
        Configured logger instance
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        handlers.append(logging.FileHandler(log_dir / f"gife_{timestamp}.log"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )

    return logging.getLogger("gife")


def _output_mode(target_path: Path) -> int:
    """Permission bits for a new file at *target_path*.

    An existing target keeps its mode; otherwise the process umask applies,
    as for a plain ``open(path, "w")``.
    """
    if target_path.exists():
        return stat.S_IMODE(target_path.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


@contextmanager
def atomic_write(target_path: Path, mode: str = "wb"):
    """Context manager for atomic file writes using temporary files.

    The temporary file lives next to *target_path* and is moved into place
    only when the block completes; on error it is removed and the target is
    left untouched. The handle may be closed inside the block.

    Args:
        target_path: Final path where file should be written
        mode: File open mode

    Yields:
        File handle for writing

    Example:
        with atomic_write(Path("out.gif")) as f:
            f.write(data)
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode=mode,
        dir=target_path.parent,
        delete=False,
        suffix=f".tmp_{target_path.name}",
    ) as temp_file:
        try:
            yield temp_file
            if not temp_file.closed:
                temp_file.flush()
                temp_file.close()
            os.chmod(temp_file.name, _output_mode(target_path))
            move(temp_file.name, target_path)
        except BaseException:
            if not temp_file.closed:
                temp_file.close()
            Path(temp_file.name).unlink(missing_ok=True)
            raise
