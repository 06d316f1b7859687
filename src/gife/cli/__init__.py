"""CLI module for gife.

gife is a single command; ``main`` is that command so the console script
and ``python -m gife`` share one entry point.
"""

from .encode_cmd import encode

main = encode

__all__ = [
    "encode",
    "main",
]
