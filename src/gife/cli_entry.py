"""Entry point for the gife console script."""

from .cli import main

__all__ = ["main"]

if __name__ == "__main__":
    main()
