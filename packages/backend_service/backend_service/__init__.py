"""Backend service: prints every message received on its destination."""

from .version import __version__

__all__ = ["__version__"]
