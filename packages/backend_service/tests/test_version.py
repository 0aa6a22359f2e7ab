"""Tests for version module."""

import backend_service
from backend_service.version import __version__


def test_version_format() -> None:
    """Test that version is in expected format."""
    assert isinstance(__version__, str)
    assert __version__ == "0.1.0"

    parts = __version__.split(".")
    assert len(parts) == 3
    assert all(part.isdigit() for part in parts)


def test_version_exported_from_package() -> None:
    """Test that the package re-exports its version."""
    assert backend_service.__version__ == __version__
