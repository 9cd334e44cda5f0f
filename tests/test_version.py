"""Tests for version information."""

from msfs_api import __version__
from msfs_api.version import get_version


class TestVersion:
    """Test version lookup."""

    def test_version_file_matches_package(self) -> None:
        """Test that the VERSION file and the package fallback agree."""
        assert get_version() == __version__

    def test_version_format(self) -> None:
        """Test that the version is dotted numeric."""
        parts = get_version().split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)
