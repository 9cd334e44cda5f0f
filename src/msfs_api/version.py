"""Version information for the MSFS API.

Reads the VERSION file in the project root, with fallback for installed
distributions.
"""

from pathlib import Path

__version__ = "0.1.0"  # Fallback version


def get_version() -> str:
    """Get the current version string.

    Returns:
        Version string (e.g., "0.1.0").
    """
    version_paths = [
        Path(__file__).parent.parent.parent / "VERSION",  # src/msfs_api -> root
        Path("VERSION"),
    ]

    for version_path in version_paths:
        if version_path.is_file():
            try:
                return version_path.read_text(encoding="utf-8").strip()
            except OSError:
                pass

    return __version__
