# =============================================================================
# chainzmq Main Package - Dynamic Version Loading
# =============================================================================
"""
chainzmq - ZeroMQ event publisher for blockchain nodes

Version is loaded dynamically from pyproject.toml via importlib.metadata.

Single Source of Truth: pyproject.toml [project] version
"""

from __future__ import annotations


def _get_version() -> str:
    """
    Get package version from installed metadata.

    Falls back to reading pyproject.toml when the package is not installed.

    Returns:
        Version string (e.g., "0.3.0")
    """
    from importlib.metadata import version, PackageNotFoundError

    try:
        return version("chainzmq")
    except PackageNotFoundError:
        pass  # Not installed, try pyproject.toml

    import tomllib
    from pathlib import Path

    pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
            return data["project"]["version"]

    return "0.0.0-unknown"


__version__: str = _get_version()
__description__: str = "chainzmq - republish node tx/block events over ZeroMQ"

# =============================================================================
# EXPORTS
# =============================================================================
__all__ = [
    "__version__",
    "__description__",
]
