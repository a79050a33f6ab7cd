"""Threaded SOCKS5 proxy server."""

import pathlib
import sys
from importlib import metadata

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

DISTRIBUTION_NAME = "socks5-proxy"


def _source_version() -> str:
    """Read the version from this project's pyproject.toml when running from source."""
    current_dir = pathlib.Path(__file__).parent
    for parent in [current_dir, *current_dir.parents]:
        pyproject_path = parent / "pyproject.toml"
        if not pyproject_path.exists():
            continue
        with pyproject_path.open("rb") as f:
            project = tomllib.load(f).get("project", {})
        # skip pyproject files of whatever project we are installed into
        if project.get("name") == DISTRIBUTION_NAME:
            return project.get("version", "0.0.0")
    return "0.0.0"


def get_version() -> str:
    """Return the installed distribution's version."""
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return _source_version()


__version__ = get_version()
