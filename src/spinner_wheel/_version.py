"""Minimal version helper for the spinner_wheel application."""

import json
from os import PathLike
from pathlib import Path
import sys

PACKAGE_NAME = "spinner_wheel"
VERSION_FILENAME = "version.json"
FALLBACK_VERSION = "0.0.0"


def get_embedded_path(name: str | PathLike[str]) -> Path:
    """Return the path to an embedded resource shipped with the binary."""

    base = Path(getattr(sys, "_MEIPASS", Path(__file__).resolve().parent))
    return base / Path(name)


def get_version() -> str:
    """
    Get version for application.

    :return: Version number.
    """
    if getattr(sys, "frozen", False):  # *.exe
        with open(get_embedded_path(VERSION_FILENAME), "r") as f:
            version = str(json.load(f)["version"])
    else:  # dev
        import setuptools_scm  # type: ignore[import-untyped]

        root = Path(__file__).resolve().parents[2]
        version = setuptools_scm.get_version(
            root=str(root), fallback_version=FALLBACK_VERSION
        )
    return version


__all__ = ["get_version", "get_embedded_path"]
