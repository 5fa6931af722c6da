"""
PURPOSE: Version information for the Signal Ledger service.

Reads version.json from the project root when running from a checkout and
falls back to the installed distribution's metadata otherwise. The result is
cached after the first call.
"""

import json
from importlib import metadata
from pathlib import Path
from typing import Any, Dict, Optional

DISTRIBUTION_NAME = "signal-ledger"
VERSION_FILE: Path = Path(__file__).resolve().parents[2] / "version.json"

_version_cache: Optional[Dict[str, Any]] = None


def get_version() -> Dict[str, Any]:
    """
    PURPOSE: Retrieve version information for Signal Ledger.

    Returns:
        Dict[str, Any]: At least a "version" key; version.json also supplies
            codename, updated_at and changelog.

    Raises:
        json.JSONDecodeError: If version.json exists but is invalid JSON.
    """
    global _version_cache

    if _version_cache is not None:
        return _version_cache

    if VERSION_FILE.is_file():
        with open(VERSION_FILE, "r", encoding="utf-8") as f:
            _version_cache = json.load(f)
    else:
        try:
            _version_cache = {"version": metadata.version(DISTRIBUTION_NAME)}
        except metadata.PackageNotFoundError:
            _version_cache = {"version": "unknown"}

    return _version_cache
