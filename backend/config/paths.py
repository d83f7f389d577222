"""
Centralized path configuration for backend data storage.

Responsibilities:
- Decide dev vs frozen (PyInstaller) mode.
- Provide a stable root for the layer registry.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path


def is_frozen() -> bool:
    """Detect if we are running inside a PyInstaller bundle."""
    return getattr(sys, "frozen", False) is True


def backend_root() -> Path:
    """
    Backend source root (the 'backend' directory in the repo).
    In frozen mode this resolves under the PyInstaller extraction dir, so it should
    NOT be used for user data.
    """
    if is_frozen():
        base = Path(getattr(sys, "_MEIPASS", Path(__file__).resolve().parents[1]))
        return base / "backend"

    # Dev / non-frozen: backend/config/paths.py -> backend/config -> backend
    return Path(__file__).resolve().parents[1]


def app_data_root() -> Path:
    """
    Stable root for user data in frozen mode: LOCALAPPDATA\\GeoLayers\\Data.
    """
    local_appdata = os.environ.get("LOCALAPPDATA") or os.path.expanduser(r"~\AppData\Local")
    return Path(local_appdata) / "GeoLayers" / "Data"


def layers_root() -> Path:
    """
    Root of the flat layer registry.
    - LAYERS_STORAGE_DIR when set.
    - Frozen: LOCALAPPDATA\\GeoLayers\\Data\\geojson.
    - Dev: backend/layers_data/geojson.
    The directory is not created here; the registry creates it on first write.
    """
    override = os.environ.get("LAYERS_STORAGE_DIR")
    if override:
        return Path(override).expanduser()
    if is_frozen():
        return app_data_root() / "geojson"
    return backend_root() / "layers_data" / "geojson"
