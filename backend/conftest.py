from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

import pytest

# Point storage and logs at throwaway directories before main.py is imported
_STORAGE_DIR = Path(tempfile.mkdtemp(prefix="geolayers_test_"))
os.environ["LAYERS_STORAGE_DIR"] = str(_STORAGE_DIR / "geojson")
os.environ["LOG_DIR"] = str(_STORAGE_DIR / "logs")


@pytest.fixture
def storage_dir() -> Path:
    """The storage root the app is configured with, emptied for each test"""
    root = Path(os.environ["LAYERS_STORAGE_DIR"])
    if root.exists():
        for child in root.iterdir():
            if child.is_dir():
                shutil.rmtree(child)
            else:
                child.unlink()
    root.mkdir(parents=True, exist_ok=True)
    return root


@pytest.fixture
def client(storage_dir):
    from fastapi.testclient import TestClient

    from main import app

    with TestClient(app) as test_client:
        yield test_client
