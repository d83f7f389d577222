"""
Central configuration for backend settings.
"""
import os


def _csv(value: str) -> list:
    return [item.strip() for item in value.split(",") if item.strip()]


# Upload body cap, read fully into memory before parsing
LAYERS_MAX_UPLOAD_BYTES: int = int(os.getenv("LAYERS_MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))

# Pre-installed layers that can be listed but never deleted
LAYERS_SYSTEM_LAYERS: list = _csv(os.getenv("LAYERS_SYSTEM_LAYERS", "Lotes Nacional,Yacimientos Lote X"))

# URL prefix the storage directory is served under
LAYERS_PUBLIC_PREFIX: str = os.getenv("LAYERS_PUBLIC_PREFIX", "/geojson").rstrip("/")

LAYERS_CORS_ORIGINS: list = _csv(os.getenv("LAYERS_CORS_ORIGINS", "*"))
