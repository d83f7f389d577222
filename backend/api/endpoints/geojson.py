"""
GeoJSON Layer Endpoints
List, upload and delete the map layers consumed by the map view
"""
from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
import logging

from config import settings
from config.paths import layers_root
from pipelines.layers import IngestOptions, LayerIngestPipeline
from pipelines.layers.errors import (
    InvalidFilename,
    LayerError,
    MissingFile,
    PayloadTooLarge,
    UnsupportedFileType,
)
from services.layers import LayerRegistry
from utils.file_handler import is_valid_layer_file

logger = logging.getLogger(__name__)
router = APIRouter()


class LayerListResponse(BaseModel):
    layers: List[Dict[str, Any]]


class UploadResponse(BaseModel):
    success: bool
    layer: Dict[str, Any]
    message: str
    warnings: List[Dict[str, Any]] = []


class DeleteResponse(BaseModel):
    success: bool
    message: str
    deletedLayer: str


def get_layer_registry() -> LayerRegistry:
    return LayerRegistry(
        layers_root(),
        system_layers=settings.LAYERS_SYSTEM_LAYERS,
        public_prefix=settings.LAYERS_PUBLIC_PREFIX,
    )


_pipeline: Optional[LayerIngestPipeline] = None


def get_ingest_pipeline() -> LayerIngestPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = LayerIngestPipeline()
    return _pipeline


def _clean(value: Optional[str]) -> Optional[str]:
    """Blank form fields count as absent"""
    if value is None:
        return None
    value = value.strip()
    return value or None


@router.get("/list", response_model=LayerListResponse)
async def list_layers(registry: LayerRegistry = Depends(get_layer_registry)):
    """
    List every layer file in the storage directory

    Returns:
        dict: {layers: [{id, name, filename, url, legendField, isSystemLayer, canDelete}]}
    """
    try:
        layers = registry.list_layers()
        return {"layers": [layer.to_dict() for layer in layers]}
    except LayerError:
        raise
    except Exception as e:
        logger.error(f"❌ Listing layers failed: {e}")
        raise LayerError(f"Error listing GeoJSON layers: {e}")


@router.post("/upload", response_model=UploadResponse)
async def upload_layer(
    file: Optional[UploadFile] = File(None),
    filename: Optional[str] = Form(None),
    legend_field: Optional[str] = Form(None, alias="legendField"),
    latitude_field: Optional[str] = Form(None, alias="latitudeField"),
    longitude_field: Optional[str] = Form(None, alias="longitudeField"),
    utm_zone: Optional[str] = Form(None, alias="utmZone"),
    registry: LayerRegistry = Depends(get_layer_registry),
    pipeline: LayerIngestPipeline = Depends(get_ingest_pipeline),
):
    """
    Upload a GeoJSON/TopoJSON layer, optionally reprojecting UTM coordinates
    and rebuilding point geometry from lat/lon columns before saving it.
    """
    try:
        if file is None:
            raise MissingFile("No file was received")

        layer_name = _clean(filename)
        if not layer_name:
            raise InvalidFilename("File name is required")

        if not is_valid_layer_file(file.filename, file.content_type):
            raise UnsupportedFileType("Only JSON/GeoJSON/TopoJSON files are allowed")

        max_bytes = settings.LAYERS_MAX_UPLOAD_BYTES
        content = await file.read(max_bytes + 1)
        if len(content) > max_bytes:
            raise PayloadTooLarge(f"File exceeds the {max_bytes / (1024 * 1024):.0f} MB limit")

        logger.info(f"🗺️ Layer upload '{layer_name}' ({len(content) / 1024:.1f} KB)")
        options = IngestOptions(
            utm_zone=_clean(utm_zone),
            latitude_field=_clean(latitude_field),
            longitude_field=_clean(longitude_field),
        )
        result = pipeline.process_bytes(content, options)

        layer = registry.persist(layer_name, result.payload, _clean(legend_field))

        return {
            "success": True,
            "layer": layer.to_upload_dict(),
            "message": "Layer uploaded successfully",
            "warnings": [w.to_dict() for w in result.warnings],
        }

    except LayerError as e:
        logger.warning(f"⚠️ Layer upload rejected: {e.message}")
        raise
    except Exception as e:
        logger.error(f"❌ Layer upload failed: {e}")
        raise LayerError(f"Internal error while processing the file: {e}")
    finally:
        if file is not None:
            await file.close()


@router.delete("/delete/{layer_id}", response_model=DeleteResponse)
async def delete_layer(layer_id: str, registry: LayerRegistry = Depends(get_layer_registry)):
    """
    Delete a user layer and its metadata. System layers answer 403.
    """
    try:
        deleted = registry.delete(layer_id)
        return {
            "success": True,
            "message": "Layer deleted successfully",
            "deletedLayer": deleted,
        }
    except LayerError:
        raise
    except Exception as e:
        logger.error(f"❌ Deleting layer {layer_id} failed: {e}")
        raise LayerError(f"Internal error while deleting the layer: {e}")
