"""
Layer Errors
Exception taxonomy for layer ingestion and the layer registry.

Every error carries the HTTP status the API layer answers with, so endpoints
and the global exception handler never need their own mapping table.
"""
from __future__ import annotations


class LayerError(Exception):
    """Base class for all layer ingestion and registry failures"""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.message}


class InvalidFormat(LayerError):
    status_code = 400


class InvalidZone(LayerError):
    status_code = 400


class MalformedJSON(LayerError):
    status_code = 400


class InvalidFilename(LayerError):
    status_code = 400


class InvalidCoordinates(LayerError):
    status_code = 400


class MissingFile(LayerError):
    status_code = 400


class UnsupportedFileType(LayerError):
    status_code = 400


class PayloadTooLarge(LayerError):
    status_code = 413


class Forbidden(LayerError):
    status_code = 403


class NotFound(LayerError):
    status_code = 404


class StorageFailure(LayerError):
    status_code = 500
