"""
File Handling Utilities
Checks for uploaded layer files
"""
from pathlib import Path
from typing import Optional

VALID_LAYER_EXTENSIONS = {'.json', '.geojson', '.topojson'}
VALID_LAYER_CONTENT_TYPES = {'application/json', 'application/geo+json', 'text/plain'}


def is_valid_layer_file(filename: Optional[str], content_type: Optional[str] = None) -> bool:
    """
    Check if an upload looks like a JSON/GeoJSON/TopoJSON file

    Args:
        filename: Original filename of the upload
        content_type: Declared MIME type, parameters (e.g. charset) ignored

    Returns:
        True if either the extension or the content type is accepted
    """
    mime = (content_type or '').split(';')[0].strip().lower()
    if mime in VALID_LAYER_CONTENT_TYPES:
        return True
    file_ext = Path(filename or '').suffix.lower()
    return file_ext in VALID_LAYER_EXTENSIONS
