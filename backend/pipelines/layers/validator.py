"""
Layer Validator
Shallow shape check for uploaded GeoJSON/TopoJSON payloads.

Only the top-level ``type`` tag is inspected. Anything deeper (ring closure,
winding order, self-intersection) is left to the map client.
"""
from __future__ import annotations

import logging
from typing import Any

from .errors import InvalidFormat
from .geometry import GEOMETRY_TYPES

logger = logging.getLogger(__name__)

TOPOLOGY_TYPE = "Topology"
CONTAINER_TYPES = ("FeatureCollection", "Feature", "GeometryCollection")

VALID_TYPES = (TOPOLOGY_TYPE,) + CONTAINER_TYPES + GEOMETRY_TYPES


class LayerValidator:
    """Rejects payloads whose top-level type is not in VALID_TYPES"""

    def __init__(self, valid_types=VALID_TYPES):
        self.valid_types = tuple(valid_types)

    def validate(self, value: Any) -> str:
        """
        Check the top-level type tag of a parsed JSON value

        Args:
            value: Parsed JSON document

        Returns:
            str: The accepted type name

        Raises:
            InvalidFormat: value is not an object, or its type is missing/unknown
        """
        layer_type = value.get("type") if isinstance(value, dict) else None
        if layer_type not in self.valid_types:
            logger.warning(f"⚠️ Rejected payload with type={layer_type!r}")
            raise InvalidFormat(
                f"Invalid file type. Expected one of: {', '.join(self.valid_types)}"
            )
        return layer_type
