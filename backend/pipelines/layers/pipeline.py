"""
Layer Ingest Pipeline
Main orchestrator for turning an uploaded file into a persistable GeoJSON layer.

Stages, in order:
    1. parse JSON
    2. LayerValidator (top-level type)
    3. TopologyDecoder (Topology input only, first object)
    4. GeometryTraverser + ProjectionTransformer (when a UTM zone is given)
    5. PointGeometryReconstructor (when both lat/lon fields are given)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import MalformedJSON
from .projection import ProjectionTransformer, get_projection_transformer
from .reconstruction import PointGeometryReconstructor, ReconstructionWarning
from .topology import TopologyDecoder
from .traverser import map_geojson
from .validator import TOPOLOGY_TYPE, LayerValidator

logger = logging.getLogger(__name__)


@dataclass
class IngestOptions:
    utm_zone: Optional[str] = None
    latitude_field: Optional[str] = None
    longitude_field: Optional[str] = None

    @property
    def reconstruct_points(self) -> bool:
        return bool(self.latitude_field and self.longitude_field)


@dataclass
class IngestResult:
    payload: Dict[str, Any]
    source_type: str
    topology_decoded: bool = False
    reprojected: bool = False
    reconstructed: bool = False
    warnings: List[ReconstructionWarning] = field(default_factory=list)


def parse_layer_json(content: bytes) -> Any:
    """
    Decode an uploaded file body as UTF-8 JSON

    Raises:
        MalformedJSON: body is not UTF-8 or not valid JSON
    """
    try:
        text = content.decode("utf-8") if isinstance(content, (bytes, bytearray)) else content
        return json.loads(text)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedJSON(f"The file does not contain valid JSON: {e}")


class LayerIngestPipeline:
    """
    Pipeline for validating and normalizing uploaded map layers
    """

    def __init__(
        self,
        validator: LayerValidator = None,
        projection: ProjectionTransformer = None,
        topology_decoder: TopologyDecoder = None,
    ):
        self.validator = validator or LayerValidator()
        self.projection = projection or get_projection_transformer()
        self.topology_decoder = topology_decoder or TopologyDecoder()

    def process_bytes(self, content: bytes, options: IngestOptions = None) -> IngestResult:
        return self.process(parse_layer_json(content), options)

    def process(self, data: Any, options: IngestOptions = None) -> IngestResult:
        """
        Run a parsed payload through validation and the optional transforms

        Args:
            data: Parsed JSON document
            options: Zone and lat/lon column options

        Returns:
            IngestResult: GeoJSON payload plus per-feature reconstruction warnings
        """
        options = options or IngestOptions()
        source_type = self.validator.validate(data)
        result = IngestResult(payload=data, source_type=source_type)

        # resolve the zone before any heavy work so a bad zone fails fast
        project = self.projection.coordinate_function(options.utm_zone) if options.utm_zone else None

        if source_type == TOPOLOGY_TYPE:
            result.payload = self.topology_decoder.decode(result.payload)
            result.topology_decoded = True

        if project is not None:
            logger.info(f"🔄 Transforming UTM zone {options.utm_zone} coordinates to WGS84")
            result.payload = map_geojson(result.payload, project)
            result.reprojected = True
            logger.info("✅ Coordinates transformed")

        if options.reconstruct_points:
            logger.info(
                f"📍 Rebuilding point geometries from columns {options.latitude_field} / {options.longitude_field}"
            )
            reconstructor = PointGeometryReconstructor(
                options.latitude_field, options.longitude_field, self.topology_decoder
            )
            result.payload, result.warnings = reconstructor.reconstruct(result.payload)
            result.reconstructed = True
            logger.info(f"✅ Point geometries rebuilt ({len(result.warnings)} warning(s))")

        return result
