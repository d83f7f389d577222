"""
Point Geometry Reconstructor
Rebuilds Point geometries from latitude/longitude attribute columns.

Used when an uploaded layer has missing or corrupted geometry but carries the
coordinates in its attribute table. A successful row always becomes a Point,
whatever geometry it had before. A bad row (missing, unparseable or out of
range values) is left untouched and reported as a ReconstructionWarning; it
never fails the batch.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .geometry import is_number
from .topology import TopologyDecoder

logger = logging.getLogger(__name__)

# Leading numeric prefix of a column value:
# "-12.05°" -> -12.05, "1_000" -> 1, "12abc" -> 12
_NUMERIC_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass
class ReconstructionWarning:
    feature_index: int
    reason: str
    latitude: Any = None
    longitude: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "featureIndex": self.feature_index,
            "reason": self.reason,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


def parse_coordinate(value: Any) -> Optional[float]:
    """
    Parse a column value as a float, returning None when it is not a finite number.
    Strings are read up to the end of their leading number; trailing units or
    hemisphere letters are ignored.
    """
    if is_number(value):
        number = float(value)
    elif isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value.lstrip())
        if match is None:
            return None
        number = float(match.group(0).replace("Infinity", "inf"))
    else:
        return None
    return number if math.isfinite(number) else None


class PointGeometryReconstructor:
    """Derives Point geometry per feature from two named attribute columns"""

    def __init__(self, lat_field: str, lon_field: str, topology_decoder: TopologyDecoder = None):
        self.lat_field = lat_field
        self.lon_field = lon_field
        self.topology_decoder = topology_decoder or TopologyDecoder()

    def reconstruct(self, value: Any) -> Tuple[Any, List[ReconstructionWarning]]:
        """
        Reconstruct Point geometries in a Feature, FeatureCollection or Topology

        Returns:
            (value', warnings): GeometryCollection and bare geometries come back
            unchanged with no warnings
        """
        warnings: List[ReconstructionWarning] = []
        if not isinstance(value, dict):
            return value, warnings

        value_type = value.get("type")
        if value_type == "Topology":
            value = self.topology_decoder.decode(value)
            value_type = value["type"]

        if value_type == "FeatureCollection":
            features = value.get("features")
            if not isinstance(features, list):
                return value, warnings
            rebuilt = [self._reconstruct_feature(f, i, warnings) for i, f in enumerate(features)]
            result = {**value, "features": rebuilt}
        elif value_type == "Feature":
            result = self._reconstruct_feature(value, 0, warnings)
        else:
            return value, warnings

        if warnings:
            logger.warning(f"⚠️ Point reconstruction skipped {len(warnings)} feature(s)")
        return result, warnings

    def _reconstruct_feature(self, feature: Any, index: int, warnings: List[ReconstructionWarning]) -> Any:
        properties = feature.get("properties") if isinstance(feature, dict) else None
        if not isinstance(properties, dict):
            warnings.append(ReconstructionWarning(index, "feature has no properties"))
            logger.warning(f"⚠️ [reconstruct] Feature {index} has no properties")
            return feature

        raw_lat = properties.get(self.lat_field)
        raw_lon = properties.get(self.lon_field)
        lat = parse_coordinate(raw_lat)
        lon = parse_coordinate(raw_lon)

        if lat is None or lon is None:
            warnings.append(ReconstructionWarning(index, "invalid coordinates", raw_lat, raw_lon))
            logger.warning(f"⚠️ [reconstruct] Invalid coordinates in feature {index}: lat={raw_lat!r} lon={raw_lon!r}")
            return feature

        if not (-90 <= lat <= 90 and -180 <= lon <= 180):
            warnings.append(ReconstructionWarning(index, "coordinates out of range", raw_lat, raw_lon))
            logger.warning(f"⚠️ [reconstruct] Coordinates out of range in feature {index}: lat={lat} lon={lon}")
            return feature

        return {**feature, "geometry": {"type": "Point", "coordinates": [lon, lat]}}


def reconstruct_points(value: Any, lat_field: str, lon_field: str) -> Tuple[Any, List[ReconstructionWarning]]:
    return PointGeometryReconstructor(lat_field, lon_field).reconstruct(value)
