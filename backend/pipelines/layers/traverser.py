"""
Geometry Traverser
Applies a coordinate function across any GeoJSON value while keeping its shape.

Containers (FeatureCollection, Feature, GeometryCollection) are walked as
plain dicts so foreign members survive untouched; leaf geometries go through
the typed model in ``geometry.py``. A leaf that fails to parse (missing or
wrongly nested coordinates) or holds a position the coordinate function
rejects is passed through unchanged, so one malformed feature never aborts a
whole-file transform.
"""
from __future__ import annotations

import logging
from typing import Any

from .errors import InvalidCoordinates
from .geometry import CoordinateFunction, GeometryParseError, parse_geometry

logger = logging.getLogger(__name__)


class GeometryTraverser:
    """Dispatches a coordinate function over GeoJSON containers and geometries"""

    def __init__(self, fn: CoordinateFunction):
        self.fn = fn
        self.skipped = 0

    def map_geojson(self, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        value_type = value.get("type")
        if value_type == "FeatureCollection":
            return self.map_feature_collection(value)
        if value_type == "Feature":
            return self.map_feature(value)
        return self.map_geometry(value)

    def map_feature_collection(self, collection: dict) -> dict:
        features = collection.get("features")
        if not isinstance(features, list):
            return collection
        return {**collection, "features": [self.map_feature(f) for f in features]}

    def map_feature(self, feature: Any) -> Any:
        if not isinstance(feature, dict) or not feature.get("geometry"):
            return feature
        return {**feature, "geometry": self.map_geometry(feature["geometry"])}

    def map_geometry(self, geometry: Any) -> Any:
        if not isinstance(geometry, dict):
            return geometry
        if geometry.get("type") == "GeometryCollection":
            members = geometry.get("geometries")
            if not isinstance(members, list):
                return geometry
            return {**geometry, "geometries": [self.map_geometry(g) for g in members]}
        try:
            typed = parse_geometry(geometry)
            mapped = typed.map_coordinates(self.fn)
        except (GeometryParseError, InvalidCoordinates) as e:
            self.skipped += 1
            logger.debug(f"Passing geometry through unchanged: {e}")
            return geometry
        return {**geometry, "coordinates": mapped.coordinates}


def map_geojson(value: Any, fn: CoordinateFunction) -> Any:
    """Return a copy of value with fn applied to every position it contains"""
    traverser = GeometryTraverser(fn)
    result = traverser.map_geojson(value)
    if traverser.skipped:
        logger.info(f"⚠️ {traverser.skipped} geometr{'y' if traverser.skipped == 1 else 'ies'} passed through untransformed")
    return result
