"""
Projection Transformer
UTM (southern hemisphere, WGS84 datum) to geographic longitude/latitude.

Only the zones that cover Peru are supported. pyproj transformers are cached
per zone and per thread, since a Transformer instance must not be shared
between threads.
"""
from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from typing import Dict, Sequence

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from .errors import InvalidCoordinates, InvalidZone
from .geometry import CoordinateFunction, Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UTMZone:
    zone_number: int
    epsg_code: int

    @property
    def label(self) -> str:
        return f"{self.zone_number}S"


SUPPORTED_ZONES: Dict[str, UTMZone] = {
    "17": UTMZone(17, 32717),
    "18": UTMZone(18, 32718),
    "19": UTMZone(19, 32719),
}


class ProjectionTransformer:
    """
    Maps projected (easting, northing) pairs of a supported UTM zone to
    (longitude, latitude) on WGS84.
    """

    def __init__(self, supported_zones: Dict[str, UTMZone] = None):
        self.supported_zones = dict(supported_zones or SUPPORTED_ZONES)
        self.wgs84 = CRS.from_epsg(4326)
        self._local = threading.local()

    def zone_for(self, zone: str) -> UTMZone:
        """
        Normalize a zone identifier ("18", "18S", "utm_18s") and look it up

        Raises:
            InvalidZone: identifier is not one of the supported zones
        """
        key = str(zone if zone is not None else "").strip().lower()
        if key.startswith("utm_"):
            key = key[4:]
        if key.endswith("s"):
            key = key[:-1]
        utm_zone = self.supported_zones.get(key)
        if utm_zone is None:
            supported = ", ".join(sorted(self.supported_zones))
            raise InvalidZone(f"Invalid UTM zone: {zone!r}. Supported zones: {supported}")
        return utm_zone

    def _transformer(self, utm_zone: UTMZone) -> Transformer:
        cache = getattr(self._local, "transformers", None)
        if cache is None:
            cache = self._local.transformers = {}
        transformer = cache.get(utm_zone.zone_number)
        if transformer is None:
            try:
                utm_crs = CRS.from_epsg(utm_zone.epsg_code)
            except CRSError as e:
                raise InvalidZone(f"Invalid UTM zone {utm_zone.label}: {e}")
            # always_xy: input is (easting, northing), output is (lon, lat)
            transformer = Transformer.from_crs(utm_crs, self.wgs84, always_xy=True)
            cache[utm_zone.zone_number] = transformer
            logger.debug(f"📍 Created UTM→GEO transformer for zone {utm_zone.label} (EPSG:{utm_zone.epsg_code})")
        return transformer

    def transform_point(self, zone: str, position: Sequence[float]) -> Position:
        """
        Transform one UTM position to geographic coordinates

        Args:
            zone: Supported zone identifier
            position: [easting, northing, *extra] in meters

        Returns:
            list: [lon, lat, *extra]; extra ordinates are carried through

        Raises:
            InvalidZone: unsupported zone
            InvalidCoordinates: the projection produced a non-finite result
        """
        utm_zone = self.zone_for(zone)
        return self._project(utm_zone, position)

    def _project(self, utm_zone: UTMZone, position: Sequence[float]) -> Position:
        x, y = position[0], position[1]
        try:
            lon, lat = self._transformer(utm_zone).transform(x, y)
        except ProjError as e:
            raise InvalidCoordinates(f"Projection failed for ({x}, {y}) in zone {utm_zone.label}: {e}")
        if not (math.isfinite(lon) and math.isfinite(lat)):
            raise InvalidCoordinates(
                f"Projection produced invalid coordinates for ({x}, {y}) in zone {utm_zone.label}"
            )
        return [lon, lat, *position[2:]]

    def coordinate_function(self, zone: str) -> CoordinateFunction:
        """Bind a zone into a position function for the geometry traverser"""
        utm_zone = self.zone_for(zone)

        def project(position: Position) -> Position:
            return self._project(utm_zone, position)

        return project


_default_transformer: ProjectionTransformer | None = None


def get_projection_transformer() -> ProjectionTransformer:
    global _default_transformer
    if _default_transformer is None:
        _default_transformer = ProjectionTransformer()
    return _default_transformer


def transform_point(zone: str, position: Sequence[float]) -> Position:
    return get_projection_transformer().transform_point(zone, position)
