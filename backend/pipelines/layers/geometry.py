"""
Geometry Model
Tagged union of the GeoJSON coordinate-bearing geometry kinds.

Each variant knows the nesting depth of its coordinate tree, so mapping a
coordinate function never has to guess where positions live:

    Point                       position
    LineString, MultiPoint      [position, ...]
    Polygon, MultiLineString    [[position, ...], ...]
    MultiPolygon                [[[position, ...], ...], ...]
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, List, Type

Position = List[float]
CoordinateFunction = Callable[[Position], Position]


class GeometryParseError(ValueError):
    """Raised when a geometry dict does not match its declared kind"""


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_position(value: Any) -> bool:
    """A position is a list of at least two numbers (x, y[, z, ...])"""
    return isinstance(value, (list, tuple)) and len(value) >= 2 and all(is_number(v) for v in value)


def _check_tree(node: Any, depth: int, kind: str) -> None:
    if depth == 0:
        if not is_position(node):
            raise GeometryParseError(f"{kind}: expected a position, got {node!r:.60}")
        return
    if not isinstance(node, (list, tuple)):
        raise GeometryParseError(f"{kind}: expected a list at depth {depth}, got {type(node).__name__}")
    for child in node:
        _check_tree(child, depth - 1, kind)


def _map_tree(node: Any, depth: int, fn: CoordinateFunction) -> Any:
    if depth == 0:
        return list(fn(list(node)))
    return [_map_tree(child, depth - 1, fn) for child in node]


@dataclass(frozen=True)
class Geometry:
    """Base variant. Subclasses only declare their kind and depth."""

    coordinates: Any

    kind: ClassVar[str] = ""
    depth: ClassVar[int] = 0

    def __post_init__(self):
        _check_tree(self.coordinates, self.depth, self.kind)

    def map_coordinates(self, fn: CoordinateFunction) -> "Geometry":
        return type(self)(_map_tree(self.coordinates, self.depth, fn))

    def positions(self) -> List[Position]:
        """Flatten the coordinate tree into its positions, in order"""
        out: List[Position] = []

        def collect(position: Position) -> Position:
            out.append(position)
            return position

        self.map_coordinates(collect)
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "coordinates": self.coordinates}


@dataclass(frozen=True)
class Point(Geometry):
    kind: ClassVar[str] = "Point"
    depth: ClassVar[int] = 0


@dataclass(frozen=True)
class LineString(Geometry):
    kind: ClassVar[str] = "LineString"
    depth: ClassVar[int] = 1


@dataclass(frozen=True)
class MultiPoint(Geometry):
    kind: ClassVar[str] = "MultiPoint"
    depth: ClassVar[int] = 1


@dataclass(frozen=True)
class Polygon(Geometry):
    kind: ClassVar[str] = "Polygon"
    depth: ClassVar[int] = 2


@dataclass(frozen=True)
class MultiLineString(Geometry):
    kind: ClassVar[str] = "MultiLineString"
    depth: ClassVar[int] = 2


@dataclass(frozen=True)
class MultiPolygon(Geometry):
    kind: ClassVar[str] = "MultiPolygon"
    depth: ClassVar[int] = 3


GEOMETRY_CLASSES: Dict[str, Type[Geometry]] = {
    cls.kind: cls for cls in (Point, LineString, Polygon, MultiPoint, MultiLineString, MultiPolygon)
}

GEOMETRY_TYPES = tuple(GEOMETRY_CLASSES)


def parse_geometry(raw: Any) -> Geometry:
    """
    Build the typed variant for a GeoJSON geometry dict.

    Raises:
        GeometryParseError: unknown kind, missing coordinates or wrong nesting
    """
    if not isinstance(raw, dict):
        raise GeometryParseError(f"geometry must be an object, got {type(raw).__name__}")
    cls = GEOMETRY_CLASSES.get(raw.get("type"))
    if cls is None:
        raise GeometryParseError(f"unsupported geometry type: {raw.get('type')!r}")
    if "coordinates" not in raw or raw["coordinates"] is None:
        raise GeometryParseError(f"{cls.kind}: missing coordinates")
    return cls(raw["coordinates"])


def map_coordinates(geometry: Geometry, fn: CoordinateFunction) -> Geometry:
    """Apply fn to every position of geometry, keeping the tree shape"""
    return geometry.map_coordinates(fn)


def is_valid_lon_lat(lon: float, lat: float) -> bool:
    if not (math.isfinite(lon) and math.isfinite(lat)):
        return False
    return -180 <= lon <= 180 and -90 <= lat <= 90
