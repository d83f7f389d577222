"""
Topology Decoder
Converts a TopoJSON Topology into a GeoJSON FeatureCollection.

Only the first named object of ``topology.objects`` is decoded; any other
objects are dropped (and logged). Topology is an input-only format: the
decoded GeoJSON is what the rest of the ingest pipeline and the registry see.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from .errors import InvalidFormat
from .geometry import Position, is_number, is_position

logger = logging.getLogger(__name__)

PositionTransform = Callable[[Position, Optional[int]], Position]


def _position_transform(transform: Any) -> PositionTransform:
    """
    Build the position decoder for a topology.

    With a transform, arc positions are delta-encoded: the running sum is
    reset at the start of every arc (index 0) and for standalone points
    (index None). Without a transform, positions are absolute.
    """
    if transform is None:
        return lambda position, index=None: list(position)

    if not isinstance(transform, dict):
        raise InvalidFormat("Topology transform must be an object with scale and translate")
    scale = transform.get("scale")
    translate = transform.get("translate")
    for name, pair in (("scale", scale), ("translate", translate)):
        if not (isinstance(pair, list) and len(pair) == 2 and all(is_number(v) for v in pair)):
            raise InvalidFormat(f"Topology transform.{name} must be a pair of numbers")

    kx, ky = scale
    dx, dy = translate
    state = [0.0, 0.0]

    def decode(position: Position, index: Optional[int] = None) -> Position:
        if not index:
            state[0] = state[1] = 0.0
        state[0] += position[0]
        state[1] += position[1]
        return [state[0] * kx + dx, state[1] * ky + dy, *position[2:]]

    return decode


class _ArcResolver:
    """Resolves arc references of one topology into coordinate lists"""

    def __init__(self, arcs: List[Any], transform: Any):
        self.arcs = arcs
        self.decode_position = _position_transform(transform)

    def point(self, position: Any) -> Position:
        if not is_position(position):
            raise InvalidFormat(f"Invalid topology point: {position!r:.60}")
        return self.decode_position(position, None)

    def arc(self, index: Any, points: List[Position]) -> None:
        if not isinstance(index, int) or isinstance(index, bool):
            raise InvalidFormat(f"Invalid arc reference: {index!r}")
        arc_index = ~index if index < 0 else index
        if arc_index >= len(self.arcs):
            raise InvalidFormat(f"Arc reference {index} out of range ({len(self.arcs)} arcs)")
        arc = self.arcs[arc_index]
        if not isinstance(arc, list):
            raise InvalidFormat(f"Arc {arc_index} is not a list of positions")

        # consecutive arcs share their junction point
        if points:
            points.pop()
        for k, position in enumerate(arc):
            if not is_position(position):
                raise InvalidFormat(f"Arc {arc_index} holds an invalid position: {position!r:.60}")
            points.append(self.decode_position(position, k))
        if index < 0:
            n = len(arc)
            points[len(points) - n:] = reversed(points[len(points) - n:])

    def line(self, arc_refs: Any) -> List[Position]:
        if not isinstance(arc_refs, list):
            raise InvalidFormat("Line arcs must be a list of arc references")
        points: List[Position] = []
        for index in arc_refs:
            self.arc(index, points)
        if points and len(points) < 2:
            points.append(list(points[0]))
        return points

    def ring(self, arc_refs: Any) -> List[Position]:
        points = self.line(arc_refs)
        while points and len(points) < 4:
            points.append(list(points[0]))
        return points

    def polygon(self, ring_refs: Any) -> List[List[Position]]:
        if not isinstance(ring_refs, list):
            raise InvalidFormat("Polygon arcs must be a list of rings")
        return [self.ring(refs) for refs in ring_refs]

    def geometry(self, obj: Any) -> Optional[Dict[str, Any]]:
        if not isinstance(obj, dict):
            raise InvalidFormat(f"Topology geometry must be an object, got {type(obj).__name__}")
        geometry_type = obj.get("type")
        if geometry_type == "GeometryCollection":
            members = self._list(obj.get("geometries") or [], geometry_type)
            return {"type": geometry_type, "geometries": [self.geometry(m) for m in members]}
        if geometry_type == "Point":
            coordinates = self.point(obj.get("coordinates"))
        elif geometry_type == "MultiPoint":
            coordinates = [self.point(p) for p in self._list(obj.get("coordinates"), geometry_type)]
        elif geometry_type == "LineString":
            coordinates = self.line(obj.get("arcs"))
        elif geometry_type == "MultiLineString":
            coordinates = [self.line(refs) for refs in self._list(obj.get("arcs"), geometry_type)]
        elif geometry_type == "Polygon":
            coordinates = self.polygon(obj.get("arcs"))
        elif geometry_type == "MultiPolygon":
            coordinates = [self.polygon(refs) for refs in self._list(obj.get("arcs"), geometry_type)]
        else:
            return None
        return {"type": geometry_type, "coordinates": coordinates}

    def feature(self, obj: Any) -> Dict[str, Any]:
        if not isinstance(obj, dict):
            raise InvalidFormat(f"Topology geometry must be an object, got {type(obj).__name__}")
        feature: Dict[str, Any] = {"type": "Feature"}
        if obj.get("id") is not None:
            feature["id"] = obj["id"]
        if obj.get("bbox") is not None:
            feature["bbox"] = obj["bbox"]
        properties = obj.get("properties")
        feature["properties"] = {} if properties is None else properties
        feature["geometry"] = self.geometry(obj)
        return feature

    @staticmethod
    def _list(value: Any, geometry_type: str) -> list:
        if not isinstance(value, list):
            raise InvalidFormat(f"{geometry_type} in topology must hold a list, got {type(value).__name__}")
        return value


class TopologyDecoder:
    """Decodes the first named object of a Topology into a FeatureCollection"""

    def decode(self, topology: Dict[str, Any]) -> Dict[str, Any]:
        """
        Decode a TopoJSON Topology

        Args:
            topology: Parsed Topology document

        Returns:
            dict: GeoJSON FeatureCollection of the first named object

        Raises:
            InvalidFormat: broken arc references or malformed objects
        """
        if not isinstance(topology, dict):
            raise InvalidFormat("Topology must be an object")

        objects = topology.get("objects") or {}
        if not isinstance(objects, dict):
            raise InvalidFormat("Topology objects must be an object keyed by name")
        if not objects:
            logger.warning("⚠️ Topology has no objects, decoding to an empty FeatureCollection")
            return {"type": "FeatureCollection", "features": []}

        arcs = topology.get("arcs") or []
        if not isinstance(arcs, list):
            raise InvalidFormat("Topology arcs must be a list")

        names = list(objects)
        first = names[0]
        if len(names) > 1:
            logger.info(f"ℹ️ Topology has {len(names)} objects, decoding only '{first}' (dropped: {names[1:]})")

        resolver = _ArcResolver(arcs, topology.get("transform"))
        obj = objects[first]
        if isinstance(obj, dict) and obj.get("type") == "GeometryCollection":
            members = resolver._list(obj.get("geometries") or [], "GeometryCollection")
            features = [resolver.feature(m) for m in members]
        else:
            features = [resolver.feature(obj)]

        logger.info(f"🗺️ Decoded topology object '{first}' into {len(features)} feature(s)")
        return {"type": "FeatureCollection", "features": features}


def decode_topology(topology: Dict[str, Any]) -> Dict[str, Any]:
    return TopologyDecoder().decode(topology)
