"""
Layers Module
Validation, reprojection, topology decoding and point reconstruction for uploaded map layers
"""
from .pipeline import IngestOptions, IngestResult, LayerIngestPipeline
from .projection import ProjectionTransformer
from .reconstruction import PointGeometryReconstructor, ReconstructionWarning
from .topology import TopologyDecoder
from .traverser import GeometryTraverser, map_geojson
from .validator import LayerValidator, VALID_TYPES

__all__ = [
    "IngestOptions",
    "IngestResult",
    "LayerIngestPipeline",
    "ProjectionTransformer",
    "PointGeometryReconstructor",
    "ReconstructionWarning",
    "TopologyDecoder",
    "GeometryTraverser",
    "map_geojson",
    "LayerValidator",
    "VALID_TYPES",
]
