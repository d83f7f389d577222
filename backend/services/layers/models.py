"""
Layer Data Models
================

Registry entry for one persisted map layer.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Layer:
    """A persisted layer file plus its optional legend metadata"""

    id: str
    display_name: str
    filename: str
    url: str
    legend_field: Optional[str] = None
    is_system_layer: bool = False

    @property
    def can_delete(self) -> bool:
        return not self.is_system_layer

    def to_dict(self) -> Dict[str, Any]:
        """Listing shape consumed by the map UI"""
        return {
            "id": self.id,
            "name": self.display_name,
            "filename": self.filename,
            "url": self.url,
            "legendField": self.legend_field,
            "isSystemLayer": self.is_system_layer,
            "canDelete": self.can_delete,
        }

    def to_upload_dict(self) -> Dict[str, Any]:
        """Shape returned right after an upload"""
        return {
            "id": self.id,
            "name": self.display_name,
            "filename": self.filename,
            "url": self.url,
            "legendField": self.legend_field,
        }
