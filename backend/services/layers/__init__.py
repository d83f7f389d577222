"""
Layer registry services
"""
from .layer_registry import LayerRegistry, display_name_for, sanitize_layer_name
from .models import Layer

__all__ = ["LayerRegistry", "Layer", "display_name_for", "sanitize_layer_name"]
