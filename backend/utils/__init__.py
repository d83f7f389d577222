"""
Utility modules for the GeoLayers backend.
"""

from utils.file_handler import is_valid_layer_file
from utils.health_monitor import HealthMonitor, get_health_monitor, check_health

__all__ = [
    'is_valid_layer_file',
    'HealthMonitor',
    'get_health_monitor',
    'check_health',
]
