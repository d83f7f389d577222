"""
Health Monitoring Module
========================

Reports process resources and whether the layer storage directory is usable.
"""

import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional

import psutil

logger = logging.getLogger(__name__)


class HealthMonitor:
    """
    Cheap health probe: process memory/CPU plus a storage directory check.
    """

    def __init__(self, memory_threshold_mb: float = 500):
        self.start_time = time.time()
        self.memory_threshold_mb = memory_threshold_mb

    def check_system_health(self, storage_root: Optional[Path] = None) -> Dict[str, Any]:
        """
        Check current system health status.

        Args:
            storage_root: Layer storage directory to probe, if any

        Returns:
            Dict with health metrics and recommendations
        """
        try:
            process = psutil.Process(os.getpid())
            memory_mb = process.memory_info().rss / 1024 / 1024
            cpu_percent = process.cpu_percent()

            health_status: Dict[str, Any] = {
                'memory_usage_mb': round(memory_mb, 1),
                'cpu_percent': round(cpu_percent, 1),
                'uptime_seconds': round(time.time() - self.start_time, 1),
                'memory_threshold_exceeded': memory_mb > self.memory_threshold_mb,
                'overall_status': 'healthy',
                'recommendations': [],
            }

            if storage_root is not None:
                storage = self._check_storage(Path(storage_root))
                health_status['storage'] = storage
                if not storage['writable']:
                    health_status['overall_status'] = 'warning'
                    health_status['recommendations'].append(f"Layer directory is not writable: {storage['path']}")

            if health_status['memory_threshold_exceeded']:
                health_status['overall_status'] = 'warning'
                health_status['recommendations'].append('Memory usage above threshold')

            logger.debug(f"🏥 HEALTH CHECK ► Memory: {memory_mb:.1f}MB, Status: {health_status['overall_status']}")
            return health_status

        except Exception as e:
            logger.error(f"❌ Health check failed: {e}")
            return {
                'overall_status': 'error',
                'error': str(e),
                'recommendations': ['Restart the application'],
            }

    def _check_storage(self, storage_root: Path) -> Dict[str, Any]:
        """The directory is created on first upload, so probe its nearest existing ancestor."""
        probe = storage_root
        while not probe.exists() and probe.parent != probe:
            probe = probe.parent
        return {
            'path': str(storage_root),
            'exists': storage_root.is_dir(),
            'writable': os.access(probe, os.W_OK),
        }


# Global health monitor instance
_health_monitor = None


def get_health_monitor() -> HealthMonitor:
    """Get the global health monitor instance."""
    global _health_monitor
    if _health_monitor is None:
        _health_monitor = HealthMonitor()
    return _health_monitor


def check_health(storage_root: Optional[Path] = None) -> Dict[str, Any]:
    """Convenience function to check system health."""
    return get_health_monitor().check_system_health(storage_root)
