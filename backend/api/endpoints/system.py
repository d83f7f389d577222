"""
System Endpoints
================

Health check for the layer service.
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Any, Dict, List
import logging

from config.paths import layers_root
from utils.health_monitor import check_health as hm_check

logger = logging.getLogger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoints"""
    status: str
    memory_usage_mb: float
    cpu_percent: float
    uptime_seconds: float
    overall_status: str
    storage: Dict[str, Any] = {}
    recommendations: List[str] = []


@router.get("/health", response_model=HealthResponse)
async def check_system_health():
    """Process resources plus the layer directory status."""
    try:
        health_status = hm_check(layers_root()) or {}
        if health_status.get('overall_status') == 'error':
            raise RuntimeError(health_status.get('error', 'unknown error'))
        return HealthResponse(
            status="success",
            memory_usage_mb=float(health_status.get('memory_usage_mb', 0.0)),
            cpu_percent=float(health_status.get('cpu_percent', 0.0)),
            uptime_seconds=float(health_status.get('uptime_seconds', 0.0)),
            overall_status=str(health_status.get('overall_status', 'unknown')),
            storage=dict(health_status.get('storage', {})),
            recommendations=list(health_status.get('recommendations', [])),
        )
    except Exception as e:
        logger.warning(f"❌ /health failed: {e}")
        raise HTTPException(status_code=500, detail=f"Health check failed: {str(e)}")
