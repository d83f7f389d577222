"""
Central API Router
Combines all API endpoints into a single router for main.py
"""
from fastapi import APIRouter
from api.endpoints import geojson, system
from api import logs

# Create the main API router
api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(geojson.router, prefix="/api/geojson", tags=["geojson"])
api_router.include_router(system.router, prefix="/api", tags=["system"])
api_router.include_router(logs.router, prefix="/api")

# Add a root endpoint for API discovery
@api_router.get("/api")
async def api_root():
    """API root endpoint for discovery"""
    return {
        "message": "GeoLayers API v1.0",
        "documentation": "/docs",
        "endpoints": {
            "list": "/api/geojson/list - List available map layers",
            "upload": "/api/geojson/upload - Upload a GeoJSON/TopoJSON layer",
            "delete": "/api/geojson/delete/{layerId} - Delete a user layer",
            "health": "/api/health - System health check",
            "logs": "/api/logs/recent - Recent log records",
        },
    }
