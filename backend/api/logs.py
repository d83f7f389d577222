from fastapi import APIRouter, Query
from services.logging_service import get_ring_handler


router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("/recent")
def get_recent_logs(
    limit: int = Query(500, ge=1, le=5000),
    level: str = Query(None),
    layer: str = Query(None, description="Only records about this layer id"),
):
    return {"logs": get_ring_handler().get_recent(limit, level=level, layer=layer)}
