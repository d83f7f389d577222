"""
Logging Service
Rotating log file plus an in-memory buffer of recent records for /api/logs/recent.

Records logged with ``extra={"layer": <layer_id>}`` keep that id in the buffer,
so the upload and delete history of one layer can be pulled back out.
"""
import logging
import os
from collections import deque
from logging.handlers import RotatingFileHandler
from typing import Any, Deque, Dict, List, Optional

LOG_DIR = os.getenv("LOG_DIR", os.path.join(os.path.dirname(__file__), "..", "logs"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
RING_BUFFER_SIZE = int(os.getenv("RING_BUFFER_SIZE", "2000"))
LOG_FILE = os.path.join(LOG_DIR, "geolayers.log")


class RingBufferHandler(logging.Handler):
    """Bounded buffer of the latest records, newest last"""

    def __init__(self, maxlen: int = 2000):
        super().__init__()
        self.buffer: Deque[Dict[str, Any]] = deque(maxlen=maxlen)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.buffer.append({
                "ts": record.created,
                "level": record.levelname,
                "name": record.name,
                "message": record.getMessage(),
                "layer": getattr(record, "layer", None),
            })
        except Exception:
            self.handleError(record)

    def get_recent(
        self, limit: int = 500, level: Optional[str] = None, layer: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        records = list(self.buffer)
        if level:
            records = [r for r in records if r["level"] == level.upper()]
        if layer:
            records = [r for r in records if r["layer"] == layer]
        return records[-limit:] if limit > 0 else records


_ring_handler: Optional[RingBufferHandler] = None
_initialized = False


def get_ring_handler() -> RingBufferHandler:
    global _ring_handler
    if _ring_handler is None:
        _ring_handler = RingBufferHandler(maxlen=RING_BUFFER_SIZE)
    return _ring_handler


def init_logging() -> None:
    """Attach the ring buffer and the rotating file handler to the root logger (once)."""
    global _initialized
    if _initialized:
        return

    level = getattr(logging, LOG_LEVEL, logging.INFO)
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    root = logging.getLogger()

    ring = get_ring_handler()
    ring.setLevel(level)
    root.addHandler(ring)

    os.makedirs(LOG_DIR, exist_ok=True)
    file_handler = RotatingFileHandler(LOG_FILE, maxBytes=5_000_000, backupCount=5, encoding="utf-8")
    file_handler.setFormatter(fmt)
    file_handler.setLevel(level)
    root.addHandler(file_handler)

    _initialized = True
