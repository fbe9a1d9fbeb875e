"""routes/system.py – /health"""
import asyncio
import logging
from datetime import datetime

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from ..deps import get_database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])


@router.get("/health")
async def health():
    try:
        await asyncio.get_event_loop().run_in_executor(None, get_database().ping)
        database = "ok"
    except SQLAlchemyError as e:
        logger.warning(f"Health check: store unreachable: {e}")
        database = "unavailable"
    return {
        "status": "ok" if database == "ok" else "degraded",
        "time": datetime.now().isoformat(),
        "database": database,
    }
