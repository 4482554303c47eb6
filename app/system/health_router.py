import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app import config
from app.database import get_db, ping

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["System"])


@router.get("")
async def health():
    return {
        "status": "OK",
        "environment": config.ENVIRONMENT,
        "timestamp": datetime.utcnow()
    }


@router.get("/db")
async def database_health(db: AsyncIOMotorDatabase = Depends(get_db)):
    """
    Ping MongoDB and list its collections

    Connection problems are reported in the payload rather than as a 500.
    """
    record = {
        "timestamp": datetime.utcnow(),
        "database": config.DB_NAME,
        "status": "UP",
        "collections": []
    }

    try:
        start = datetime.utcnow()
        await ping(db)
        record["latency_ms"] = (datetime.utcnow() - start).total_seconds() * 1000
        record["collections"] = sorted(await db.list_collection_names())
    except PyMongoError as e:
        logger.error("Database health check failed: %s", e)
        record["status"] = "DOWN"
        record["error"] = str(e)

    return record
