import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app import config
from app.database import client, create_indexes, get_database, ping
from app.analytics.analytics_router import router as analytics_router
from app.courses.chapter_router import router as chapter_router
from app.courses.course_router import router as course_router
from app.courses.enrollment_router import router as enrollment_router
from app.learning.bookmark_router import router as bookmark_router
from app.learning.note_router import router as note_router
from app.system.error_handlers import register_error_handlers
from app.system.health_router import router as health_router
from app.users.auth_router import router as auth_router
from app.users.profile_router import router as profile_router

# Configure logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


app = FastAPI(title="CourseHub API", version="1.0.0")

origins = config.allowed_origins()
allow_all = not origins or config.ENVIRONMENT != "production"

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.on_event("startup")
async def startup_event():
    db = get_database()
    try:
        await ping(db)
        await create_indexes(db)
    except Exception as e:
        logger.error("MongoDB connection failed: %s", e)
        raise
    logger.info("Connected to MongoDB database %s", config.DB_NAME)


@app.on_event("shutdown")
async def shutdown_db_client():
    client.close()


# ==================== ROUTER REGISTRATION ====================
app.include_router(auth_router, prefix=config.API_PREFIX)
app.include_router(course_router, prefix=config.API_PREFIX)
app.include_router(chapter_router, prefix=config.API_PREFIX)
app.include_router(enrollment_router, prefix=config.API_PREFIX)
app.include_router(bookmark_router, prefix=config.API_PREFIX)
app.include_router(note_router, prefix=config.API_PREFIX)
app.include_router(profile_router, prefix=config.API_PREFIX)
app.include_router(analytics_router, prefix=config.API_PREFIX)
app.include_router(health_router, prefix=config.API_PREFIX)
# ============================================================
