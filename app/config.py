"""
CourseHub Configuration
Database, token, upload and CORS settings read from the environment
"""

import os
from dotenv import load_dotenv

load_dotenv()

# MongoDB
MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "coursehub")
MONGO_CONNECT_TIMEOUT_MS = int(os.getenv("MONGO_CONNECT_TIMEOUT_MS", "5000"))

# Tokens
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_DAYS = int(os.getenv("JWT_EXPIRE_DAYS", "30"))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Runtime
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
DEBUG = ENVIRONMENT == "development"
API_PREFIX = os.getenv("API_PREFIX", "/api/v1")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# CORS
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "")
FRONTEND_URL = os.getenv("FRONTEND_URL", "")

# Media storage (Cloudinary)
CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")
CLOUDINARY_FOLDER = os.getenv("CLOUDINARY_FOLDER", "coursehub")
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "100"))


def allowed_origins() -> list:
    """Origins accepted by CORS, de-duplicated in declaration order"""
    origins = [o.strip() for o in ALLOWED_ORIGINS.split(",")]
    if FRONTEND_URL:
        origins.append(FRONTEND_URL)
    if ENVIRONMENT != "production":
        origins.append("http://localhost:3000")
    return list(dict.fromkeys(o for o in origins if o))
