"""
Process-wide exception handlers

Expected failures are raised as HTTPException by routes and services and use
FastAPI's own {"detail": ...} body. Everything registered here turns the
remaining exception types into JSON responses.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError, PyMongoError

from app import config
from app.courses.media import InvalidFileTypeError, UploadTooLargeError

logger = logging.getLogger(__name__)

REQUEST_SECTIONS = ("body", "query", "path", "header", "cookie")


def _field_name(loc) -> str:
    parts = [str(p) for p in loc if p not in REQUEST_SECTIONS]
    return ".".join(parts) or "request"


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": _field_name(err.get("loc", ())), "message": err.get("msg", "Invalid value")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": "Validation failed", "errors": errors})


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    logger.info("Duplicate key on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=400, content={"detail": "Duplicate field value entered"})


async def upload_rejected_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def database_error_handler(request: Request, exc: PyMongoError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Database connection error"})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    content = {"detail": "Something went wrong"}
    if config.DEBUG:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(InvalidFileTypeError, upload_rejected_handler)
    app.add_exception_handler(UploadTooLargeError, upload_rejected_handler)
    app.add_exception_handler(PyMongoError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
