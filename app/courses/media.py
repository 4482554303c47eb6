"""
Media Storage
Thumbnail and chapter video uploads, delegated to Cloudinary
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from app import config

logger = logging.getLogger(__name__)

UPLOAD_TIMEOUT = 300.0

ACCEPTED_IMAGE_TYPES = ["image/jpeg", "image/png", "image/gif"]
ACCEPTED_VIDEO_TYPES = [
    "video/mp4",
    "video/mpeg",
    "video/quicktime",
    "video/x-msvideo",
    "video/x-ms-wmv",
    "video/webm",
    "application/mp4",
    "application/octet-stream",
]


class MediaUploadError(Exception):
    """The media store rejected or failed the upload"""


class InvalidFileTypeError(ValueError):
    pass


class UploadTooLargeError(ValueError):
    pass


@dataclass
class MediaUploadResult:
    url: str
    public_id: str
    resource_type: str = "auto"
    duration: float = 0
    bytes: int = 0


def _file_size(file: UploadFile) -> int:
    if file.size is not None:
        return file.size
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    return size


def validate_upload(file: UploadFile, kind: str = "video"):
    """
    Check content type and size before anything is sent upstream

    Args:
        file: Uploaded file from a multipart form
        kind: 'image' for thumbnails, 'video' for chapter videos
    """
    accepted = ACCEPTED_IMAGE_TYPES if kind == "image" else ACCEPTED_VIDEO_TYPES
    filename = (file.filename or "").lower()
    is_mp4 = kind == "video" and filename.endswith(".mp4")

    if file.content_type not in accepted and not is_mp4:
        logger.info("Rejected upload %s with type %s", file.filename, file.content_type)
        raise InvalidFileTypeError(
            f"Invalid file type. Accepted types are: {', '.join(accepted)}"
        )

    max_bytes = config.MAX_UPLOAD_MB * 1024 * 1024
    if _file_size(file) > max_bytes:
        raise UploadTooLargeError(f"File too large. Maximum size is {config.MAX_UPLOAD_MB}MB")


class CloudinaryMediaStore:
    """
    Uploads through the Cloudinary SDK

    resource_type "auto" lets Cloudinary detect images and videos, and video
    responses carry the clip duration in seconds.
    """

    def __init__(self, folder: Optional[str] = None, timeout: float = UPLOAD_TIMEOUT):
        self.folder = folder or config.CLOUDINARY_FOLDER
        self.timeout = timeout
        cloudinary.config(
            cloud_name=config.CLOUDINARY_CLOUD_NAME,
            api_key=config.CLOUDINARY_API_KEY,
            api_secret=config.CLOUDINARY_API_SECRET,
            secure=True
        )

    async def upload(self, file: UploadFile) -> MediaUploadResult:
        logger.info("Uploading %s (%s) to media store", file.filename, file.content_type)
        file.file.seek(0)
        try:
            # The SDK blocks on the HTTP call
            result = await run_in_threadpool(
                cloudinary.uploader.upload,
                file.file,
                resource_type="auto",
                folder=self.folder,
                timeout=self.timeout
            )
        except CloudinaryError as e:
            logger.error("Media upload failed for %s: %s", file.filename, e)
            raise MediaUploadError(str(e)) from e

        return MediaUploadResult(
            url=result["secure_url"],
            public_id=result.get("public_id", ""),
            resource_type=result.get("resource_type", "auto"),
            duration=result.get("duration") or 0,
            bytes=result.get("bytes") or 0
        )


_media_store: Optional[CloudinaryMediaStore] = None


def get_media_store() -> CloudinaryMediaStore:
    """Media store dependency"""
    global _media_store
    if _media_store is None:
        _media_store = CloudinaryMediaStore()
    return _media_store


async def upload_media(store: CloudinaryMediaStore, file: UploadFile, kind: str) -> MediaUploadResult:
    """Validate then upload; validation errors propagate to the global handlers"""
    validate_upload(file, kind)
    return await store.upload(file)
