import asyncio
import io

import cloudinary.uploader
import pytest
from cloudinary.exceptions import Error as CloudinaryError
from fastapi import UploadFile
from starlette.datastructures import Headers

from app import config
from app.courses.media import (
    CloudinaryMediaStore, InvalidFileTypeError, MediaUploadError, UploadTooLargeError, validate_upload
)


def make_upload(filename, content_type, content=b"12345"):
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type})
    )


@pytest.mark.parametrize("filename,content_type", [
    ("clip.mp4", "video/mp4"),
    ("clip.mov", "video/quicktime"),
    ("clip.webm", "video/webm"),
    ("clip.bin", "application/octet-stream"),
    ("CLIP.MP4", "text/plain"),
])
def test_video_types_accepted(filename, content_type):
    validate_upload(make_upload(filename, content_type), "video")


@pytest.mark.parametrize("filename,content_type", [
    ("cover.jpg", "image/jpeg"),
    ("cover.png", "image/png"),
    ("cover.gif", "image/gif"),
])
def test_image_types_accepted(filename, content_type):
    validate_upload(make_upload(filename, content_type), "image")


def test_wrong_type_rejected():
    with pytest.raises(InvalidFileTypeError) as exc:
        validate_upload(make_upload("cover.mp4", "video/mp4"), "image")

    assert str(exc.value).startswith("Invalid file type. Accepted types are: image/jpeg")


def test_oversize_rejected(monkeypatch):
    monkeypatch.setattr(config, "MAX_UPLOAD_MB", 0)

    with pytest.raises(UploadTooLargeError):
        validate_upload(make_upload("clip.mp4", "video/mp4"), "video")


def test_upload_delegates_to_cloudinary(monkeypatch):
    calls = []

    def fake_upload(file, **options):
        calls.append((file.read(), options))
        return {
            "secure_url": "https://res.cloudinary.com/demo/video/upload/lessons/clip.mp4",
            "public_id": "lessons/clip",
            "resource_type": "video",
            "duration": 12.5,
            "bytes": 5
        }

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
    store = CloudinaryMediaStore(folder="lessons")

    result = asyncio.run(store.upload(make_upload("clip.mp4", "video/mp4")))

    assert calls == [(b"12345", {"resource_type": "auto", "folder": "lessons", "timeout": store.timeout})]
    assert result.url.endswith("lessons/clip.mp4")
    assert result.duration == 12.5
    assert result.bytes == 5


def test_upload_failure_is_reported(monkeypatch):
    def rejected(file, **options):
        raise CloudinaryError("Invalid API key")

    monkeypatch.setattr(cloudinary.uploader, "upload", rejected)

    with pytest.raises(MediaUploadError) as exc:
        asyncio.run(CloudinaryMediaStore().upload(make_upload("clip.mp4", "video/mp4")))

    assert str(exc.value) == "Invalid API key"
