import asyncio
import os

os.environ["ENVIRONMENT"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["DB_NAME"] = "coursehub_test"

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app.courses.media import MediaUploadError, MediaUploadResult, get_media_store
from app.database import create_indexes, get_db
from app.main import app

API = "/api/v1"


# ==================== MEDIA STORE ====================

class FakeMediaStore:
    def __init__(self):
        self.uploads = []
        self.fail = False

    async def upload(self, file):
        if self.fail:
            raise MediaUploadError("media store unavailable")
        self.uploads.append(file.filename)
        return MediaUploadResult(
            url=f"https://media.test/{file.filename}",
            public_id=file.filename,
            resource_type="video" if file.filename.endswith(".mp4") else "image",
            duration=42.5
        )


# ==================== FIXTURES ====================

@pytest.fixture
def db():
    database = AsyncMongoMockClient()["coursehub_test"]
    asyncio.run(create_indexes(database))
    return database


@pytest.fixture
def media_store():
    return FakeMediaStore()


@pytest.fixture
def client(db, media_store):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_media_store] = lambda: media_store
    yield TestClient(app)
    app.dependency_overrides.clear()


def register_account(client, name, email, role, password="secret123"):
    resp = client.post(f"{API}/auth/register", json={
        "name": name,
        "email": email,
        "password": password,
        "role": role
    })
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return {
        "user": body["user"],
        "token": body["token"],
        "headers": {"Authorization": f"Bearer {body['token']}"}
    }


@pytest.fixture
def creator(client):
    return register_account(client, "Grace Hopper", "grace@example.com", "creator")


@pytest.fixture
def other_creator(client):
    return register_account(client, "Alan Turing", "alan@example.com", "creator")


@pytest.fixture
def member(client):
    return register_account(client, "Ada Lovelace", "ada@example.com", "member")


@pytest.fixture
def other_member(client):
    return register_account(client, "Linus Student", "linus@example.com", "member")


@pytest.fixture
def create_course(client):
    def _create(account, title="Python Basics", price=100, **fields):
        data = {
            "title": title,
            "description": "Learn the fundamentals",
            "category": "programming",
            "price": str(price),
            **fields
        }
        resp = client.post(f"{API}/courses", data=data, headers=account["headers"])
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _create


@pytest.fixture
def create_chapter(client):
    def _create(account, course_id, title="Introduction", order=0, is_preview=False):
        resp = client.post(
            f"{API}/courses/{course_id}/chapters",
            data={
                "title": title,
                "description": "Chapter overview",
                "order": str(order),
                "is_preview": "true" if is_preview else "false"
            },
            headers=account["headers"]
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]
    return _create


@pytest.fixture
def publish(client):
    def _publish(account, course_id):
        resp = client.patch(
            f"{API}/courses/{course_id}/status",
            json={"status": "published"},
            headers=account["headers"]
        )
        assert resp.status_code == 200, resp.text
        return resp.json()["data"]
    return _publish


@pytest.fixture
def enroll(client):
    def _enroll(account, course_id):
        resp = client.post(f"{API}/enrollments/courses/{course_id}/enroll", headers=account["headers"])
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _enroll
