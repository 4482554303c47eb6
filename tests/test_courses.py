from app.courses.course_service import parse_tags
from conftest import API


def test_creator_creates_draft_course(client, creator):
    resp = client.post(f"{API}/courses", data={
        "title": "Python Basics",
        "description": "Learn the fundamentals",
        "category": "programming",
        "price": "49.5",
        "tags": "python, beginners",
    }, headers=creator["headers"])

    assert resp.status_code == 201
    course = resp.json()
    assert course["course_id"].startswith("CRS_")
    assert course["status"] == "draft"
    assert course["price"] == 49.5
    assert course["tags"] == ["python", "beginners"]
    assert course["creator_id"] == creator["user"]["user_id"]
    assert course["creator"]["name"] == "Grace Hopper"
    assert "_id" not in course


def test_create_course_uploads_thumbnail(client, creator, media_store):
    resp = client.post(
        f"{API}/courses",
        data={"title": "Design", "description": "UI", "category": "design", "price": "0"},
        files={"thumbnail": ("cover.png", b"\x89PNG", "image/png")},
        headers=creator["headers"]
    )

    assert resp.status_code == 201
    assert resp.json()["thumbnail"] == "https://media.test/cover.png"
    assert media_store.uploads == ["cover.png"]


def test_create_course_rejects_wrong_thumbnail_type(client, creator, media_store):
    resp = client.post(
        f"{API}/courses",
        data={"title": "Design", "description": "UI", "category": "design", "price": "0"},
        files={"thumbnail": ("notes.txt", b"hello", "text/plain")},
        headers=creator["headers"]
    )

    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Invalid file type")
    assert media_store.uploads == []


def test_create_course_reports_upload_failure(client, creator, media_store):
    media_store.fail = True

    resp = client.post(
        f"{API}/courses",
        data={"title": "Design", "description": "UI", "category": "design", "price": "0"},
        files={"thumbnail": ("cover.jpg", b"jpeg", "image/jpeg")},
        headers=creator["headers"]
    )

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Error uploading thumbnail"


def test_create_course_validation(client, creator):
    missing_title = client.post(f"{API}/courses", data={
        "description": "No title", "category": "misc", "price": "10"
    }, headers=creator["headers"])
    negative_price = client.post(f"{API}/courses", data={
        "title": "Cheap", "description": "Too cheap", "category": "misc", "price": "-1"
    }, headers=creator["headers"])

    assert missing_title.status_code == 400
    assert any(err["field"] == "title" for err in missing_title.json()["errors"])
    assert negative_price.status_code == 400


def test_members_cannot_create_courses(client, member):
    resp = client.post(f"{API}/courses", data={
        "title": "Nope", "description": "Nope", "category": "misc", "price": "10"
    }, headers=member["headers"])

    assert resp.status_code == 403
    assert resp.json()["detail"] == "Not authorized to access this route"


def test_list_courses_filters_and_paginates(client, creator, create_course):
    create_course(creator, title="C++ Primer", category="programming")
    create_course(creator, title="Watercolor", category="art")
    create_course(creator, title="Rust in Action", category="programming")

    resp = client.get(f"{API}/courses", params={"category": "programming", "limit": 1})
    body = resp.json()
    assert resp.status_code == 200
    assert body["total"] == 2
    assert body["pages"] == 2
    assert body["current_page"] == 1
    assert len(body["courses"]) == 1
    assert body["courses"][0]["creator"]["email"] == "grace@example.com"

    search = client.get(f"{API}/courses", params={"search": "c++"}).json()
    assert [c["title"] for c in search["courses"]] == ["C++ Primer"]


def test_list_courses_by_status(client, creator, create_course, publish):
    draft = create_course(creator, title="Draft")
    live = create_course(creator, title="Live")
    publish(creator, live["course_id"])

    body = client.get(f"{API}/courses", params={"status": "published"}).json()

    assert [c["course_id"] for c in body["courses"]] == [live["course_id"]]
    assert draft["course_id"] not in [c["course_id"] for c in body["courses"]]


def test_course_detail_derives_chapters_and_enrollments(
    client, creator, member, create_course, create_chapter, enroll
):
    course = create_course(creator)
    create_chapter(creator, course["course_id"], title="Second", order=2)
    create_chapter(creator, course["course_id"], title="First", order=1)
    enroll(member, course["course_id"])

    resp = client.get(f"{API}/courses/{course['course_id']}")
    detail = resp.json()

    assert resp.status_code == 200
    assert [c["title"] for c in detail["chapters"]] == ["First", "Second"]
    assert detail["enrolled_count"] == 1
    assert detail["creator"]["user_id"] == creator["user"]["user_id"]


def test_missing_course_is_404(client):
    resp = client.get(f"{API}/courses/CRS_DOESNOTEXIST")

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Course not found"


def test_owner_updates_course(client, creator, create_course):
    course = create_course(creator)

    resp = client.patch(
        f"{API}/courses/{course['course_id']}",
        data={"title": "Python Advanced", "price": "150", "tags": '["python", "advanced"]'},
        headers=creator["headers"]
    )

    updated = resp.json()
    assert resp.status_code == 200
    assert updated["title"] == "Python Advanced"
    assert updated["price"] == 150
    assert updated["tags"] == ["python", "advanced"]
    assert updated["description"] == course["description"]
    assert updated["creator_id"] == creator["user"]["user_id"]


def test_non_owner_cannot_update_or_delete(client, creator, other_creator, create_course):
    course = create_course(creator)
    url = f"{API}/courses/{course['course_id']}"

    update = client.patch(url, data={"title": "Hijacked"}, headers=other_creator["headers"])
    delete = client.delete(url, headers=other_creator["headers"])

    assert update.status_code == 403
    assert update.json()["detail"] == "Not authorized to update this course"
    assert delete.status_code == 403
    assert delete.json()["detail"] == "Not authorized to delete this course"
    assert client.get(url).json()["title"] == "Python Basics"


def test_delete_course_then_404(client, creator, create_course):
    course = create_course(creator)
    url = f"{API}/courses/{course['course_id']}"

    first = client.delete(url, headers=creator["headers"])
    second = client.delete(url, headers=creator["headers"])

    assert first.json() == {"success": True, "message": "Course deleted successfully"}
    assert second.status_code == 404
    assert client.get(url).status_code == 404


def test_update_status(client, creator, create_course):
    course = create_course(creator)
    url = f"{API}/courses/{course['course_id']}/status"

    ok = client.patch(url, json={"status": "published"}, headers=creator["headers"])
    bad = client.patch(url, json={"status": "archived"}, headers=creator["headers"])

    assert ok.status_code == 200
    assert ok.json()["data"]["status"] == "published"
    assert bad.status_code == 400


def test_creator_courses_lists_only_own(client, creator, other_creator, create_course):
    create_course(creator, title="Mine")
    create_course(other_creator, title="Theirs")

    body = client.get(f"{API}/courses/creator/courses", headers=creator["headers"]).json()

    assert body["success"] is True
    assert body["count"] == 1
    assert body["data"][0]["title"] == "Mine"


def test_preview_requires_published_course(
    client, creator, member, create_course, create_chapter, publish
):
    course = create_course(creator)
    create_chapter(creator, course["course_id"], title="Intro", order=1)
    create_chapter(creator, course["course_id"], title="Teaser", order=2, is_preview=True)
    url = f"{API}/courses/{course['course_id']}/preview"

    draft = client.get(url, headers=member["headers"])
    assert draft.status_code == 403
    assert draft.json()["detail"] == "Course preview not available"

    publish(creator, course["course_id"])
    preview = client.get(url, headers=member["headers"]).json()["data"]

    assert preview["total_chapters"] == 2
    assert preview["preview_chapter"]["title"] == "Teaser"
    assert preview["creator"]["name"] == "Grace Hopper"
    assert "email" not in preview["creator"]


def test_preview_requires_authentication(client, creator, create_course):
    course = create_course(creator)

    resp = client.get(f"{API}/courses/{course['course_id']}/preview")

    assert resp.status_code == 401


def test_parse_tags_accepts_all_encodings():
    assert parse_tags(None) is None
    assert parse_tags(["a", " b "]) == ["a", "b"]
    assert parse_tags(['["x", "y"]']) == ["x", "y"]
    assert parse_tags(["x, y,,z"]) == ["x", "y", "z"]
