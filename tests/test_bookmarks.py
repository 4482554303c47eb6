import asyncio
from datetime import datetime, timedelta

from conftest import API


def test_bookmark_course_and_chapter(client, creator, member, create_course, create_chapter):
    course = create_course(creator)
    chapter = create_chapter(creator, course["course_id"], title="Loops")

    whole = client.post(f"{API}/bookmarks", json={"course_id": course["course_id"]}, headers=member["headers"])
    one = client.post(f"{API}/bookmarks", json={
        "course_id": course["course_id"],
        "chapter_id": chapter["chapter_id"],
        "note": " revisit this "
    }, headers=member["headers"])

    assert whole.status_code == one.status_code == 201
    assert whole.json()["bookmark_id"].startswith("BMK_")
    assert whole.json()["chapter_id"] is None
    assert one.json()["note"] == "revisit this"


def test_duplicate_bookmark_is_rejected(client, creator, member, create_course):
    course = create_course(creator)
    payload = {"course_id": course["course_id"]}

    client.post(f"{API}/bookmarks", json=payload, headers=member["headers"])
    resp = client.post(f"{API}/bookmarks", json=payload, headers=member["headers"])

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Already bookmarked this content"


def test_same_content_can_be_bookmarked_by_different_users(client, creator, member, other_member, create_course):
    course = create_course(creator)
    payload = {"course_id": course["course_id"]}

    first = client.post(f"{API}/bookmarks", json=payload, headers=member["headers"])
    second = client.post(f"{API}/bookmarks", json=payload, headers=other_member["headers"])

    assert first.status_code == second.status_code == 201


def test_bookmark_missing_course(client, member):
    resp = client.post(f"{API}/bookmarks", json={"course_id": "CRS_MISSING"}, headers=member["headers"])

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Course not found"


def test_bookmark_chapter_from_another_course(client, creator, member, create_course, create_chapter):
    course = create_course(creator)
    other = create_course(creator, title="Other")
    chapter = create_chapter(creator, course["course_id"])

    resp = client.post(f"{API}/bookmarks", json={
        "course_id": other["course_id"], "chapter_id": chapter["chapter_id"]
    }, headers=member["headers"])

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Chapter not found"


def test_list_bookmarks_newest_first_with_references(
    client, creator, member, other_member, create_course, create_chapter, db
):
    python = create_course(creator, title="Python")
    rust = create_course(creator, title="Rust")
    chapter = create_chapter(creator, python["course_id"], title="Loops")

    client.post(f"{API}/bookmarks", json={"course_id": rust["course_id"]}, headers=member["headers"])
    client.post(f"{API}/bookmarks", json={
        "course_id": python["course_id"], "chapter_id": chapter["chapter_id"]
    }, headers=member["headers"])
    client.post(f"{API}/bookmarks", json={"course_id": rust["course_id"]}, headers=other_member["headers"])

    # Rust bookmark becomes the older one
    older = datetime.utcnow() - timedelta(days=1)
    asyncio.run(db.bookmarks.update_one(
        {"user_id": member["user"]["user_id"], "course_id": rust["course_id"]},
        {"$set": {"created_at": older}}
    ))

    bookmarks = client.get(f"{API}/bookmarks", headers=member["headers"]).json()
    filtered = client.get(
        f"{API}/bookmarks", params={"course_id": rust["course_id"]}, headers=member["headers"]
    ).json()

    assert [b["course"]["title"] for b in bookmarks] == ["Python", "Rust"]
    assert bookmarks[0]["chapter"] == {"chapter_id": chapter["chapter_id"], "title": "Loops"}
    assert bookmarks[1]["chapter"] is None
    assert set(bookmarks[0]["course"]) == {"course_id", "title", "thumbnail"}
    assert len(filtered) == 1


def test_delete_bookmark(client, creator, member, other_member, create_course):
    course = create_course(creator)
    bookmark = client.post(
        f"{API}/bookmarks", json={"course_id": course["course_id"]}, headers=member["headers"]
    ).json()
    url = f"{API}/bookmarks/{bookmark['bookmark_id']}"

    not_owner = client.delete(url, headers=other_member["headers"])
    first = client.delete(url, headers=member["headers"])
    second = client.delete(url, headers=member["headers"])

    assert not_owner.status_code == 404
    assert not_owner.json()["detail"] == "Bookmark not found"
    assert first.json() == {"message": "Bookmark removed successfully"}
    assert second.status_code == 404


def test_bookmarks_require_authentication(client):
    assert client.get(f"{API}/bookmarks").status_code == 401
