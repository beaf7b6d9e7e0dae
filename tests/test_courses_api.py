import pytest
from fastapi.testclient import TestClient

from coursehub.core.config import Settings
from coursehub.core.errors import ConflictError
from coursehub.main import app
from coursehub.models.chapter import Chapter
from coursehub.models.course import Course
from coursehub.services.analytics import format_price
from coursehub.services.categories import create_category
from coursehub.services.progress import set_chapter_completion
from coursehub.services.purchases import record_purchase

client = TestClient(app)

TEACHER = {"X-User-Id": "teacher-1"}
STUDENT = {"X-User-Id": "student-1"}


def _publishable_course(db):
    cat = create_category(db, "Engineering")
    r = client.post("/courses", json={"title": "Python 101"}, headers=TEACHER)
    course_id = r.json()["course"]["id"]
    client.patch(
        f"/courses/{course_id}",
        json={
            "description": "From zero to scripts",
            "image_url": "https://img.example.com/py.png",
            "price": 49.5,
            "category_id": cat.id,
        },
        headers=TEACHER,
    )
    ch = client.post(f"/courses/{course_id}/chapters", json={"title": "Hello"}, headers=TEACHER).json()["chapter"]
    client.patch(
        f"/courses/{course_id}/chapters/{ch['id']}",
        json={"description": "print()", "video_url": "https://video.example.com/hello.mp4"},
        headers=TEACHER,
    )
    return course_id, ch["id"]


def test_create_course(db):
    r = client.post("/courses", json={"title": "Python 101"}, headers=TEACHER)
    assert r.status_code == 200
    course = r.json()["course"]
    assert course["user_id"] == "teacher-1"
    assert course["is_published"] is False
    assert course["price"] is None


def test_create_course_requires_identity(db):
    r = client.post("/courses", json={"title": "Anonymous"})
    assert r.status_code == 401


def test_create_course_rejects_blank_title(db):
    r = client.post("/courses", json={"title": "   "}, headers=TEACHER)
    assert r.status_code == 400


def test_teacher_allowlist(db, monkeypatch):
    monkeypatch.setattr("coursehub.services.access.settings", Settings(teacher_ids=("teacher-1",)))

    assert client.post("/courses", json={"title": "Allowed"}, headers=TEACHER).status_code == 200
    assert client.post("/courses", json={"title": "Denied"}, headers=STUDENT).status_code == 401


def test_update_by_other_user_is_unauthorized(db, make_course):
    course = make_course()
    r = client.patch(f"/courses/{course.id}", json={"title": "Mine now"}, headers=STUDENT)
    assert r.status_code == 401


def test_update_unknown_category(db, make_course):
    course = make_course()
    r = client.patch(f"/courses/{course.id}", json={"category_id": "nope"}, headers=TEACHER)
    assert r.status_code == 404


def test_publish_flow(db):
    course_id, chapter_id = _publishable_course(db)

    # no published chapter yet
    r = client.patch(f"/courses/{course_id}/publish", headers=TEACHER)
    assert r.status_code == 400

    client.patch(f"/courses/{course_id}/chapters/{chapter_id}/publish", headers=TEACHER)
    r = client.patch(f"/courses/{course_id}/publish", headers=TEACHER)
    assert r.status_code == 200
    course = r.json()["course"]
    assert course["is_published"] is True
    assert course["category"] == "Engineering"
    assert course["price_label"] == "$49.50"

    r = client.patch(f"/courses/{course_id}/unpublish", headers=TEACHER)
    assert r.json()["course"]["is_published"] is False


def test_publish_requires_fields(db, make_course):
    course = make_course(published=False, chapters=[{"title": "One"}])
    r = client.patch(f"/courses/{course.id}/publish", headers=TEACHER)
    assert r.status_code == 400
    assert "category_id" in r.json()["detail"]


def test_draft_hidden_from_students(db, make_course):
    course = make_course(published=False)
    assert client.get(f"/courses/{course.id}", headers=STUDENT).status_code == 404
    assert client.get(f"/courses/{course.id}", headers=TEACHER).status_code == 200


def test_delete_course_cascades(db, make_course):
    course = make_course(chapters=[{"title": "One"}, {"title": "Two"}])
    record_purchase(db, "student-1", course.id)
    set_chapter_completion(db, "student-1", course.chapters[0].id, True)

    r = client.delete(f"/courses/{course.id}", headers=TEACHER)
    assert r.status_code == 200

    db.expire_all()
    assert db.query(Course).count() == 0
    assert db.query(Chapter).count() == 0


def test_attachments(db, make_course):
    course = make_course()
    r = client.post(
        f"/courses/{course.id}/attachments",
        json={"url": "https://files.example.com/a/Cheat%20Sheet.pdf"},
        headers=TEACHER,
    )
    assert r.status_code == 200
    att = r.json()["attachment"]
    assert att["name"] == "Cheat Sheet.pdf"

    body = client.get(f"/courses/{course.id}", headers=TEACHER).json()
    assert [a["id"] for a in body["attachments"]] == [att["id"]]

    r = client.delete(f"/courses/{course.id}/attachments/{att['id']}", headers=TEACHER)
    assert r.status_code == 200
    r = client.delete(f"/courses/{course.id}/attachments/{att['id']}", headers=TEACHER)
    assert r.status_code == 404


def test_search_only_published_with_progress(db, make_course):
    owned = make_course(title="Rust for Pythonistas", chapters=[{"title": "One"}, {"title": "Two"}])
    make_course(title="Rust internals", chapters=[{"title": "One"}])
    make_course(title="Rust drafts", published=False)
    record_purchase(db, "student-1", owned.id)
    set_chapter_completion(db, "student-1", owned.chapters[0].id, True)

    r = client.get("/courses", params={"title": "rust"}, headers=STUDENT)
    assert r.status_code == 200
    courses = {c["title"]: c for c in r.json()["courses"]}

    assert set(courses) == {"Rust for Pythonistas", "Rust internals"}
    assert courses["Rust for Pythonistas"]["progress"] == 50.0
    assert courses["Rust for Pythonistas"]["chapters_count"] == 2
    assert courses["Rust internals"]["progress"] is None


def test_search_by_category(db, make_course):
    cat = create_category(db, "Design")
    tagged = make_course(title="Figma")
    tagged.category_id = cat.id
    db.commit()
    make_course(title="Untagged")

    r = client.get("/courses", params={"category_id": cat.id}, headers=STUDENT)
    assert [c["title"] for c in r.json()["courses"]] == ["Figma"]


def test_dashboard_splits_completed(db, make_course):
    done = make_course(title="Done", chapters=[{"title": "Only"}])
    halfway = make_course(title="Halfway", chapters=[{"title": "One"}, {"title": "Two"}])
    make_course(title="Not bought", chapters=[{"title": "One"}])
    record_purchase(db, "student-1", done.id)
    record_purchase(db, "student-1", halfway.id)
    set_chapter_completion(db, "student-1", done.chapters[0].id, True)

    body = client.get("/courses/dashboard", headers=STUDENT).json()
    assert [c["title"] for c in body["completed_courses"]] == ["Done"]
    assert [c["title"] for c in body["courses_in_progress"]] == ["Halfway"]
    assert body["courses_in_progress"][0]["progress"] == 0.0


def test_duplicate_purchase_conflicts(db, make_course):
    course = make_course()
    record_purchase(db, "student-1", course.id)
    with pytest.raises(ConflictError):
        record_purchase(db, "student-1", course.id)


def test_teacher_courses_and_analytics(db, make_course):
    a = make_course(title="A", price=20.0)
    b = make_course(title="B", price=5.0)
    make_course(owner="teacher-2", title="Elsewhere", price=100.0)
    record_purchase(db, "s1", a.id)
    record_purchase(db, "s2", a.id)
    record_purchase(db, "s1", b.id)

    body = client.get("/teacher/courses", headers=TEACHER).json()
    assert {c["title"] for c in body["courses"]} == {"A", "B"}

    r = client.get("/teacher/analytics", headers=TEACHER)
    assert r.status_code == 200
    stats = r.json()
    assert stats["total_sales"] == 3
    assert stats["total_revenue"] == 45.0
    assert stats["total_revenue_label"] == "$45.00"
    assert {d["name"]: d["total"] for d in stats["data"]} == {"A": 40.0, "B": 5.0}


def test_format_price():
    assert format_price(1234.5) == "$1,234.50"
    assert format_price(None) == "$0.00"


def test_malformed_progress_summary_is_server_error(db, make_course, monkeypatch):
    course = make_course(chapters=[{"title": "One"}])
    monkeypatch.setattr(
        "coursehub.api.courses.get_progress_summary",
        lambda db, user_id, course_id: {"course_id": course_id, "items": []},
    )

    r = client.get(f"/courses/{course.id}/progress", headers=STUDENT)
    assert r.status_code == 500
    assert r.json()["ok"] is False
