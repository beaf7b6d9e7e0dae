from __future__ import annotations

from sqlalchemy.orm import Session

from coursehub.core.config import settings
from coursehub.core.errors import NotFoundError, UnauthorizedError
from coursehub.db.guard import store_errors
from coursehub.models.chapter import Chapter
from coursehub.models.course import Course
from coursehub.models.purchase import Purchase


def has_purchase(db: Session, user_id: str, course_id: str) -> bool:
    with store_errors(db, "Checking purchase"):
        row = (
            db.query(Purchase.id)
            .filter(Purchase.user_id == user_id, Purchase.course_id == course_id)
            .first()
        )
    return row is not None


def can_access_chapter(db: Session, user_id: str, chapter: Chapter) -> bool:
    return bool(chapter.is_free) or has_purchase(db, user_id, chapter.course_id)


def require_chapter_access(db: Session, user_id: str, chapter: Chapter) -> None:
    if not can_access_chapter(db, user_id, chapter):
        raise UnauthorizedError("Purchase required to access this chapter")


def require_course_owner(db: Session, user_id: str, course_id: str) -> Course:
    with store_errors(db, "Loading course"):
        course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise NotFoundError("Course not found")
    if course.user_id != user_id:
        raise UnauthorizedError("Unauthorized")
    return course


def is_teacher(user_id: str | None) -> bool:
    # no allowlist configured -> anyone signed in may author courses
    if not settings.teacher_ids:
        return bool(user_id)
    return user_id in settings.teacher_ids


def require_teacher(user_id: str) -> None:
    if not is_teacher(user_id):
        raise UnauthorizedError("Unauthorized")
