from __future__ import annotations

import logging
from typing import Any
from urllib.parse import unquote, urlparse

from sqlalchemy.orm import Session, selectinload

from coursehub.core.errors import NotFoundError
from coursehub.db.guard import store_errors
from coursehub.models.attachment import Attachment
from coursehub.models.category import Category
from coursehub.models.chapter import Chapter
from coursehub.models.course import Course
from coursehub.models.purchase import Purchase
from coursehub.services.progress import get_course_progress

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "image_url", "price", "category_id")


def get_course(db: Session, course_id: str) -> Course:
    with store_errors(db, "Loading course"):
        course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise NotFoundError("Course not found")
    return course


def create_course(db: Session, user_id: str, title: str) -> Course:
    title = (title or "").strip()
    if not title:
        raise ValueError("title is required")

    with store_errors(db, "Creating course"):
        course = Course(user_id=user_id, title=title)
        db.add(course)
        db.commit()
        db.refresh(course)

    logger.info("course created id=%s owner=%s", course.id, user_id)
    return course


def _category_exists(db: Session, category_id: str) -> bool:
    with store_errors(db, "Loading category"):
        return db.query(Category.id).filter(Category.id == category_id).first() is not None


def update_course(db: Session, course: Course, **fields: Any) -> Course:
    for k in EDITABLE_FIELDS:
        v = fields.get(k)
        if v is None:
            continue
        if k == "title" and not str(v).strip():
            raise ValueError("title cannot be empty")
        if k == "price" and float(v) < 0:
            raise ValueError("price must be >= 0")
        if k == "category_id" and not _category_exists(db, v):
            raise NotFoundError("Category not found")
        setattr(course, k, v)

    with store_errors(db, "Updating course"):
        db.commit()
        db.refresh(course)
    return course


def publish_course(db: Session, course: Course) -> Course:
    missing = [k for k in ("title", "description", "image_url", "category_id") if not getattr(course, k)]
    if missing:
        raise ValueError(f"Missing required fields: {', '.join(missing)}")

    with store_errors(db, "Loading course chapters"):
        has_published_chapter = (
            db.query(Chapter.id)
            .filter(Chapter.course_id == course.id, Chapter.is_published.is_(True))
            .first()
        )
    if not has_published_chapter:
        raise ValueError("At least one published chapter is required")

    with store_errors(db, "Publishing course"):
        course.is_published = True
        db.commit()
        db.refresh(course)

    logger.info("course published id=%s", course.id)
    return course


def unpublish_course(db: Session, course: Course) -> Course:
    with store_errors(db, "Unpublishing course"):
        course.is_published = False
        db.commit()
        db.refresh(course)

    logger.info("course unpublished id=%s", course.id)
    return course


def delete_course(db: Session, course: Course) -> None:
    course_id = course.id
    with store_errors(db, "Deleting course"):
        db.delete(course)
        db.commit()
    logger.info("course deleted id=%s", course_id)


def _attachment_name(url: str) -> str:
    path = urlparse(url).path.rstrip("/")
    name = unquote(path.rsplit("/", 1)[-1]) if path else ""
    return name or url


def add_attachment(db: Session, course: Course, url: str) -> Attachment:
    url = (url or "").strip()
    if not url:
        raise ValueError("url is required")

    with store_errors(db, "Adding attachment"):
        att = Attachment(course_id=course.id, url=url, name=_attachment_name(url))
        db.add(att)
        db.commit()
        db.refresh(att)
    return att


def delete_attachment(db: Session, course: Course, attachment_id: str) -> None:
    with store_errors(db, "Deleting attachment"):
        att = (
            db.query(Attachment)
            .filter(Attachment.id == attachment_id, Attachment.course_id == course.id)
            .first()
        )
        if not att:
            raise NotFoundError("Attachment not found")
        db.delete(att)
        db.commit()


def search_courses(
    db: Session,
    user_id: str,
    title: str | None = None,
    category_id: str | None = None,
) -> list[dict[str, Any]]:
    """
    Published courses for the browse page, newest first.
    progress is None unless the user purchased the course.
    """
    with store_errors(db, "Searching courses"):
        query = db.query(Course).filter(Course.is_published.is_(True))
        if title and title.strip():
            query = query.filter(Course.title.ilike(f"%{title.strip()}%"))
        if category_id:
            query = query.filter(Course.category_id == category_id)

        courses = (
            query.options(selectinload(Course.category), selectinload(Course.chapters))
            .order_by(Course.created_at.desc())
            .all()
        )

        purchased = {
            r[0]
            for r in db.query(Purchase.course_id).filter(Purchase.user_id == user_id).all()
        }

    out: list[dict[str, Any]] = []
    for c in courses:
        out.append(
            {
                "course": c,
                "chapters_count": sum(1 for ch in c.chapters if ch.is_published),
                "progress": get_course_progress(db, user_id, c.id) if c.id in purchased else None,
            }
        )
    return out


def get_dashboard_courses(db: Session, user_id: str) -> dict[str, list[dict[str, Any]]]:
    with store_errors(db, "Loading dashboard"):
        courses = (
            db.query(Course)
            .join(Purchase, Purchase.course_id == Course.id)
            .filter(Purchase.user_id == user_id)
            .options(selectinload(Course.category), selectinload(Course.chapters))
            .order_by(Purchase.created_at.desc())
            .all()
        )

    completed: list[dict[str, Any]] = []
    in_progress: list[dict[str, Any]] = []
    for c in courses:
        progress = get_course_progress(db, user_id, c.id)
        item = {
            "course": c,
            "chapters_count": sum(1 for ch in c.chapters if ch.is_published),
            "progress": progress,
        }
        (completed if progress == 100 else in_progress).append(item)

    return {"completed_courses": completed, "courses_in_progress": in_progress}


def list_teacher_courses(db: Session, user_id: str) -> list[Course]:
    with store_errors(db, "Listing teacher courses"):
        return (
            db.query(Course)
            .filter(Course.user_id == user_id)
            .order_by(Course.created_at.desc())
            .all()
        )
