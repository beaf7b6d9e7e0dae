from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coursehub.core.errors import NotFoundError
from coursehub.db.guard import store_errors
from coursehub.models.chapter import Chapter
from coursehub.models.course import Course
from coursehub.models.user_progress import UserProgress
from coursehub.services.access import has_purchase

logger = logging.getLogger(__name__)


def _get_record(db: Session, user_id: str, chapter_id: str) -> UserProgress | None:
    return (
        db.query(UserProgress)
        .filter(UserProgress.user_id == user_id, UserProgress.chapter_id == chapter_id)
        .first()
    )


def _published_chapters(db: Session, course_id: str) -> list[Chapter]:
    return (
        db.query(Chapter)
        .filter(Chapter.course_id == course_id, Chapter.is_published.is_(True))
        .order_by(Chapter.position.asc())
        .all()
    )


def _completed_ids(db: Session, user_id: str, chapter_ids: list[str]) -> set[str]:
    if not chapter_ids:
        return set()
    rows = (
        db.query(UserProgress.chapter_id)
        .filter(
            UserProgress.user_id == user_id,
            UserProgress.chapter_id.in_(chapter_ids),
            UserProgress.is_completed.is_(True),
        )
        .all()
    )
    return {r[0] for r in rows}


def get_progress_record(db: Session, user_id: str, chapter_id: str) -> UserProgress | None:
    with store_errors(db, "Reading chapter progress"):
        return _get_record(db, user_id, chapter_id)


def set_chapter_completion(db: Session, user_id: str, chapter_id: str, is_completed: bool) -> UserProgress:
    """
    Upsert the (user, chapter) completion flag. Only current state is kept.

    Entitlement (purchase / free preview) is checked by the caller before this runs.
    """
    if not user_id or not user_id.strip():
        raise ValueError("user_id is required")

    with store_errors(db, "Updating chapter progress"):
        chapter = db.query(Chapter).filter(Chapter.id == chapter_id).first()
        if not chapter:
            raise NotFoundError("Chapter not found")

        row = _get_record(db, user_id, chapter_id)
        if row:
            row.is_completed = bool(is_completed)
        else:
            row = UserProgress(user_id=user_id, chapter_id=chapter_id, is_completed=bool(is_completed))
            db.add(row)

        try:
            db.commit()
        except IntegrityError:
            # lost an insert race on (user_id, chapter_id); overwrite the winner
            db.rollback()
            row = _get_record(db, user_id, chapter_id)
            if row is None:
                raise
            row.is_completed = bool(is_completed)
            db.commit()

        db.refresh(row)

    logger.info("progress user=%s chapter=%s completed=%s", user_id, chapter_id, row.is_completed)
    return row


def get_course_progress(db: Session, user_id: str, course_id: str) -> float:
    """
    Percentage (0..100) of the course's published chapters the user completed.
    A course with no published chapters is 0.0.
    """
    with store_errors(db, "Computing course progress"):
        course = db.query(Course.id).filter(Course.id == course_id).first()
        if not course:
            raise NotFoundError("Course not found")

        chapter_ids = [c.id for c in _published_chapters(db, course_id)]
        if not chapter_ids:
            return 0.0

        completed = len(_completed_ids(db, user_id, chapter_ids))

    return completed / len(chapter_ids) * 100


def get_progress_summary(db: Session, user_id: str, course_id: str) -> dict[str, Any]:
    with store_errors(db, "Computing course progress"):
        course = db.query(Course).filter(Course.id == course_id).first()
        if not course:
            raise NotFoundError("Course not found")

        chapters = _published_chapters(db, course_id)
        done = _completed_ids(db, user_id, [c.id for c in chapters])
        purchased = has_purchase(db, user_id, course_id)

    items: list[dict[str, Any]] = []
    for c in chapters:
        items.append(
            {
                "chapter_id": c.id,
                "title": c.title,
                "position": c.position,
                "is_free": bool(c.is_free),
                "is_locked": not (c.is_free or purchased),
                "is_completed": c.id in done,
            }
        )

    # Resume logic:
    # 1) first unlocked chapter that isn't completed
    # 2) else the first chapter
    # 3) else None (nothing published)
    resume_id = None
    for it in items:
        if not it["is_locked"] and not it["is_completed"]:
            resume_id = it["chapter_id"]
            break
    if resume_id is None and items:
        resume_id = items[0]["chapter_id"]

    total = len(items)
    completed = sum(1 for it in items if it["is_completed"])

    return {
        "course_id": course_id,
        "is_purchased": purchased,
        "total_chapters": total,
        "completed_chapters": completed,
        "progress_percentage": (completed / total * 100) if total else 0.0,
        "resume_chapter_id": resume_id,
        "items": items,
    }
