from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from coursehub.core.errors import ConflictError, NotFoundError
from coursehub.db.guard import store_errors
from coursehub.models.attachment import Attachment
from coursehub.models.chapter import Chapter
from coursehub.models.course import Course
from coursehub.models.video_asset import VideoAsset
from coursehub.services.access import has_purchase
from coursehub.services.progress import get_progress_record

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "video_url", "is_free")


def get_course_chapter(db: Session, course_id: str, chapter_id: str) -> Chapter:
    with store_errors(db, "Loading chapter"):
        chapter = (
            db.query(Chapter)
            .filter(Chapter.id == chapter_id, Chapter.course_id == course_id)
            .first()
        )
    if not chapter:
        raise NotFoundError("Chapter not found")
    return chapter


def create_chapter(db: Session, course: Course, title: str) -> Chapter:
    title = (title or "").strip()
    if not title:
        raise ValueError("title is required")

    with store_errors(db, "Creating chapter"):
        last = db.query(func.max(Chapter.position)).filter(Chapter.course_id == course.id).scalar()
        chapter = Chapter(course_id=course.id, title=title, position=(last + 1) if last is not None else 1)
        db.add(chapter)
        db.commit()
        db.refresh(chapter)

    logger.info("chapter created id=%s course=%s position=%s", chapter.id, course.id, chapter.position)
    return chapter


def update_chapter(db: Session, chapter: Chapter, **fields: Any) -> Chapter:
    for k in EDITABLE_FIELDS:
        v = fields.get(k)
        if v is None:
            continue
        if k == "title" and not str(v).strip():
            raise ValueError("title cannot be empty")
        setattr(chapter, k, v)

    with store_errors(db, "Updating chapter"):
        db.commit()
        db.refresh(chapter)
    return chapter


def attach_video(db: Session, chapter: Chapter, asset_id: str, playback_id: str | None) -> VideoAsset:
    """Replace the chapter's video metadata with the asset the video host returned."""
    if not asset_id:
        raise ValueError("asset_id is required")

    with store_errors(db, "Attaching chapter video"):
        existing = db.query(VideoAsset).filter(VideoAsset.chapter_id == chapter.id).first()
        if existing:
            db.delete(existing)
            db.flush()

        asset = VideoAsset(chapter_id=chapter.id, asset_id=asset_id, playback_id=playback_id)
        db.add(asset)
        db.commit()
        db.refresh(asset)
    return asset


def _unpublish_course_if_empty(db: Session, course_id: str) -> None:
    remaining = (
        db.query(Chapter.id)
        .filter(Chapter.course_id == course_id, Chapter.is_published.is_(True))
        .count()
    )
    if remaining == 0:
        course = db.query(Course).filter(Course.id == course_id).one()
        if course.is_published:
            course.is_published = False
            logger.info("course %s unpublished: no published chapters left", course_id)


def publish_chapter(db: Session, chapter: Chapter) -> Chapter:
    missing = [k for k in ("title", "description", "video_url") if not getattr(chapter, k)]
    if missing:
        raise ValueError(f"Missing required fields: {', '.join(missing)}")

    with store_errors(db, "Publishing chapter"):
        chapter.is_published = True
        db.commit()
        db.refresh(chapter)

    logger.info("chapter published id=%s", chapter.id)
    return chapter


def unpublish_chapter(db: Session, chapter: Chapter) -> Chapter:
    with store_errors(db, "Unpublishing chapter"):
        chapter.is_published = False
        db.flush()
        _unpublish_course_if_empty(db, chapter.course_id)
        db.commit()
        db.refresh(chapter)

    logger.info("chapter unpublished id=%s", chapter.id)
    return chapter


def delete_chapter(db: Session, chapter: Chapter) -> None:
    course_id = chapter.course_id
    chapter_id = chapter.id
    with store_errors(db, "Deleting chapter"):
        db.delete(chapter)
        db.flush()
        _unpublish_course_if_empty(db, course_id)
        db.commit()

    logger.info("chapter deleted id=%s course=%s", chapter_id, course_id)


def reorder_chapters(db: Session, course_id: str, updates: list[tuple[str, int]]) -> list[Chapter]:
    """
    Apply all (chapter_id, position) updates in one transaction.

    Positions are first parked on negative placeholders so swaps never trip
    uq_chapters_course_position halfway through; the final write happens
    after that. Any failure rolls the whole batch back.
    """
    ids = [cid for cid, _ in updates]
    positions = [p for _, p in updates]

    if any(p is None or int(p) < 0 for p in positions):
        raise ValueError("position must be >= 0")
    if len(set(ids)) != len(ids):
        raise ConflictError("A chapter appears more than once in the reorder list")
    if len(set(positions)) != len(positions):
        raise ConflictError("Two chapters cannot share the same position")

    with store_errors(db, "Reordering chapters"):
        if not db.query(Course.id).filter(Course.id == course_id).first():
            raise NotFoundError("Course not found")

        chapters = db.query(Chapter).filter(Chapter.course_id == course_id).all()
        by_id = {c.id: c for c in chapters}

        unknown = [cid for cid in ids if cid not in by_id]
        if unknown:
            raise NotFoundError(f"Chapter not found in course: {unknown[0]}")

        untouched = {c.position for c in chapters if c.id not in set(ids)}
        clash = [p for p in positions if p in untouched]
        if clash:
            raise ConflictError(f"Position {clash[0]} is already taken by another chapter")

        try:
            for i, cid in enumerate(ids):
                by_id[cid].position = -(i + 1)
            db.flush()

            for cid, pos in updates:
                by_id[cid].position = int(pos)
            db.flush()

            db.commit()
        except Exception:
            db.rollback()
            raise

    logger.info("chapters reordered course=%s count=%d", course_id, len(updates))
    return sorted(chapters, key=lambda c: c.position)


def get_chapter_view(db: Session, user_id: str, course_id: str, chapter_id: str) -> dict[str, Any]:
    """
    Student-facing chapter payload. Video and attachments are only exposed
    once the chapter is unlocked (free preview or purchased course).
    """
    with store_errors(db, "Loading chapter"):
        course = (
            db.query(Course)
            .filter(Course.id == course_id, Course.is_published.is_(True))
            .first()
        )
        chapter = (
            db.query(Chapter)
            .filter(Chapter.id == chapter_id, Chapter.course_id == course_id, Chapter.is_published.is_(True))
            .first()
        )
        if not course or not chapter:
            raise NotFoundError("Chapter or course not found")

        purchased = has_purchase(db, user_id, course_id)
        unlocked = bool(chapter.is_free) or purchased

        attachments: list[Attachment] = []
        if purchased:
            attachments = (
                db.query(Attachment)
                .filter(Attachment.course_id == course_id)
                .order_by(Attachment.created_at.asc())
                .all()
            )

        playback_id = None
        next_chapter_id = None
        if unlocked:
            asset = db.query(VideoAsset).filter(VideoAsset.chapter_id == chapter_id).first()
            playback_id = asset.playback_id if asset else None

            nxt = (
                db.query(Chapter)
                .filter(
                    Chapter.course_id == course_id,
                    Chapter.is_published.is_(True),
                    Chapter.position > chapter.position,
                )
                .order_by(Chapter.position.asc())
                .first()
            )
            next_chapter_id = nxt.id if nxt else None

    record = get_progress_record(db, user_id, chapter_id)

    return {
        "chapter": chapter,
        "course_price": course.price,
        "is_purchased": purchased,
        "is_locked": not unlocked,
        "playback_id": playback_id,
        "attachments": attachments,
        "next_chapter_id": next_chapter_id,
        "user_progress": record,
    }
