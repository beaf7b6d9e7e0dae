from __future__ import annotations

from typing import Any

from coursehub.models.attachment import Attachment
from coursehub.models.chapter import Chapter
from coursehub.models.course import Course
from coursehub.models.user_progress import UserProgress
from coursehub.services.analytics import format_price


def _iso(dt) -> str | None:
    return dt.isoformat() if dt else None


def course_out(c: Course) -> dict[str, Any]:
    return {
        "id": c.id,
        "user_id": c.user_id,
        "title": c.title,
        "description": c.description,
        "image_url": c.image_url,
        "price": c.price,
        "price_label": format_price(c.price) if c.price is not None else None,
        "is_published": bool(c.is_published),
        "category_id": c.category_id,
        "category": c.category.name if c.category else None,
        "created_at": _iso(c.created_at),
        "updated_at": _iso(c.updated_at),
    }


def chapter_out(ch: Chapter) -> dict[str, Any]:
    return {
        "id": ch.id,
        "course_id": ch.course_id,
        "title": ch.title,
        "description": ch.description,
        "video_url": ch.video_url,
        "position": ch.position,
        "is_published": bool(ch.is_published),
        "is_free": bool(ch.is_free),
        "created_at": _iso(ch.created_at),
        "updated_at": _iso(ch.updated_at),
    }


def attachment_out(a: Attachment) -> dict[str, Any]:
    return {
        "id": a.id,
        "name": a.name,
        "url": a.url,
        "course_id": a.course_id,
        "created_at": _iso(a.created_at),
    }


def progress_out(p: UserProgress | None) -> dict[str, Any] | None:
    if p is None:
        return None
    return {
        "id": p.id,
        "user_id": p.user_id,
        "chapter_id": p.chapter_id,
        "is_completed": bool(p.is_completed),
        "created_at": _iso(p.created_at),
        "updated_at": _iso(p.updated_at),
    }


def course_with_progress_out(item: dict[str, Any]) -> dict[str, Any]:
    return {
        **course_out(item["course"]),
        "chapters_count": item["chapters_count"],
        "progress": item["progress"],
    }
