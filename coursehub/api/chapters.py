from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from coursehub.api.serialize import attachment_out, chapter_out, progress_out
from coursehub.core.identity import Identity, get_identity
from coursehub.db.session import get_db
from coursehub.services.access import require_chapter_access, require_course_owner
from coursehub.services.chapters import (
    attach_video,
    create_chapter,
    delete_chapter,
    get_chapter_view,
    get_course_chapter,
    publish_chapter,
    reorder_chapters,
    unpublish_chapter,
    update_chapter,
)
from coursehub.services.progress import set_chapter_completion

router = APIRouter(prefix="/courses/{course_id}/chapters", tags=["chapters"])


class ChapterCreateRequest(BaseModel):
    title: str


class ChapterUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    video_url: str | None = None
    is_free: bool | None = None


class ReorderItem(BaseModel):
    id: str
    position: int = Field(ge=0)


class ReorderRequest(BaseModel):
    items: list[ReorderItem]


class VideoAttachRequest(BaseModel):
    asset_id: str
    playback_id: str | None = None


class ProgressUpdateRequest(BaseModel):
    is_completed: bool


@router.post("")
def create(
    course_id: str,
    req: ChapterCreateRequest,
    db: Session = Depends(get_db),
    who: Identity = Depends(get_identity),
):
    course = require_course_owner(db, who.user_id, course_id)
    chapter = create_chapter(db, course, req.title)
    return {"ok": True, "chapter": chapter_out(chapter)}


# declared before /{chapter_id} so "reorder" is never read as an id
@router.put("/reorder")
def reorder(
    course_id: str,
    req: ReorderRequest,
    db: Session = Depends(get_db),
    who: Identity = Depends(get_identity),
):
    require_course_owner(db, who.user_id, course_id)
    chapters = reorder_chapters(db, course_id, [(it.id, it.position) for it in req.items])
    return {"ok": True, "chapters": [{"id": c.id, "position": c.position} for c in chapters]}


@router.get("/{chapter_id}")
def get_one(
    course_id: str,
    chapter_id: str,
    db: Session = Depends(get_db),
    who: Identity = Depends(get_identity),
):
    v = get_chapter_view(db, who.user_id, course_id, chapter_id)
    return {
        "ok": True,
        "chapter": chapter_out(v["chapter"]),
        "course_price": v["course_price"],
        "is_purchased": v["is_purchased"],
        "is_locked": v["is_locked"],
        "playback_id": v["playback_id"],
        "attachments": [attachment_out(a) for a in v["attachments"]],
        "next_chapter_id": v["next_chapter_id"],
        "user_progress": progress_out(v["user_progress"]),
    }


@router.patch("/{chapter_id}")
def update(
    course_id: str,
    chapter_id: str,
    req: ChapterUpdateRequest,
    db: Session = Depends(get_db),
    who: Identity = Depends(get_identity),
):
    require_course_owner(db, who.user_id, course_id)
    chapter = get_course_chapter(db, course_id, chapter_id)
    chapter = update_chapter(db, chapter, **req.model_dump(exclude_none=True))
    return {"ok": True, "chapter": chapter_out(chapter)}


@router.delete("/{chapter_id}")
def delete(
    course_id: str,
    chapter_id: str,
    db: Session = Depends(get_db),
    who: Identity = Depends(get_identity),
):
    require_course_owner(db, who.user_id, course_id)
    chapter = get_course_chapter(db, course_id, chapter_id)
    delete_chapter(db, chapter)
    return {"ok": True, "chapter_id": chapter_id}


@router.patch("/{chapter_id}/publish")
def publish(
    course_id: str,
    chapter_id: str,
    db: Session = Depends(get_db),
    who: Identity = Depends(get_identity),
):
    require_course_owner(db, who.user_id, course_id)
    chapter = get_course_chapter(db, course_id, chapter_id)
    return {"ok": True, "chapter": chapter_out(publish_chapter(db, chapter))}


@router.patch("/{chapter_id}/unpublish")
def unpublish(
    course_id: str,
    chapter_id: str,
    db: Session = Depends(get_db),
    who: Identity = Depends(get_identity),
):
    require_course_owner(db, who.user_id, course_id)
    chapter = get_course_chapter(db, course_id, chapter_id)
    return {"ok": True, "chapter": chapter_out(unpublish_chapter(db, chapter))}


@router.put("/{chapter_id}/video")
def set_video(
    course_id: str,
    chapter_id: str,
    req: VideoAttachRequest,
    db: Session = Depends(get_db),
    who: Identity = Depends(get_identity),
):
    require_course_owner(db, who.user_id, course_id)
    chapter = get_course_chapter(db, course_id, chapter_id)
    asset = attach_video(db, chapter, req.asset_id, req.playback_id)
    return {
        "ok": True,
        "chapter_id": chapter_id,
        "asset_id": asset.asset_id,
        "playback_id": asset.playback_id,
    }


@router.put("/{chapter_id}/progress")
def set_progress(
    course_id: str,
    chapter_id: str,
    req: ProgressUpdateRequest,
    db: Session = Depends(get_db),
    who: Identity = Depends(get_identity),
):
    chapter = get_course_chapter(db, course_id, chapter_id)
    require_chapter_access(db, who.user_id, chapter)
    record = set_chapter_completion(db, who.user_id, chapter_id, req.is_completed)
    return {"ok": True, "user_progress": progress_out(record)}
