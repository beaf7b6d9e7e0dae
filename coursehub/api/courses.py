from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from coursehub.api.serialize import attachment_out, course_out, course_with_progress_out
from coursehub.core.errors import NotFoundError
from coursehub.core.identity import Identity, get_identity
from coursehub.db.session import get_db
from coursehub.services.access import require_course_owner, require_teacher
from coursehub.services.courses import (
    add_attachment,
    create_course,
    delete_attachment,
    delete_course,
    get_course,
    get_dashboard_courses,
    publish_course,
    search_courses,
    unpublish_course,
    update_course,
)
from coursehub.services.progress import get_progress_summary

router = APIRouter(prefix="/courses", tags=["courses"])


class CourseCreateRequest(BaseModel):
    title: str


class CourseUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    price: float | None = Field(default=None, ge=0)
    category_id: str | None = None


class AttachmentCreateRequest(BaseModel):
    url: str


class CourseProgressItem(BaseModel):
    chapter_id: str
    title: str
    position: int
    is_free: bool
    is_locked: bool
    is_completed: bool


class CourseProgressResponse(BaseModel):
    ok: bool
    course_id: str
    is_purchased: bool
    total_chapters: int
    completed_chapters: int
    progress_percentage: float
    resume_chapter_id: str | None
    items: list[CourseProgressItem]


@router.post("")
def create(req: CourseCreateRequest, db: Session = Depends(get_db), who: Identity = Depends(get_identity)):
    require_teacher(who.user_id)
    course = create_course(db, who.user_id, req.title)
    return {"ok": True, "course": course_out(course)}


@router.get("")
def search(
    db: Session = Depends(get_db),
    who: Identity = Depends(get_identity),
    title: str | None = Query(default=None),
    category_id: str | None = Query(default=None),
):
    items = search_courses(db, who.user_id, title=title, category_id=category_id)
    return {"ok": True, "courses": [course_with_progress_out(it) for it in items]}


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db), who: Identity = Depends(get_identity)):
    d = get_dashboard_courses(db, who.user_id)
    return {
        "ok": True,
        "completed_courses": [course_with_progress_out(it) for it in d["completed_courses"]],
        "courses_in_progress": [course_with_progress_out(it) for it in d["courses_in_progress"]],
    }


@router.get("/{course_id}")
def get_one(course_id: str, db: Session = Depends(get_db), who: Identity = Depends(get_identity)):
    course = get_course(db, course_id)
    is_owner = course.user_id == who.user_id
    # drafts are visible to their owner only
    if not course.is_published and not is_owner:
        raise NotFoundError("Course not found")
    return {
        "ok": True,
        "course": course_out(course),
        "attachments": [attachment_out(a) for a in course.attachments] if is_owner else [],
    }


@router.patch("/{course_id}")
def update(
    course_id: str,
    req: CourseUpdateRequest,
    db: Session = Depends(get_db),
    who: Identity = Depends(get_identity),
):
    course = require_course_owner(db, who.user_id, course_id)
    course = update_course(db, course, **req.model_dump(exclude_none=True))
    return {"ok": True, "course": course_out(course)}


@router.delete("/{course_id}")
def delete(course_id: str, db: Session = Depends(get_db), who: Identity = Depends(get_identity)):
    course = require_course_owner(db, who.user_id, course_id)
    delete_course(db, course)
    return {"ok": True, "course_id": course_id}


@router.patch("/{course_id}/publish")
def publish(course_id: str, db: Session = Depends(get_db), who: Identity = Depends(get_identity)):
    course = require_course_owner(db, who.user_id, course_id)
    return {"ok": True, "course": course_out(publish_course(db, course))}


@router.patch("/{course_id}/unpublish")
def unpublish(course_id: str, db: Session = Depends(get_db), who: Identity = Depends(get_identity)):
    course = require_course_owner(db, who.user_id, course_id)
    return {"ok": True, "course": course_out(unpublish_course(db, course))}


@router.post("/{course_id}/attachments")
def create_attachment(
    course_id: str,
    req: AttachmentCreateRequest,
    db: Session = Depends(get_db),
    who: Identity = Depends(get_identity),
):
    course = require_course_owner(db, who.user_id, course_id)
    att = add_attachment(db, course, req.url)
    return {"ok": True, "attachment": attachment_out(att)}


@router.delete("/{course_id}/attachments/{attachment_id}")
def remove_attachment(
    course_id: str,
    attachment_id: str,
    db: Session = Depends(get_db),
    who: Identity = Depends(get_identity),
):
    course = require_course_owner(db, who.user_id, course_id)
    delete_attachment(db, course, attachment_id)
    return {"ok": True, "attachment_id": attachment_id}


@router.get("/{course_id}/progress", response_model=CourseProgressResponse)
def progress(course_id: str, db: Session = Depends(get_db), who: Identity = Depends(get_identity)) -> CourseProgressResponse:
    p = get_progress_summary(db, who.user_id, course_id)
    return CourseProgressResponse(ok=True, **p)
