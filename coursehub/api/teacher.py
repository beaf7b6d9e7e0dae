from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from coursehub.api.serialize import course_out
from coursehub.core.identity import Identity, get_identity
from coursehub.db.session import get_db
from coursehub.services.access import require_teacher
from coursehub.services.analytics import format_price, get_analytics
from coursehub.services.courses import list_teacher_courses

router = APIRouter(prefix="/teacher", tags=["teacher"])


class RevenueItem(BaseModel):
    name: str
    total: float


class AnalyticsResponse(BaseModel):
    ok: bool
    data: list[RevenueItem]
    total_revenue: float
    total_revenue_label: str
    total_sales: int


@router.get("/courses")
def courses(db: Session = Depends(get_db), who: Identity = Depends(get_identity)):
    require_teacher(who.user_id)
    rows = list_teacher_courses(db, who.user_id)
    return {"ok": True, "courses": [course_out(c) for c in rows]}


@router.get("/analytics", response_model=AnalyticsResponse)
def analytics(db: Session = Depends(get_db), who: Identity = Depends(get_identity)) -> AnalyticsResponse:
    require_teacher(who.user_id)
    a = get_analytics(db, who.user_id)
    return AnalyticsResponse(ok=True, total_revenue_label=format_price(a["total_revenue"]), **a)
