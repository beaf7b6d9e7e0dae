from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from coursehub.db.session import get_db
from coursehub.services.categories import list_categories

router = APIRouter(prefix="/categories", tags=["categories"])


class CategoryOut(BaseModel):
    id: str
    name: str


class CategoryListResponse(BaseModel):
    ok: bool
    categories: list[CategoryOut]


@router.get("", response_model=CategoryListResponse)
def categories(db: Session = Depends(get_db)) -> CategoryListResponse:
    rows = list_categories(db)
    return CategoryListResponse(ok=True, categories=[CategoryOut(id=c.id, name=c.name) for c in rows])
