from sqlalchemy.orm import Session

from coursehub.db.guard import store_errors
from coursehub.models.category import Category


def list_categories(db: Session) -> list[Category]:
    with store_errors(db, "Listing categories"):
        return db.query(Category).order_by(Category.name.asc()).all()


def create_category(db: Session, name: str) -> Category:
    name = (name or "").strip()
    if not name:
        raise ValueError("name is required")

    # duplicate names trip the unique constraint -> ConflictError
    with store_errors(db, "Creating category"):
        cat = Category(name=name)
        db.add(cat)
        db.commit()
        db.refresh(cat)
    return cat
