from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from coursehub.db.guard import store_errors
from coursehub.models.course import Course
from coursehub.models.purchase import Purchase


def get_analytics(db: Session, user_id: str) -> dict[str, Any]:
    """
    Revenue per course for the teacher's courses.
    Revenue = purchases x the course's current price.
    """
    with store_errors(db, "Loading analytics"):
        rows = (
            db.query(Purchase, Course)
            .join(Course, Course.id == Purchase.course_id)
            .filter(Course.user_id == user_id)
            .all()
        )

    earnings: dict[str, float] = {}
    for _purchase, course in rows:
        earnings[course.title] = earnings.get(course.title, 0.0) + float(course.price or 0)

    data = [{"name": name, "total": total} for name, total in earnings.items()]

    return {
        "data": data,
        "total_revenue": sum(d["total"] for d in data),
        "total_sales": len(rows),
    }


def format_price(amount: float | None) -> str:
    """USD display string, e.g. 1234.5 -> "$1,234.50"."""
    return f"${float(amount or 0):,.2f}"
