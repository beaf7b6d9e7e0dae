from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from coursehub.core.errors import ConflictError, NotFoundError
from coursehub.db.guard import store_errors
from coursehub.models.course import Course
from coursehub.models.purchase import Purchase
from coursehub.services.access import has_purchase

logger = logging.getLogger(__name__)


def record_purchase(db: Session, user_id: str, course_id: str) -> Purchase:
    """
    Store the entitlement for a completed payment. Called by the payment
    integration once the provider confirms the checkout.
    """
    if not user_id:
        raise ValueError("user_id is required")

    with store_errors(db, "Recording purchase"):
        if not db.query(Course.id).filter(Course.id == course_id).first():
            raise NotFoundError("Course not found")
        if has_purchase(db, user_id, course_id):
            raise ConflictError("Already purchased")

        purchase = Purchase(user_id=user_id, course_id=course_id)
        db.add(purchase)
        db.commit()
        db.refresh(purchase)

    logger.info("purchase recorded user=%s course=%s", user_id, course_id)
    return purchase
