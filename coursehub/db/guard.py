from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from coursehub.core.errors import ConflictError, StoreUnavailableError

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(db: Session, action: str) -> Iterator[None]:
    """
    Roll back and translate database failures raised inside the block.
      - IntegrityError -> ConflictError (a unique constraint tripped)
      - anything else  -> StoreUnavailableError
    Errors are not retried.
    """
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        logger.warning("%s violated a constraint: %s", action, e.orig)
        raise ConflictError(f"{action} conflicts with existing data") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("%s failed: %s", action, e)
        raise StoreUnavailableError(f"{action} failed: content store unavailable") from e
