import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursehub.api.catalog import router as catalog_router
from coursehub.api.chapters import router as chapters_router
from coursehub.api.courses import router as courses_router
from coursehub.api.teacher import router as teacher_router
from coursehub.core.config import settings
from coursehub.core.errors import CourseHubError
from coursehub.db.session import get_db

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="CourseHub API", version="0.1.0")
app.include_router(catalog_router)
app.include_router(courses_router)
app.include_router(chapters_router)
app.include_router(teacher_router)


@app.exception_handler(CourseHubError)
async def coursehub_error_handler(request: Request, exc: CourseHubError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # reads outside store_errors still surface as an unavailable store
    logger.error("unhandled database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"ok": False, "detail": "Content store unavailable"})


# pydantic's ValidationError subclasses ValueError; a response model that fails
# to build is a server bug, not bad input
@app.exception_handler(ValidationError)
async def response_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.error("could not build response for %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"ok": False, "detail": "Internal server error"})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"ok": False, "detail": str(exc)})


class HealthResponse(BaseModel):
    ok: bool
    service: str
    version: str
    db_ok: bool


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    db_ok = False
    gen = get_db()
    db: Session = next(gen)
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except Exception as e:
        logger.warning("health check: database unreachable: %s", e)
    finally:
        gen.close()

    return HealthResponse(ok=True, service="api", version=app.version, db_ok=db_ok)
