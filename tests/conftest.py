import os

# must be set before coursehub is imported: the engine is built at import time
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.pop("TEACHER_IDS", None)

import pytest  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from coursehub.db.base import Base  # noqa: E402
from coursehub.db.session import build_engine, get_db  # noqa: E402
from coursehub.main import app  # noqa: E402
from coursehub.models.chapter import Chapter  # noqa: E402
from coursehub.models.course import Course  # noqa: E402

# in-memory sqlite on a single shared connection: the app and the tests see the same data
engine = build_engine("sqlite+pysqlite:///:memory:")
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides.pop(get_db, None)
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    s = TestingSessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def make_course(db):
    """
    Build a course with chapters in one go.
    chapters: list of dicts with optional title/position/published/free keys.
    """

    def _make(owner="teacher-1", title="Course", published=True, price=20.0, chapters=()):
        course = Course(
            user_id=owner,
            title=title,
            description="About the course",
            image_url="https://img.example.com/cover.png",
            price=price,
            is_published=published,
        )
        db.add(course)
        db.flush()

        for i, spec in enumerate(chapters):
            db.add(
                Chapter(
                    course_id=course.id,
                    title=spec.get("title", f"Chapter {i}"),
                    description="Chapter body",
                    video_url="https://video.example.com/v.mp4",
                    position=spec.get("position", i),
                    is_published=spec.get("published", True),
                    is_free=spec.get("free", False),
                )
            )
        db.commit()
        db.refresh(course)
        return course

    return _make
