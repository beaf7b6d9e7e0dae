from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship

from coursehub.db.base_class import Base
from coursehub.models._ids import new_id


class Chapter(Base):
    __tablename__ = "chapters"

    id = Column(String(36), primary_key=True, default=new_id)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    video_url = Column(Text, nullable=True)

    # display + unlock order inside the course
    position = Column(Integer, nullable=False)

    is_published = Column(Boolean, nullable=False, default=False)
    is_free = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    course = relationship("Course", back_populates="chapters")
    video_asset = relationship(
        "VideoAsset",
        back_populates="chapter",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    progress = relationship("UserProgress", back_populates="chapter", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint("course_id", "position", name="uq_chapters_course_position"),
    )
