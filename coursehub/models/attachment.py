from sqlalchemy import Column, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import relationship

from coursehub.db.base_class import Base
from coursehub.models._ids import new_id


class Attachment(Base):
    __tablename__ = "attachments"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    url = Column(Text, nullable=False)

    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    course = relationship("Course", back_populates="attachments")
