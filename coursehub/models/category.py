from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coursehub.db.base_class import Base
from coursehub.models._ids import new_id


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)

    courses = relationship("Course", back_populates="category")
