from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship

from coursehub.db.base_class import Base
from coursehub.models._ids import new_id


class VideoAsset(Base):
    """Video host metadata for a chapter (zero or one per chapter)."""

    __tablename__ = "video_assets"

    id = Column(String(36), primary_key=True, default=new_id)
    chapter_id = Column(String(36), ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False, unique=True)

    asset_id = Column(String(255), nullable=False)
    playback_id = Column(String(255), nullable=True)

    chapter = relationship("Chapter", back_populates="video_asset")
