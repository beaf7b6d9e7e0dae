from coursehub.models.category import Category
from coursehub.models.course import Course
from coursehub.models.attachment import Attachment
from coursehub.models.chapter import Chapter
from coursehub.models.video_asset import VideoAsset
from coursehub.models.user_progress import UserProgress
from coursehub.models.purchase import Purchase

__all__ = ["Category", "Course", "Attachment", "Chapter", "VideoAsset", "UserProgress", "Purchase"]
