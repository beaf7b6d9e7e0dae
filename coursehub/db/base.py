from coursehub.db.base_class import Base  # noqa: F401

# Import all the models here so that Base has them registered
# This file should NOT be imported by models.
from coursehub.models.category import Category  # noqa: F401
from coursehub.models.course import Course  # noqa: F401
from coursehub.models.attachment import Attachment  # noqa: F401
from coursehub.models.chapter import Chapter  # noqa: F401
from coursehub.models.video_asset import VideoAsset  # noqa: F401
from coursehub.models.user_progress import UserProgress  # noqa: F401
from coursehub.models.purchase import Purchase  # noqa: F401
