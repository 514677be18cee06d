from newsroom.models.user import User, UserRole
from newsroom.models.desk import Desk
from newsroom.models.category import Category
from newsroom.models.bulletin import Bulletin, BulletinStatus
from newsroom.models.rundown_row import RundownRow, RowStatus, RowType
from newsroom.models.row_segment import RowSegment, SegmentType
from newsroom.models.pool import Pool, PoolStory, PoolType, StoryStatus
from newsroom.models.audit_log import AuditLog

__all__ = [
    "User", "UserRole",
    "Desk",
    "Category",
    "Bulletin", "BulletinStatus",
    "RundownRow", "RowStatus", "RowType",
    "RowSegment", "SegmentType",
    "Pool", "PoolStory", "PoolType", "StoryStatus",
    "AuditLog",
]
