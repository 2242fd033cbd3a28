"""

ziora/models/__init__.py

"""


from ziora.models.base import *
from ziora.models.content import *
from ziora.models.comment import *

__all__ = [
    # Base
    "PyObjectId",
    "YearLevel",
    "ContentType",
    "CommentType",
    "CommentStatus",
    "ModerationAction",
    "CommentAction",
    "THREAD_CONTENT_TYPES",
    "MODERATION_STATUSES",

    # Content addressing
    "semester_key",
    "content_field_path",
    "ContentPath",
    "ContentSave",

    # Comment models
    "Comment",
    "CommentCreate",
    "ReplyData",
    "CommentUpdate",
    "CommentResponse",
    "ModerationRequest",
    "CommentDeleteRequest",
    "CommentUser",
    "FlattenedCommentResponse",
]
