"""
ziora/models/base.py
"""


from enum import Enum

# Canonical comment ids are ObjectIds on the wire as strings
PyObjectId = str

# Enums
class YearLevel(str, Enum):
    FE = "FE"
    SE = "SE"
    TE = "TE"
    BE = "BE"

class ContentType(str, Enum):
    NOTES = "notes"
    VIDEO_LECTURES = "video-lecs"
    PREVIOUS_YEAR_QUESTIONS = "pyq"
    PRACTICALS = "practicals"
    SYLLABUS = "syllabus"
    VIVA_QUESTIONS = "viva-questions"

class CommentType(str, Enum):
    """Kind of thread a comment lives in, as reported to clients"""
    NOTES = "notes"
    VIDEOS = "videos"

class CommentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FLAGGED = "flagged"

class ModerationAction(str, Enum):
    FLAG = "flag"
    APPROVE = "approve"
    REJECT = "reject"

class CommentAction(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"
    REPLY = "reply"


# Comment thread kinds map onto the content types that carry them
THREAD_CONTENT_TYPES = {
    CommentType.NOTES.value: ContentType.NOTES.value,
    CommentType.VIDEOS.value: ContentType.VIDEO_LECTURES.value,
}

MODERATION_STATUSES = {
    ModerationAction.FLAG.value: CommentStatus.FLAGGED.value,
    ModerationAction.APPROVE.value: CommentStatus.APPROVED.value,
    ModerationAction.REJECT.value: CommentStatus.REJECTED.value,
}
