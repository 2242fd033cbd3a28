"""
Comment locator, mutator and aggregator over MongoDB

ziora/services/comment_store.py

"""
from typing import Any, Dict, List, Optional
from datetime import datetime
from urllib.parse import quote
from bson import ObjectId
import logging

from ziora.core.config import settings
from ziora.models.base import THREAD_CONTENT_TYPES, CommentStatus, CommentType
from ziora.models.comment import Comment, CommentCreate, FlattenedCommentResponse
from ziora.models.content import content_field_path
from ziora.services.comment_tree import (
    CommentLocation,
    flatten_documents,
    locate_in_document,
    locate_in_documents,
)
from ziora.utils.timestamps import format_relative, timestamp_sort_key

logger = logging.getLogger(__name__)


def _title_case(value: Optional[str]) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in (value or "").replace("-", " ").split(" "))


def _text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _reply_count(replies: Any) -> int:
    return len(replies) if isinstance(replies, list) else 0


def _as_count(value: Any) -> int:
    # Extended JSON exports store numbers as {"$numberInt": "3"}
    if isinstance(value, dict):
        value = value.get("$numberInt") or value.get("$numberLong") or 0
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def to_admin_record(comment: Dict[str, Any], now: Optional[datetime] = None) -> FlattenedCommentResponse:
    """Shape a flattened comment for the admin listing"""
    author = _text(comment.get("author")) or "Anonymous"
    return FlattenedCommentResponse(
        id=_text(comment.get("id")),
        user={
            "name": author,
            "email": f"{_text(comment.get('author')) or 'anonymous'}@ziora.com",
            "avatar": f"https://api.dicebear.com/7.x/initials/svg?seed={quote(author, safe='')}",
        },
        content=_text(comment.get("content")),
        subject=_title_case(_text(comment.get("subject"))),
        module=_text(comment.get("module")) or "General",
        topic=_text(comment.get("topic")) or None,
        timestamp=format_relative(comment.get("timestamp"), now=now),
        status=_text(comment.get("status")) or CommentStatus.PENDING.value,
        replies=0 if comment.get("parentId") else _reply_count(comment.get("replies")),
        likes=_as_count(comment.get("likes")),
        type=comment["type"],
        contentId=_text(comment.get("contentId")),
        year=comment["year"],
        semester=comment["semester"],
        branch=_title_case(_text(comment.get("branch"))),
        path=comment["path"],
        parentId=_text(comment.get("parentId")),
    )


def new_comment_entry(comment_id: str, author: Optional[str], content: str,
                      user_id: Optional[str] = None, timestamp: Optional[datetime] = None) -> Dict[str, Any]:
    """Fresh comment node with zeroed reactions"""
    return Comment(
        id=comment_id,
        author=author,
        content=content,
        timestamp=timestamp or datetime.utcnow(),
        userId=user_id,
    ).model_dump()


class CommentStore:
    """
    Comments live in two places: nested inside the academic content
    document, where pages and the admin dashboard read them, and in the
    canonical ``comments`` collection written by the comments API. Writes go
    to the content document first and are mirrored to the other side;
    nothing rolls back a half-applied pair.
    """

    def __init__(self, database):
        self.db = database
        self.content = database[settings.CONTENT_COLLECTION]
        self.comments = database[settings.COMMENTS_COLLECTION]

    # Locator

    async def _locate_fast(self, comment_id: str) -> Optional[CommentLocation]:
        """Use the canonical record to guess the content subtree, then scan only that"""
        query = {"replies.id": comment_id}
        if ObjectId.is_valid(comment_id):
            query = {"$or": [{"_id": ObjectId(comment_id)}, query]}

        record = await self.comments.find_one(
            query, projection={"year": 1, "semester": 1, "branch": 1, "subject": 1, "type": 1}
        )
        if not record:
            return None

        content_type = THREAD_CONTENT_TYPES.get(record.get("type"))
        try:
            field_path = content_field_path(
                record.get("year"), record.get("semester"), record.get("branch"),
                record.get("subject"), content_type,
            )
        except (TypeError, ValueError):
            return None

        document = await self.content.find_one(
            {field_path: {"$exists": True}}, projection={field_path: 1}
        )
        if not document:
            return None
        return locate_in_document(document, comment_id)

    async def locate(self, comment_id: str) -> Optional[CommentLocation]:
        """Find a comment or reply anywhere in the content documents"""
        location = await self._locate_fast(comment_id)
        if location is not None:
            return location

        logger.info(f"Comment {comment_id} not on the direct path, scanning all content")
        documents = await self.content.find({}).to_list(length=None)
        return locate_in_documents(documents, comment_id)

    # Mutator

    async def set_status(self, comment_id: str, status: str) -> bool:
        """Set ``status`` on one comment or reply. False when it does not exist."""
        location = await self.locate(comment_id)
        if location is None:
            return False

        result = await self.content.update_one(
            {"_id": location.document_id},
            {"$set": {f"{location.path}.status": status, "updatedAt": datetime.utcnow()}},
        )
        if result.matched_count == 0:
            return False

        logger.info(f"Comment {comment_id} set to {status} at {location.path}")
        await self._mirror_status(comment_id, location, status)
        return True

    async def delete(self, comment_id: str) -> bool:
        """Remove one comment or reply (and its subtree). False when it does not exist."""
        location = await self.locate(comment_id)
        if location is None:
            return False

        result = await self.content.update_one(
            {"_id": location.document_id},
            {
                "$pull": {location.array_path: {"id": location.node["id"]}},
                "$set": {"updatedAt": datetime.utcnow()},
            },
        )
        if result.modified_count == 0:
            return False

        logger.info(f"Comment {comment_id} pulled from {location.array_path}")
        await self._mirror_delete(comment_id, location)
        return True

    async def _mirror_status(self, comment_id: str, location: CommentLocation, status: str):
        try:
            if location.is_reply:
                await self.comments.update_one(
                    {"replies.id": comment_id},
                    {"$set": {"replies.$.status": status}},
                )
            elif ObjectId.is_valid(comment_id):
                await self.comments.update_one(
                    {"_id": ObjectId(comment_id)},
                    {"$set": {"status": status, "updatedAt": datetime.utcnow()}},
                )
        except Exception as e:
            logger.error(f"Comment {comment_id} status not mirrored to canonical record: {e}")

    async def _mirror_delete(self, comment_id: str, location: CommentLocation):
        try:
            if location.is_reply:
                await self.comments.update_one(
                    {"replies.id": comment_id},
                    {"$pull": {"replies": {"id": comment_id}}},
                )
            elif ObjectId.is_valid(comment_id):
                await self.comments.delete_one({"_id": ObjectId(comment_id)})
        except Exception as e:
            logger.error(f"Comment {comment_id} delete not mirrored to canonical record: {e}")

    # Aggregator

    async def list_recent(self, limit: Optional[int] = None, now: Optional[datetime] = None) -> List[FlattenedCommentResponse]:
        """Newest comments and replies across all content, flattened"""
        limit = settings.ADMIN_COMMENTS_LIMIT if limit is None else limit

        documents = await self.content.find({}).to_list(length=None)
        flattened = flatten_documents(documents)
        flattened.sort(key=lambda comment: timestamp_sort_key(comment.get("timestamp")), reverse=True)

        return [to_admin_record(comment, now=now) for comment in flattened[:limit]]

    # Content document mirror

    async def mirror_comment(self, comment_id: str, comment: CommentCreate, timestamp: datetime) -> bool:
        """Push a new top-level comment into its module/topic thread"""
        content_type = THREAD_CONTENT_TYPES.get(comment.type)
        if content_type is None or not comment.contentId:
            logger.warning(f"Comment {comment_id} has no thread to mirror into (type={comment.type})")
            return False

        prefix = content_field_path(
            comment.year, comment.semester, comment.branch, comment.subject, content_type
        )
        entry = new_comment_entry(comment_id, comment.author, comment.content, comment.userId, timestamp)

        if comment.type == CommentType.VIDEOS.value:
            target = f"{prefix}.modules.$[].topics.$[owner].comments"
            query = {f"{prefix}.modules.topics.id": comment.contentId}
        else:
            target = f"{prefix}.modules.$[owner].comments"
            query = {f"{prefix}.modules.id": comment.contentId}

        result = await self.content.update_one(
            query,
            {"$push": {target: entry}, "$set": {"updatedAt": datetime.utcnow()}},
            array_filters=[{"owner.id": comment.contentId}],
        )
        if result.matched_count == 0:
            logger.warning(f"Comment {comment_id} not mirrored: no thread {comment.contentId} under {prefix}")
            return False
        return True

    async def mirror_reply(self, parent_id: str, reply: Dict[str, Any]) -> bool:
        """Append a reply under its parent wherever the parent sits"""
        location = await self.locate(parent_id)
        if location is None:
            logger.warning(f"Reply {reply.get('id')} not mirrored: parent {parent_id} not in content")
            return False

        result = await self.content.update_one(
            {"_id": location.document_id},
            {"$push": {f"{location.path}.replies": reply}, "$set": {"updatedAt": datetime.utcnow()}},
        )
        return result.matched_count > 0
