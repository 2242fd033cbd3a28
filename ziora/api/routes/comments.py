"""
ziora/api/routes/comments.py

Canonical comments API used by the notes and video lecture pages
"""
from typing import Optional
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, status
from bson import ObjectId
from ziora.api.deps import get_comment_store
from ziora.core.config import settings
from ziora.models.base import CommentAction, CommentStatus
from ziora.models.comment import CommentCreate, CommentResponse, CommentUpdate
from ziora.services.comment_store import CommentStore, new_comment_entry
from ziora.utils.timestamps import format_relative
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

ACTION_PAST_TENSE = {
    CommentAction.LIKE.value: "liked",
    CommentAction.DISLIKE.value: "disliked",
    CommentAction.REPLY.value: "replied to",
}

REACTION_FIELDS = {
    CommentAction.LIKE.value: ("likes", "likedBy"),
    CommentAction.DISLIKE.value: ("dislikes", "dislikedBy"),
}

@router.post("/comments")
async def create_comment(
    comment: CommentCreate,
    store: CommentStore = Depends(get_comment_store)
):
    """Save a new comment and copy it into its module/topic thread"""
    if not all([comment.author, comment.content, comment.subject, comment.module, comment.type]):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields"
        )

    now = datetime.utcnow()
    comment_doc = {
        **comment.model_dump(),
        "status": CommentStatus.PENDING.value,  # All comments start as pending for moderation
        "likes": 0,
        "dislikes": 0,
        "likedBy": [],
        "dislikedBy": [],
        "replies": [],
        "timestamp": now,
        "createdAt": now,
        "updatedAt": now
    }

    try:
        result = await store.comments.insert_one(comment_doc)
    except Exception as e:
        logger.error(f"Error saving comment: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error saving comment"
        )

    if not result.acknowledged:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save comment"
        )

    comment_id = str(result.inserted_id)

    # The content document copy is what pages and the admin dashboard read
    try:
        await store.mirror_comment(comment_id, comment, now)
    except Exception as e:
        logger.error(f"Comment {comment_id} saved but not mirrored into content: {e}")

    saved_comment = {
        **{key: value for key, value in comment_doc.items() if key != "_id"},
        "id": comment_id,
        "timestamp": format_relative(now),
    }

    return {
        "success": True,
        "comment": saved_comment,
        "message": "Comment saved successfully"
    }

@router.get("/comments")
async def get_comments(
    type: Optional[str] = None,
    subject: Optional[str] = None,
    module: Optional[str] = None,
    contentId: Optional[str] = None,
    status_filter: str = Query(CommentStatus.APPROVED.value, alias="status"),
    store: CommentStore = Depends(get_comment_store)
):
    """Comments for one piece of content; only approved ones unless ``status`` says otherwise"""
    query = {}
    if type:
        query["type"] = type
    if subject:
        query["subject"] = subject
    if module:
        query["module"] = module
    if contentId:
        query["contentId"] = contentId
    if status_filter != "all":
        query["status"] = status_filter

    try:
        cursor = store.comments.find(query).sort("timestamp", -1).limit(settings.CONTENT_COMMENTS_LIMIT)
        comments = await cursor.to_list(length=settings.CONTENT_COMMENTS_LIMIT)
    except Exception as e:
        logger.error(f"Error fetching comments: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching comments"
        )

    return {
        "success": True,
        "comments": [
            CommentResponse(
                id=str(comment["_id"]),
                author=comment.get("author"),
                content=comment.get("content", ""),
                timestamp=format_relative(comment.get("timestamp") or comment.get("createdAt")),
                userId=comment.get("userId"),
                replies=comment.get("replies") or [],
                likes=comment.get("likes") or 0,
                dislikes=comment.get("dislikes") or 0,
                likedBy=comment.get("likedBy") or [],
                dislikedBy=comment.get("dislikedBy") or [],
                status=comment.get("status"),
            ).model_dump()
            for comment in comments
        ]
    }

def _reaction_update(comment: dict, user_id: str, action: str) -> dict:
    """Toggle a like or dislike; taking one side drops the other"""
    opposite = CommentAction.DISLIKE.value if action == CommentAction.LIKE.value else CommentAction.LIKE.value
    own, own_list = REACTION_FIELDS[action]
    other, other_list = REACTION_FIELDS[opposite]

    if user_id in (comment.get(own_list) or []):
        return {
            "$inc": {own: -1},
            "$pull": {own_list: user_id}
        }

    update = {
        "$inc": {own: 1},
        "$addToSet": {own_list: user_id}
    }
    if user_id in (comment.get(other_list) or []):
        update["$inc"][other] = -1
        update["$pull"] = {other_list: user_id}
    return update

@router.patch("/comments")
async def update_comment(
    update: CommentUpdate,
    store: CommentStore = Depends(get_comment_store)
):
    """Like, dislike or reply to a comment"""
    if not update.commentId or not update.action:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Comment ID and action are required"
        )

    if not ObjectId.is_valid(update.commentId):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid comment ID format"
        )

    comment_id = ObjectId(update.commentId)
    new_reply = None

    if update.action in (CommentAction.LIKE.value, CommentAction.DISLIKE.value):
        if not update.userId:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"User ID required for {update.action} action"
            )

        comment = await store.comments.find_one({"_id": comment_id})
        if not comment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Comment not found"
            )

        update_query = _reaction_update(comment, update.userId, update.action)

    elif update.action == CommentAction.REPLY.value:
        if not update.replyData:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Reply data required"
            )

        new_reply = new_comment_entry(
            str(ObjectId()),
            update.replyData.author,
            update.replyData.content,
            update.replyData.userId,
        )
        update_query = {"$push": {"replies": new_reply}}

    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid action"
        )

    try:
        result = await store.comments.update_one({"_id": comment_id}, update_query)
    except Exception as e:
        logger.error(f"Error updating comment {update.commentId}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error updating comment"
        )

    if result.matched_count == 0:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found"
        )

    if new_reply is not None:
        try:
            await store.mirror_reply(update.commentId, new_reply)
        except Exception as e:
            logger.error(f"Reply {new_reply['id']} saved but not mirrored into content: {e}")

    return {
        "success": True,
        "message": f"Comment {ACTION_PAST_TENSE[update.action]} successfully"
    }
