"""
ziora/api/routes/admin_comments.py

Comment moderation endpoints for the admin dashboard
"""

from fastapi import APIRouter, Depends, HTTPException, status
from ziora.api.deps import get_comment_store
from ziora.models.base import MODERATION_STATUSES
from ziora.models.comment import CommentDeleteRequest, ModerationRequest
from ziora.services.comment_store import CommentStore
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/comments")
async def list_comments(store: CommentStore = Depends(get_comment_store)):
    """Latest comments and replies across all subjects, newest first"""
    try:
        comments = await store.list_recent()
    except Exception as e:
        logger.error(f"Error fetching comments: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching comments"
        )

    return {
        "success": True,
        "comments": [comment.model_dump() for comment in comments]
    }

@router.patch("/comments")
async def moderate_comment(
    request: ModerationRequest,
    store: CommentStore = Depends(get_comment_store)
):
    """
    Change a comment's moderation status

    - ``flag`` marks it ``flagged``, ``approve`` ``approved``, ``reject`` ``rejected``
    - Works for replies at any depth
    """
    if not request.commentId or not request.action:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Comment ID and action are required"
        )

    new_status = MODERATION_STATUSES.get(request.action)
    if new_status is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid action"
        )

    try:
        updated = await store.set_status(request.commentId, new_status)
    except Exception as e:
        logger.error(f"Error updating comment {request.commentId}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error updating comment"
        )

    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found"
        )

    if request.reason:
        logger.info(f"Comment {request.commentId} {new_status}: {request.reason}")

    return {
        "success": True,
        "message": f"Comment {new_status} successfully"
    }

@router.delete("/comments")
async def delete_comment(
    request: CommentDeleteRequest,
    store: CommentStore = Depends(get_comment_store)
):
    """Delete a comment or reply together with its replies"""
    if not request.commentId:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Comment ID is required"
        )

    try:
        deleted = await store.delete(request.commentId)
    except Exception as e:
        logger.error(f"Error deleting comment {request.commentId}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error deleting comment"
        )

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found"
        )

    return {
        "success": True,
        "message": "Comment deleted successfully"
    }
