"""
ziora/models/comment.py

Comment request/response models. Field names follow the JSON the
frontend already speaks, so they stay camelCase.
"""
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field
from ziora.models.base import PyObjectId

class Comment(BaseModel):
    """Comment node as stored in a module/topic thread"""
    id: str
    author: Optional[str] = None
    content: str = ""
    timestamp: Any = None
    userId: Optional[str] = None
    likes: int = 0
    dislikes: int = 0
    likedBy: List[str] = Field(default_factory=list)
    dislikedBy: List[str] = Field(default_factory=list)
    replies: List["Comment"] = Field(default_factory=list)
    status: str = "pending"

class CommentCreate(BaseModel):
    """Create comment request model. Required fields are checked by the route."""
    author: Optional[str] = None
    content: Optional[str] = None
    subject: Optional[str] = None
    module: Optional[str] = None
    type: Optional[str] = None  # 'notes' or 'videos'
    contentId: Optional[str] = None  # Module/Topic ID
    year: Optional[str] = None
    semester: Optional[Union[str, int]] = None
    branch: Optional[str] = None
    userId: Optional[str] = None
    userEmail: Optional[str] = None

class ReplyData(BaseModel):
    author: Optional[str] = None
    content: str = Field(..., min_length=1)
    userId: Optional[str] = None

class CommentUpdate(BaseModel):
    """Like, dislike or reply"""
    commentId: Optional[PyObjectId] = None
    action: Optional[str] = None
    userId: Optional[str] = None
    replyData: Optional[ReplyData] = None

class CommentResponse(BaseModel):
    """Canonical comment as returned by the content comments API"""
    id: str
    author: Optional[str] = None
    content: str
    timestamp: str
    userId: Optional[str] = None
    replies: List[Dict[str, Any]] = Field(default_factory=list)
    likes: int = 0
    dislikes: int = 0
    likedBy: List[str] = Field(default_factory=list)
    dislikedBy: List[str] = Field(default_factory=list)
    status: Optional[str] = None

class ModerationRequest(BaseModel):
    commentId: Optional[str] = None
    action: Optional[str] = None
    reason: Optional[str] = None

class CommentDeleteRequest(BaseModel):
    commentId: Optional[str] = None

class CommentUser(BaseModel):
    name: str
    email: str
    avatar: str

class FlattenedCommentResponse(BaseModel):
    """One row of the admin comment listing"""
    id: Optional[str] = None
    user: CommentUser
    content: Optional[str] = None
    subject: str
    module: str = "General"
    topic: Optional[str] = None
    timestamp: str
    status: str = "pending"
    replies: int = 0
    likes: int = 0
    type: str
    contentId: Optional[str] = None
    year: str
    semester: str
    branch: str
    path: str
    parentId: Optional[str] = None
