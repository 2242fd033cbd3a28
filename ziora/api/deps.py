#ziora/api/deps.py

from fastapi import Depends
from ziora.core.database import get_database
from ziora.services.comment_store import CommentStore

async def get_db():
    """Get the Mongo database for this request"""
    return get_database()

async def get_comment_store(db=Depends(get_db)) -> CommentStore:
    """Comment locator/mutator bound to the request's database"""
    return CommentStore(db)
