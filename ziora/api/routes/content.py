"""
ziora/api/routes/content.py

Hierarchical study content, one year/semester/branch/subject/contentType
subtree at a time. All content lives in a single document.
"""
from typing import Optional
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status
from ziora.api.deps import get_db
from ziora.core.config import settings
from ziora.models.content import ContentPath, ContentSave
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

def _field_path(path: ContentPath, require_content: bool = False) -> str:
    missing = not path.is_complete() or (require_content and not path.content)
    if missing:
        fields = "year, semester, branch, subject, contentType"
        if require_content:
            fields += ", content"
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing required fields: {fields}"
        )
    try:
        return path.field_path
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

def _get_nested_value(document: dict, keys):
    current = document
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current

@router.get("")
async def get_content(
    year: Optional[str] = None,
    semester: Optional[str] = None,
    branch: Optional[str] = None,
    subject: Optional[str] = None,
    contentType: Optional[str] = None,
    db=Depends(get_db)
):
    """Fetch one content subtree; empty content is ``{"modules": []}``"""
    field_path = _field_path(ContentPath(
        year=year, semester=semester, branch=branch, subject=subject, contentType=contentType
    ))

    try:
        document = await db[settings.CONTENT_COLLECTION].find_one({}, projection={field_path: 1})
    except Exception as e:
        logger.error(f"Error fetching content {field_path}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch content"
        )

    content = _get_nested_value(document, field_path.split(".")) if document else None

    return {
        "success": True,
        "content": content or {"modules": []}
    }

async def _write_content(db, field_path: str, content: dict, upsert: bool):
    try:
        return await db[settings.CONTENT_COLLECTION].update_one(
            {},
            {"$set": {field_path: content, "updatedAt": datetime.utcnow()}},
            upsert=upsert
        )
    except Exception as e:
        logger.error(f"Error saving content {field_path}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save content"
        )

@router.post("")
async def save_content(body: ContentSave, db=Depends(get_db)):
    """Create or replace a content subtree, creating the hierarchy if needed"""
    field_path = _field_path(body, require_content=True)
    await _write_content(db, field_path, body.content, upsert=True)

    return {
        "success": True,
        "message": "Content saved successfully"
    }

@router.put("")
async def update_content(body: ContentSave, db=Depends(get_db)):
    """Replace an existing content subtree"""
    field_path = _field_path(body, require_content=True)
    result = await _write_content(db, field_path, body.content, upsert=False)

    if result.matched_count == 0:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Content store not initialized"
        )

    return {
        "success": True,
        "message": "Content updated successfully"
    }

@router.delete("")
async def delete_content(body: ContentPath, db=Depends(get_db)):
    """Remove a content subtree, comments included"""
    field_path = _field_path(body)

    try:
        await db[settings.CONTENT_COLLECTION].update_one(
            {},
            {"$unset": {field_path: ""}, "$set": {"updatedAt": datetime.utcnow()}}
        )
    except Exception as e:
        logger.error(f"Error deleting content {field_path}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete content"
        )

    return {
        "success": True,
        "message": "Content deleted successfully"
    }
