"""
API routers

ziora/api/routes/__init__.py
"""
from fastapi import APIRouter

# Create the main API router
api_router = APIRouter()

# Import individual routers
from ziora.api.routes.admin_comments import router as admin_comments_router
from ziora.api.routes.comments import router as comments_router
from ziora.api.routes.content import router as content_router



# Include all routers
api_router.include_router(admin_comments_router, prefix="/admin", tags=["admin"])
api_router.include_router(comments_router, prefix="/content", tags=["comments"])
api_router.include_router(content_router, prefix="/content", tags=["content"])
