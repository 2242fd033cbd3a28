"""

ziora/core/config.py

"""


from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    # App
    APP_NAME: str = "Ziora"
    DEBUG: bool = True

    # Database
    MONGODB_URL: str
    DATABASE_NAME: str = "ziora"
    CONTENT_COLLECTION: str = "academic_content"
    COMMENTS_COLLECTION: str = "comments"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Listing windows
    ADMIN_COMMENTS_LIMIT: int = 100
    CONTENT_COMMENTS_LIMIT: int = 50

    # Relative timestamps older than this are rendered as a date
    RELATIVE_TIME_MAX_DAYS: int = 30

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
