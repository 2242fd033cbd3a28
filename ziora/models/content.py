"""
ziora/models/content.py

Addressing of subtrees inside the academic content document
"""
from typing import Any, Dict, Optional, Union
from pydantic import BaseModel


def semester_key(semester) -> str:
    """Normalize a semester to its stored key (``3`` and ``sem-3`` both give ``sem-3``)"""
    value = str(semester).strip()
    if value.startswith("sem-"):
        return value
    return f"sem-{value}"


def content_field_path(year: str, semester, branch: str, subject: str, content_type: str) -> str:
    """Dotted field path of one content subtree"""
    if semester is None or str(semester).strip() == "":
        raise ValueError("Missing semester")
    parts = [year, semester_key(semester), branch, subject, content_type]
    for part in parts:
        if not part or "." in part or part.startswith("$"):
            raise ValueError(f"Invalid content path segment: {part!r}")
    return ".".join(parts)


class ContentPath(BaseModel):
    """Content path request body; every field is checked by the route"""
    year: Optional[str] = None
    semester: Optional[Union[str, int]] = None
    branch: Optional[str] = None
    subject: Optional[str] = None
    contentType: Optional[str] = None

    def is_complete(self) -> bool:
        return all([self.year, self.semester, self.branch, self.subject, self.contentType])

    @property
    def field_path(self) -> str:
        return content_field_path(
            self.year, self.semester, self.branch, self.subject, self.contentType
        )


class ContentSave(ContentPath):
    content: Optional[Dict[str, Any]] = None
