"""
Document Models for the Config Dashboard API

Request models only check presence and size. Name rules and JSON validity
are enforced by the document service so the same checks apply to every
caller, not just HTTP.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from config.settings import AppConfig


class DocumentWriteRequest(BaseModel):
    """Body for save, update and upload-to-git."""
    filename: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=AppConfig.MAX_CONTENT_LENGTH)


class ExistsResponse(BaseModel):
    exists: bool


class FileListResponse(BaseModel):
    files: List[str]


class ContentResponse(BaseModel):
    content: str


class MutationResponse(BaseModel):
    """Response for save/update/delete. `warning` is set when git sync did not complete."""
    success: bool
    message: str
    repository: str
    filename: Optional[str] = None
    warning: Optional[str] = None


class UploadResponse(BaseModel):
    """Response for upload-to-git."""
    success: bool
    message: str
    githubUrl: Optional[str] = None
    rawUrl: Optional[str] = None
    repository: str
    filename: str


# =============================================================================
# Diff Models
# =============================================================================


class DiffRequest(BaseModel):
    original: str = Field('', max_length=AppConfig.MAX_CONTENT_LENGTH)
    changed: str = Field('', max_length=AppConfig.MAX_CONTENT_LENGTH)


class DiffLineModel(BaseModel):
    lineNumber: int
    type: str
    original: str
    changed: str


class DiffResponse(BaseModel):
    lines: List[DiffLineModel]
    summary: Dict[str, int]
