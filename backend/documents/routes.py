"""
Document API routes for the Config Dashboard

Provides REST endpoints for JSON config documents:
- Existence check, list, read
- Save (create-only), update, delete: tolerant of git failures
- Upload-to-git: strict, fails unless the change reached the remote
- Positional line diff for the dashboard's diff checker

Errors raised by the document service (ValidationError, NotFoundError,
ConflictError) are mapped to 400/404/409 by api.error_handlers.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.dependencies import get_document_service
from documents.diff import diff_lines, summarize
from documents.service import DocumentService, MutationOutcome
from errors import GitSyncError
from models.document_models import (
    ContentResponse,
    DiffRequest,
    DiffResponse,
    DocumentWriteRequest,
    ExistsResponse,
    FileListResponse,
    MutationResponse,
    UploadResponse,
)
from security.audit import log_privileged_action

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])
diff_router = APIRouter(prefix="/api", tags=["diff"])


def _mutation_response(outcome: MutationOutcome, include_filename: bool = False) -> MutationResponse:
    if outcome.warning:
        logger.warning(f"{outcome.message} ({outcome.sync.error})")
    return MutationResponse(
        success=True,
        message=outcome.message,
        repository=outcome.repository,
        filename=f"{outcome.filename}.json" if include_filename else None,
        warning=outcome.warning,
    )


@router.get("/exists/{filename}", response_model=ExistsResponse)
async def file_exists(filename: str, documents: DocumentService = Depends(get_document_service)):
    """Check whether <filename>.json exists."""
    return ExistsResponse(exists=await documents.exists(filename))


@router.get("/list", response_model=FileListResponse)
async def list_files(documents: DocumentService = Depends(get_document_service)):
    """List document names (directory order, .json suffix stripped)."""
    return FileListResponse(files=await documents.list())


@router.post("/save", response_model=MutationResponse, response_model_exclude_none=True)
async def save_file(data: DocumentWriteRequest, documents: DocumentService = Depends(get_document_service)):
    """Create a new document and sync it to git. 409 if it already exists."""
    outcome = await documents.save(data.filename, data.content)
    return _mutation_response(outcome)


@router.put("/update", response_model=MutationResponse, response_model_exclude_none=True)
async def update_file(data: DocumentWriteRequest, documents: DocumentService = Depends(get_document_service)):
    """Overwrite an existing document and sync it to git. 404 if missing."""
    outcome = await documents.update(data.filename, data.content)
    return _mutation_response(outcome)


@router.delete("/delete/{filename}", response_model=MutationResponse, response_model_exclude_none=True)
async def delete_file(
    filename: str,
    request: Request,
    documents: DocumentService = Depends(get_document_service),
):
    """Delete a document and sync the removal to git. 404 if missing."""
    outcome = await documents.delete(filename)
    log_privileged_action(request, "DELETE_DOCUMENT", f"{filename}.json", success=True)
    return _mutation_response(outcome, include_filename=True)


@router.get("/content/{filename}", response_model=ContentResponse)
async def get_file_content(filename: str, documents: DocumentService = Depends(get_document_service)):
    """Return the raw document text."""
    return ContentResponse(content=await documents.read(filename))


@router.post("/upload-to-git", response_model=UploadResponse)
async def upload_to_git(
    data: DocumentWriteRequest,
    request: Request,
    documents: DocumentService = Depends(get_document_service),
):
    """
    Write a document (create or overwrite) and push it.

    Unlike save/update, any git failure - push included - is a 500: the
    response promises a browsable remote URL.
    """
    try:
        outcome = await documents.upload(data.filename, data.content)
    except GitSyncError as e:
        logger.error(f"Upload of {data.filename}.json failed in git phase: {e}")
        log_privileged_action(request, "UPLOAD_DOCUMENT", f"{data.filename}.json", success=False)
        return JSONResponse(
            status_code=500,
            content={
                "error": GitSyncError.error,
                "message": f"File '{data.filename}.json' saved locally, but git push failed",
                "details": e.result.error if e.result and e.result.error else e.message,
            },
        )

    log_privileged_action(request, "UPLOAD_DOCUMENT", f"{data.filename}.json", success=True)
    github_url, raw_url = documents.links_for(outcome)
    return UploadResponse(
        success=True,
        message=outcome.message,
        githubUrl=github_url,
        rawUrl=raw_url,
        repository=outcome.repository,
        filename=f"{outcome.filename}.json",
    )


@diff_router.post("/diff", response_model=DiffResponse)
async def diff_texts(data: DiffRequest):
    """Compare two texts line by line for the diff checker."""
    lines = diff_lines(data.original, data.changed)
    return DiffResponse(lines=[line.to_dict() for line in lines], summary=summarize(lines))
