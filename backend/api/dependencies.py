"""
Request-scoped access to the process-wide components.

Everything mutable (GitConfig, auth state, the synchronizer lock) hangs off a
single AppContext stored on app.state by the lifespan handler. Routes receive
it through FastAPI dependencies instead of module globals, so tests can build
an app around a context wired to a fake git backend.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Request

from documents.service import DocumentService
from git_sync.auth import GitAuthState
from git_sync.git_config import GitConfigManager
from git_sync.runner import GitRunner
from git_sync.synchronizer import GitSynchronizer


@dataclass
class AppContext:
    config_manager: GitConfigManager
    synchronizer: GitSynchronizer
    documents: DocumentService
    runner: Optional[GitRunner] = None

    @property
    def auth_state(self) -> GitAuthState:
        return self.synchronizer.auth_state


def get_context(request: Request) -> AppContext:
    """Get the app context, raising 503 if startup has not completed."""
    context = getattr(request.app.state, 'context', None)
    if context is None:
        raise HTTPException(status_code=503, detail="Service is starting")
    return context


def get_document_service(request: Request) -> DocumentService:
    return get_context(request).documents


def get_config_manager(request: Request) -> GitConfigManager:
    return get_context(request).config_manager
