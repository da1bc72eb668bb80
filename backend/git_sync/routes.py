"""
Git configuration and status routes for the Config Dashboard

Provides:
- POST /api/config/save: replace the GitConfig (persist + reload)
- GET  /api/config: current GitConfig without the token
- GET  /api/git/status: auth method, remote URL and identity

Security:
    - git.token is never returned
    - Remote URLs are sanitized before being returned
    - Config saves are written to the security audit log
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from api.dependencies import AppContext, get_config_manager, get_context
from errors import ValidationError
from git_sync.git_config import GitConfigManager
from git_sync.runner import GitCommandError, sanitize_git_error
from models.git_models import (
    ConfigSaveResponse,
    GitAuthenticationStatus,
    GitRepositoryStatus,
    GitStatusResponse,
)
from security.audit import log_privileged_action

logger = logging.getLogger(__name__)

config_router = APIRouter(prefix="/api/config", tags=["config"])
git_router = APIRouter(prefix="/api/git", tags=["git"])


@config_router.post("/save", response_model=ConfigSaveResponse)
async def save_git_config(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    config_manager: GitConfigManager = Depends(get_config_manager),
):
    """
    Replace the git configuration.

    Requires repository.url, git.user.name and git.user.email. A git.token
    in the body is stored in the file but does not change the authentication
    method chosen at startup.
    """
    try:
        config = await config_manager.save(payload)
    except ValidationError:
        log_privileged_action(request, "SAVE_GIT_CONFIG", "git-config.json", success=False)
        raise

    log_privileged_action(request, "SAVE_GIT_CONFIG", sanitize_git_error(config.repository.url))
    if config.git.token:
        logger.info("Saved git config includes a token; restart to switch authentication to it")
    return ConfigSaveResponse(success=True, message="Git configuration saved successfully")


@config_router.get("")
async def get_git_config(config_manager: GitConfigManager = Depends(get_config_manager)):
    """Current git configuration, without git.token."""
    return config_manager.current.to_public_dict()


@git_router.get("/status", response_model=GitStatusResponse)
async def git_status(context: AppContext = Depends(get_context)):
    """Report authentication method, remote URL and committer identity."""
    config = context.config_manager.current
    remote = config.repository.remote

    remote_url = "No remote configured"
    if context.runner is not None:
        try:
            remote_url = sanitize_git_error(await context.runner.remote_url(remote))
        except GitCommandError:
            pass
        except OSError as e:
            logger.error(f"Failed to get Git status: {e}")
            raise HTTPException(status_code=500, detail="Failed to get Git status")

    return GitStatusResponse(
        status="OK",
        authentication=GitAuthenticationStatus(**context.auth_state.to_public_dict()),
        repository=GitRepositoryStatus(
            url=sanitize_git_error(config.repository.url),
            remoteUrl=remote_url,
            branch=config.repository.branch,
            remote=remote,
        ),
        git={"user": config.git.user.model_dump()},
    )
