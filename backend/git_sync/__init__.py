"""
Git synchronization module for the Config Dashboard.

This module provides:
- GitRunner: native git CLI wrapper (process runner)
- GitConfigManager: repository/identity/commit config with file + env layering
- GitSynchronizer: stage -> commit -> push state machine for document mutations
- setup_git_auth(): SSH vs token remote selection at startup
- initialize_repository(): best-effort repository bootstrap at startup
"""
from git_sync.runner import (
    GitRunner,
    GitNotAvailableError,
    GitCommandError,
    sanitize_git_error,
)
from git_sync.git_config import GitConfigManager
from git_sync.auth import GitAuthState, build_token_url, setup_git_auth
from git_sync.synchronizer import (
    GitSynchronizer,
    SyncAction,
    SyncResult,
    SyncState,
    build_commit_message,
)
from git_sync.repo_init import initialize_repository

__all__ = [
    # runner exports
    'GitRunner',
    'GitNotAvailableError',
    'GitCommandError',
    'sanitize_git_error',
    # config exports
    'GitConfigManager',
    # auth exports
    'GitAuthState',
    'build_token_url',
    'setup_git_auth',
    # synchronizer exports
    'GitSynchronizer',
    'SyncAction',
    'SyncResult',
    'SyncState',
    'build_commit_message',
    'initialize_repository',
]
