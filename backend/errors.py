"""
Error taxonomy for the Config Dashboard backend.

Services raise these; api/error_handlers.py maps them to HTTP responses:
- ValidationError   -> 400
- NotFoundError     -> 404
- ConflictError     -> 409
- GitSyncError      -> warning on tolerant endpoints, 500 on upload-to-git
- ConfigReloadError -> 500
"""
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from git_sync.synchronizer import SyncResult


class ConfigDashboardError(Exception):
    """Base class for all expected backend errors."""
    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ConfigDashboardError):
    """Missing/invalid request fields or malformed JSON payload."""
    status_code = 400
    error = "Validation failed"


class NotFoundError(ConfigDashboardError):
    """Document absent."""
    status_code = 404
    error = "File not found"


class ConflictError(ConfigDashboardError):
    """Document already exists on create."""
    status_code = 409
    error = "File exists"


class GitSyncError(ConfigDashboardError):
    """Stage, commit or push failed after the local mutation succeeded."""
    status_code = 500
    error = "Git operations failed"

    def __init__(self, message: str, result: Optional['SyncResult'] = None):
        super().__init__(message)
        self.result = result


class ConfigReloadError(ConfigDashboardError):
    """Git config file could not be re-read; previous config kept."""
    status_code = 500
    error = "Config reload failed"
