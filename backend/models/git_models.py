"""
Git Models for the Config Dashboard API

Pydantic models for the persisted GitConfig and the git status endpoint.
The on-disk JSON keeps the dashboard's camelCase keys (autoCommit, autoPush,
validateJson) via aliases, so files written by older dashboards still load.

Security:
    - URL validation prevents argument injection into git commands
    - Branch/remote validation follows git ref-name rules
    - git.token is accepted and persisted but never returned by the API
"""

import re
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_REPOSITORY_URL = 'git@github.com:nammayatri-ai/configDashboard.git'
DEFAULT_BRANCH = 'main'
DEFAULT_REMOTE = 'origin'
DEFAULT_USER_NAME = 'Config Dashboard'
DEFAULT_USER_EMAIL = 'config-dashboard@localhost'
DEFAULT_COMMIT_PREFIX = '[Config Dashboard]'
DEFAULT_COMMIT_TEMPLATE = '{prefix} {action} {filename}.json'


# =============================================================================
# Shared Validation Helpers
# =============================================================================

_VALID_URL_PREFIXES = ('https://', 'http://', 'git@', 'ssh://', 'file://', '/')
_DANGEROUS_URL_CHARS = (';', '|', '&', '$', '`', '\n', '\r')


def _validate_url(v: Optional[str]) -> str:
    """Validate git repository URL. Empty is allowed here; save() enforces presence."""
    if v is not None and not isinstance(v, str):
        raise ValueError('Repository URL must be a string')
    if v is None or not v.strip():
        return ''
    v = v.strip()
    if v.startswith('-'):
        raise ValueError('Repository URL cannot start with -')
    if not any(v.startswith(prefix) for prefix in _VALID_URL_PREFIXES):
        raise ValueError('Repository URL must start with https://, http://, git@, ssh://, file:// or /')
    if ' ' in v:
        raise ValueError('Repository URL cannot contain spaces')
    if any(c in v for c in _DANGEROUS_URL_CHARS):
        raise ValueError('Repository URL contains invalid characters')
    return v


def _validate_ref_name(v: Optional[str], default: str, label: str) -> str:
    """Validate a git branch or remote name, falling back to the default when blank."""
    if v is not None and not isinstance(v, str):
        raise ValueError(f'{label} must be a string')
    if v is None or not v.strip():
        return default
    v = v.strip()
    if v.startswith('-') or v.startswith('.'):
        raise ValueError(f'{label} cannot start with - or .')
    if '..' in v:
        raise ValueError(f'{label} cannot contain ..')
    if v.endswith('.lock'):
        raise ValueError(f'{label} cannot end with .lock')
    if not re.match(r'^[a-zA-Z0-9/_.-]+$', v):
        raise ValueError(f'{label} contains invalid characters')
    return v


# =============================================================================
# GitConfig Models
# =============================================================================


class RepositorySettings(BaseModel):
    """Target repository: URL, branch and remote name."""
    url: str = DEFAULT_REPOSITORY_URL
    branch: str = DEFAULT_BRANCH
    remote: str = DEFAULT_REMOTE

    @field_validator('url', mode='before')
    @classmethod
    def validate_url(cls, v: Optional[str]) -> str:
        return _validate_url(v)

    @field_validator('branch', mode='before')
    @classmethod
    def validate_branch(cls, v: Optional[str]) -> str:
        return _validate_ref_name(v, DEFAULT_BRANCH, 'Branch name')

    @field_validator('remote', mode='before')
    @classmethod
    def validate_remote(cls, v: Optional[str]) -> str:
        return _validate_ref_name(v, DEFAULT_REMOTE, 'Remote name')


class GitUser(BaseModel):
    """Committer identity."""
    name: str = Field(DEFAULT_USER_NAME, max_length=200)
    email: str = Field(DEFAULT_USER_EMAIL, max_length=200)

    @field_validator('name', 'email', mode='before')
    @classmethod
    def strip_value(cls, v: Optional[str]) -> str:
        if v is not None and not isinstance(v, str):
            raise ValueError('must be a string')
        return (v or '').strip()


class CommitSettings(BaseModel):
    """Commit message template with {prefix}, {action} and {filename} placeholders."""
    prefix: str = DEFAULT_COMMIT_PREFIX
    template: str = DEFAULT_COMMIT_TEMPLATE


class GitSection(BaseModel):
    user: GitUser = Field(default_factory=GitUser)
    commit: CommitSettings = Field(default_factory=CommitSettings)
    token: Optional[str] = Field(None, max_length=500)


class SyncSettings(BaseModel):
    """Workflow switches. Unknown keys (createBackup, maxFileSize, ...) are kept verbatim."""
    model_config = ConfigDict(populate_by_name=True, extra='allow')

    auto_commit: bool = Field(True, alias='autoCommit')
    auto_push: bool = Field(True, alias='autoPush')
    validate_json: bool = Field(True, alias='validateJson')


class GitConfig(BaseModel):
    """Process-wide repository, identity and commit configuration."""
    repository: RepositorySettings = Field(default_factory=RepositorySettings)
    git: GitSection = Field(default_factory=GitSection)
    settings: SyncSettings = Field(default_factory=SyncSettings)

    def to_file_dict(self) -> Dict[str, Any]:
        """Serialize with the on-disk camelCase keys."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_public_dict(self) -> Dict[str, Any]:
        """Serialize for API responses - never includes git.token."""
        data = self.to_file_dict()
        data['git'].pop('token', None)
        return data


# =============================================================================
# Git Status Models
# =============================================================================


class GitAuthenticationStatus(BaseModel):
    method: str
    hasToken: bool
    tokenLength: int


class GitRepositoryStatus(BaseModel):
    url: str
    remoteUrl: str
    branch: str
    remote: str


class GitStatusResponse(BaseModel):
    """Response for GET /api/git/status"""
    status: str = 'OK'
    authentication: GitAuthenticationStatus
    repository: GitRepositoryStatus
    git: Dict[str, Any]


class ConfigSaveResponse(BaseModel):
    """Response for POST /api/config/save"""
    success: bool
    message: str
