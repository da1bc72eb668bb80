"""
Git authentication setup (process start only).

With GIT_TOKEN set, the SSH remote (git@host:owner/repo.git) is rewritten to
https://<token>@host/owner/repo and applied with `git remote set-url`.
Without a token, ambient SSH key material is assumed.

The chosen method is not re-evaluated per request.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from git_sync.runner import GitCommandError, GitRunner
from models.git_models import GitConfig

logger = logging.getLogger(__name__)

AUTH_METHOD_SSH = 'ssh'
AUTH_METHOD_TOKEN = 'token'

_SSH_URL_PATTERN = re.compile(r'^[A-Za-z0-9_.-]+@(?P<host>[A-Za-z0-9.-]+):(?P<path>.+)$')


@dataclass
class GitAuthState:
    """Authentication method chosen at startup. The token lives only in memory."""
    method: str = AUTH_METHOD_SSH
    token: Optional[str] = None

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            'method': self.method,
            'hasToken': bool(self.token),
            'tokenLength': len(self.token) if self.token else 0,
        }

    def push_failure_hint(self) -> str:
        if self.method == AUTH_METHOD_TOKEN:
            return "Token authentication failed. Check if GIT_TOKEN is valid and has proper permissions."
        return "SSH authentication failed. Check if SSH keys are properly configured."


def build_token_url(url: str, token: str) -> Optional[str]:
    """
    Convert an SSH remote URL to HTTPS with an embedded token.

    Args:
        url: Remote URL in git@host:owner/repo(.git) form
        token: Access token

    Returns:
        https://<token>@host/owner/repo, or None if url is not SSH form
    """
    match = _SSH_URL_PATTERN.match(url.strip())
    if not match:
        return None
    path = match.group('path')
    if path.endswith('.git'):
        path = path[:-len('.git')]
    return f"https://{token}@{match.group('host')}/{path}"


async def setup_git_auth(
    runner: GitRunner,
    config: GitConfig,
    environ: Mapping[str, str],
) -> GitAuthState:
    """
    Choose SSH vs token authentication and rewrite the remote if needed.

    Never raises: failure to apply the token URL falls back to SSH.
    """
    token = environ.get('GIT_TOKEN')
    if not token:
        logger.info("No Git token found, using SSH authentication for Git operations")
        return GitAuthState(method=AUTH_METHOD_SSH)

    remote = config.repository.remote
    token_url = build_token_url(config.repository.url, token)
    if token_url is None:
        # Already HTTPS (or local); credentials must come from the URL or a helper
        logger.info("Git token present but repository URL is not SSH form; remote left unchanged")
        return GitAuthState(method=AUTH_METHOD_TOKEN, token=token)

    try:
        await runner.set_remote_url(remote, token_url)
    except GitCommandError as e:
        logger.error(f"Failed to setup Git token authentication: {e}")
        logger.warning("Falling back to SSH authentication")
        return GitAuthState(method=AUTH_METHOD_SSH)

    logger.info("Git token authentication configured (HTTPS with token)")
    return GitAuthState(method=AUTH_METHOD_TOKEN, token=token)
