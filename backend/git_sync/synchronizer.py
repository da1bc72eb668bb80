"""
Git synchronization for document mutations.

Every local write/delete is followed by stage -> commit -> push, modelled as a
short state machine:

    PENDING --stage--> STAGED --commit--> COMMITTED --push--> PUSHED
                                              |
                                              +--> LOCAL_ONLY (no remote / autoPush off)

Stage and commit failures abort the attempt (GitSyncError). A push failure
leaves the result in COMMITTED with the error recorded: the document is already
durable locally and callers decide, from the final state, whether that is a
warning (tolerant endpoints) or a failure (upload-to-git).
"""
import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from errors import GitSyncError
from git_sync.auth import GitAuthState
from git_sync.runner import sanitize_git_error
from models.git_models import (
    DEFAULT_BRANCH,
    DEFAULT_COMMIT_PREFIX,
    DEFAULT_COMMIT_TEMPLATE,
    DEFAULT_REMOTE,
    GitConfig,
)

logger = logging.getLogger(__name__)


class SyncAction(str, enum.Enum):
    ADD = 'Add'
    UPDATE = 'Update'
    DELETE = 'Delete'


class SyncState(str, enum.Enum):
    PENDING = 'pending'
    SKIPPED = 'skipped'        # autoCommit disabled, no git calls made
    STAGED = 'staged'
    COMMITTED = 'committed'
    LOCAL_ONLY = 'local_only'  # committed; no resolvable remote or autoPush disabled
    PUSHED = 'pushed'


class GitBackend(Protocol):
    """The git operations the synchronizer needs. GitRunner implements it."""

    async def stage(self, path: str) -> None: ...

    async def set_identity(self, name: Optional[str], email: Optional[str]) -> None: ...

    async def commit(self, message: str) -> None: ...

    async def remote_url(self, remote: str) -> str: ...

    async def push(self, remote: str, branch: str) -> str: ...


@dataclass
class SyncResult:
    """Outcome of one synchronization attempt."""
    state: SyncState = SyncState.PENDING
    commit_message: Optional[str] = None
    remote: Optional[str] = None
    branch: Optional[str] = None
    error: Optional[str] = None
    hint: Optional[str] = None

    @property
    def is_durable_remotely(self) -> bool:
        return self.state == SyncState.PUSHED

    @property
    def is_complete(self) -> bool:
        """True when nothing that was attempted failed."""
        return self.state in (SyncState.PUSHED, SyncState.LOCAL_ONLY, SyncState.SKIPPED)


def build_commit_message(
    action: str,
    filename: str,
    template: Optional[str] = None,
    prefix: Optional[str] = None,
) -> str:
    """
    Substitute {prefix}, {action} and {filename} into the commit template.

    Plain replacement rather than str.format so stray braces in a user
    template never raise.
    """
    template = template or DEFAULT_COMMIT_TEMPLATE
    prefix = prefix or DEFAULT_COMMIT_PREFIX
    return (
        template
        .replace('{prefix}', prefix)
        .replace('{action}', str(action))
        .replace('{filename}', filename)
    )


class GitSynchronizer:
    """
    Runs stage -> commit -> push for one changed path.

    A single asyncio.Lock serializes whole mutations: the git index is shared
    by every document, so two saves must never interleave their add/commit.
    Callers hold `lock` across the local write too (see DocumentService).
    """

    def __init__(self, backend: GitBackend, auth_state: Optional[GitAuthState] = None):
        self.backend = backend
        self.auth_state = auth_state or GitAuthState()
        self.lock = asyncio.Lock()

    async def sync(
        self,
        path: str,
        action: SyncAction,
        filename: str,
        config: GitConfig,
    ) -> SyncResult:
        """
        Synchronize one changed path. Caller must hold self.lock.

        Returns:
            SyncResult in PUSHED, LOCAL_ONLY, SKIPPED, or COMMITTED (push failed)

        Raises:
            GitSyncError: If staging or committing fails
        """
        result = SyncResult()

        if not config.settings.auto_commit:
            logger.info(f"Auto-commit disabled, {filename}.json changed locally only")
            result.state = SyncState.SKIPPED
            return result

        # 1. Stage
        try:
            await self.backend.stage(path)
        except Exception as e:
            logger.error(f"Git add failed for {filename}.json: {e}")
            result.error = str(e)
            raise GitSyncError(f"Failed to stage {filename}.json", result) from e
        result.state = SyncState.STAGED

        # 2. Identity (best effort)
        user = config.git.user
        try:
            await self.backend.set_identity(user.name or None, user.email or None)
        except Exception as e:
            logger.warning(f"Could not set git identity: {e}")

        # 3. Commit
        message = build_commit_message(
            action.value if isinstance(action, SyncAction) else action,
            filename,
            template=config.git.commit.template,
            prefix=config.git.commit.prefix,
        )
        result.commit_message = message
        try:
            await self.backend.commit(message)
        except Exception as e:
            logger.error(f"Git commit failed for {filename}.json: {e}")
            result.error = str(e)
            raise GitSyncError(f"Failed to commit {filename}.json", result) from e
        result.state = SyncState.COMMITTED
        logger.info(f"Committed: {message}")

        # 4. Push
        await self._push(result, config)
        return result

    async def _push(self, result: SyncResult, config: GitConfig) -> None:
        remote = config.repository.remote or DEFAULT_REMOTE
        branch = config.repository.branch or DEFAULT_BRANCH
        result.remote, result.branch = remote, branch

        if not config.settings.auto_push:
            logger.info("Auto-push disabled, changes committed locally only")
            result.state = SyncState.LOCAL_ONLY
            return

        try:
            remote_url = await self.backend.remote_url(remote)
        except Exception:
            logger.info(f"No remote '{remote}' configured, skipping push; files committed locally only")
            result.state = SyncState.LOCAL_ONLY
            return

        logger.debug(f"Pushing to {remote} ({sanitize_git_error(remote_url)}) branch {branch} using {self.auth_state.method} auth")
        try:
            await self.backend.push(remote, branch)
        except Exception as e:
            result.error = str(e)
            result.hint = self.auth_state.push_failure_hint()
            logger.error(f"Git push failed: {e}")
            logger.error(result.hint)
            return

        result.state = SyncState.PUSHED
        logger.info(f"Pushed to {remote}/{branch} using {self.auth_state.method} authentication")
