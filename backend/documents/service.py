"""
Document workflow: local mutation followed by git synchronization.

The local write always wins. Once a document is written or deleted on disk it
stays that way whatever git does afterwards:

- save/update/delete are tolerant: a git failure becomes a warning on an
  otherwise successful outcome
- upload is strict: it promises a remote URL, so anything short of a
  completed push raises GitSyncError

The synchronizer lock is held across the existence check, the local mutation
and the git steps, so two requests never interleave their commits.
"""
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from documents.store import ConfigStore, validate_document_name, validate_json_content
from errors import ConflictError, GitSyncError, NotFoundError
from git_sync.git_config import GitConfigManager
from git_sync.runner import sanitize_git_error
from git_sync.synchronizer import GitSynchronizer, SyncAction, SyncResult, SyncState

logger = logging.getLogger(__name__)

GIT_WARNING = 'Git operations failed'

_PAST_TENSE = {
    'save': 'saved',
    'update': 'updated',
    'delete': 'deleted',
    'upload': 'uploaded',
}

_SSH_URL = re.compile(r'^[A-Za-z0-9_.-]+@(?P<host>[A-Za-z0-9.-]+):(?P<path>.+)$')
_HTTP_URL = re.compile(r'^https?://(?:[^@/]+@)?(?P<host>[^/]+)/(?P<path>.+)$')


def repository_web_url(url: str) -> Optional[str]:
    """
    Browser URL for a git remote, without credentials or .git suffix.

    git@github.com:org/repo.git      -> https://github.com/org/repo
    https://tok@github.com/org/repo  -> https://github.com/org/repo

    Returns None for URLs that do not name a host and path (local paths, file://).
    """
    url = (url or '').strip()
    match = _SSH_URL.match(url) or _HTTP_URL.match(url)
    if not match:
        return None
    path = match.group('path').rstrip('/')
    if path.endswith('.git'):
        path = path[:-len('.git')]
    return f"https://{match.group('host')}/{path}"


def document_links(repo_url: str, branch: str, relative_path: str) -> Tuple[Optional[str], Optional[str]]:
    """Return (blob_url, raw_url) for a file in the repository, or (None, None)."""
    base = repository_web_url(repo_url)
    if base is None:
        return None, None
    return f"{base}/blob/{branch}/{relative_path}", f"{base}/raw/{branch}/{relative_path}"


@dataclass
class MutationOutcome:
    """What happened to one document, for the route to render."""
    operation: str
    filename: str
    repository: str
    sync: SyncResult
    path: Path
    is_update: bool = False

    @property
    def warning(self) -> Optional[str]:
        return None if self.sync.is_complete else GIT_WARNING

    @property
    def message(self) -> str:
        verb = _PAST_TENSE[self.operation]
        if self.operation == 'upload' and self.is_update:
            verb = 'updated'
        name = f"'{self.filename}.json'"
        state = self.sync.state
        if state == SyncState.PUSHED:
            target = 'changes pushed' if self.operation == 'delete' else 'pushed'
            return f"File {name} {verb} and {target} to {self.repository}"
        if state == SyncState.LOCAL_ONLY:
            return f"File {name} {verb} and committed locally"
        if state == SyncState.SKIPPED:
            return f"File {name} {verb} locally (auto-commit disabled)"
        return f"File {name} {verb} locally, but git push failed"


class DocumentService:
    """Config Store mutations coupled with git synchronization."""

    def __init__(
        self,
        store: ConfigStore,
        synchronizer: GitSynchronizer,
        config_manager: GitConfigManager,
        repo_root: Optional[Union[str, Path]] = None,
    ):
        self.store = store
        self.synchronizer = synchronizer
        self.config_manager = config_manager
        self.repo_root = Path(repo_root) if repo_root else None

    def _relative_path(self, path: Path) -> str:
        if self.repo_root is not None:
            try:
                return path.resolve().relative_to(self.repo_root.resolve()).as_posix()
            except ValueError:
                pass
        return f"configs/{path.name}"

    def _repository(self) -> str:
        return sanitize_git_error(self.config_manager.current.repository.url)

    async def _sync(self, path: Path, action: SyncAction, name: str) -> SyncResult:
        """Synchronize, converting stage/commit failures into a failed result."""
        try:
            return await self.synchronizer.sync(str(path), action, name, self.config_manager.current)
        except GitSyncError as e:
            logger.error(f"Git operations failed for {name}.json: {e}")
            return e.result or SyncResult(error=str(e))

    @staticmethod
    def _validate(name: str, content: str) -> None:
        validate_document_name(name)
        validate_json_content(content)

    async def exists(self, name: str) -> bool:
        return await self.store.exists(name)

    async def list(self):
        return await self.store.list()

    async def read(self, name: str) -> str:
        return await self.store.read(name)

    async def save(self, name: str, content: str) -> MutationOutcome:
        """
        Create a new document.

        Raises:
            ValidationError: Invalid name or content
            ConflictError: Document already exists (prior content untouched)
        """
        self._validate(name, content)
        async with self.synchronizer.lock:
            if await self.store.exists(name):
                raise ConflictError(f"File '{name}.json' already exists")
            path = await self.store.write(name, content)
            sync = await self._sync(path, SyncAction.ADD, name)
        return MutationOutcome('save', name, self._repository(), sync, path)

    async def update(self, name: str, content: str) -> MutationOutcome:
        """
        Overwrite an existing document.

        Raises:
            ValidationError: Invalid name or content
            NotFoundError: Document does not exist (nothing is created)
        """
        self._validate(name, content)
        async with self.synchronizer.lock:
            if not await self.store.exists(name):
                raise NotFoundError(f"File '{name}.json' does not exist")
            path = await self.store.write(name, content)
            sync = await self._sync(path, SyncAction.UPDATE, name)
        return MutationOutcome('update', name, self._repository(), sync, path, is_update=True)

    async def delete(self, name: str) -> MutationOutcome:
        """
        Raises:
            NotFoundError: Document does not exist
        """
        validate_document_name(name)
        async with self.synchronizer.lock:
            path = await self.store.delete(name)
            sync = await self._sync(path, SyncAction.DELETE, name)
        return MutationOutcome('delete', name, self._repository(), sync, path)

    async def upload(self, name: str, content: str) -> MutationOutcome:
        """
        Create or overwrite a document and require it to reach the remote.

        Raises:
            ValidationError: Invalid name or content
            GitSyncError: Any git phase failed, or the change was not pushed.
                The local write is kept.
        """
        self._validate(name, content)
        async with self.synchronizer.lock:
            is_update = await self.store.exists(name)
            path = await self.store.write(name, content)
            logger.info(f"Document '{name}' written to {path}, starting git operations")
            action = SyncAction.UPDATE if is_update else SyncAction.ADD
            sync = await self.synchronizer.sync(str(path), action, name, self.config_manager.current)

        outcome = MutationOutcome('upload', name, self._repository(), sync, path, is_update=is_update)
        if sync.state != SyncState.PUSHED:
            reason = sync.error or f"changes were not pushed ({sync.state.value})"
            raise GitSyncError(f"File '{name}.json' saved locally, but git push failed: {reason}", sync)
        return outcome

    def links_for(self, outcome: MutationOutcome) -> Tuple[Optional[str], Optional[str]]:
        config = self.config_manager.current
        return document_links(config.repository.url, config.repository.branch, self._relative_path(outcome.path))
