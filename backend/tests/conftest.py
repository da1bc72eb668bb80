"""
Shared pytest fixtures for Config Dashboard tests.

Fixtures provided:
- configs_dir: Temporary configs directory inside a temporary working tree
- fake_git: Recording git backend with switchable failures
- config_manager: GitConfigManager backed by a temporary file, no env overrides
- document_service: DocumentService wired to fake_git
- app / client: FastAPI app with all routers, no lifespan (no real git)

Real git is never invoked: routes and services see FakeGitBackend through the
same AppContext the lifespan builds in production.
"""

import os
import sys

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from api.dependencies import AppContext
from api.error_handlers import register_exception_handlers
from documents.routes import diff_router, router as files_router
from documents.service import DocumentService
from documents.store import ConfigStore
from git_sync.auth import GitAuthState
from git_sync.git_config import GitConfigManager
from git_sync.routes import config_router, git_router
from git_sync.runner import GitCommandError
from git_sync.synchronizer import GitSynchronizer
from models.git_models import GitConfig
from security.audit import security_audit


class FakeGitBackend:
    """
    In-memory stand-in for GitRunner.

    Every call is appended to `calls` as a tuple. Set `fail_<op>` to True to
    make that operation raise GitCommandError; set `remote` to None to behave
    like a repository with no remote configured.
    """

    def __init__(self):
        self.calls = []
        self.remote = 'git@github.com:org/configs.git'
        self.fail_stage = False
        self.fail_identity = False
        self.fail_commit = False
        self.fail_push = False

    def _maybe_fail(self, flag, args):
        if flag:
            raise GitCommandError(list(args), 1, f"fatal: {args[0]} failed")

    async def stage(self, path):
        self.calls.append(('stage', path))
        self._maybe_fail(self.fail_stage, ['add', path])

    async def set_identity(self, name, email):
        self.calls.append(('set_identity', name, email))
        self._maybe_fail(self.fail_identity, ['config'])

    async def commit(self, message):
        self.calls.append(('commit', message))
        self._maybe_fail(self.fail_commit, ['commit'])

    async def remote_url(self, remote):
        self.calls.append(('remote_url', remote))
        if self.remote is None:
            raise GitCommandError(['remote', 'get-url', remote], 2, f"error: No such remote '{remote}'")
        return self.remote

    async def push(self, remote, branch):
        self.calls.append(('push', remote, branch))
        self._maybe_fail(self.fail_push, ['push'])
        return ''

    def ops(self):
        """Operation names in call order."""
        return [call[0] for call in self.calls]


@pytest.fixture(autouse=True)
def quiet_security_audit():
    """Keep the audit logger off the filesystem during tests."""
    previous = security_audit._configured
    security_audit._configured = True
    yield
    security_audit._configured = previous


@pytest.fixture
def repo_dir(tmp_path):
    path = tmp_path / "repo"
    path.mkdir()
    return path


@pytest.fixture
def configs_dir(repo_dir):
    path = repo_dir / "configs"
    path.mkdir()
    return path


@pytest.fixture
def fake_git():
    return FakeGitBackend()


@pytest.fixture
def config_manager(tmp_path):
    """Manager holding a config that points at a GitHub SSH remote."""
    manager = GitConfigManager(tmp_path / "git-config.json", environ={})
    manager.replace(GitConfig.model_validate({
        'repository': {'url': 'git@github.com:org/configs.git', 'branch': 'main', 'remote': 'origin'},
        'git': {'user': {'name': 'Dashboard Bot', 'email': 'bot@example.com'}},
    }))
    return manager


@pytest.fixture
def synchronizer(fake_git):
    return GitSynchronizer(fake_git, GitAuthState(method='ssh'))


@pytest.fixture
def document_service(configs_dir, repo_dir, synchronizer, config_manager):
    return DocumentService(ConfigStore(configs_dir), synchronizer, config_manager, repo_root=repo_dir)


@pytest.fixture
def app_context(document_service, synchronizer, config_manager):
    return AppContext(
        config_manager=config_manager,
        synchronizer=synchronizer,
        documents=document_service,
        runner=None,
    )


@pytest.fixture
def app(app_context):
    """App with the production routers and handlers, context injected directly."""
    test_app = FastAPI()
    register_exception_handlers(test_app)
    test_app.include_router(files_router)
    test_app.include_router(diff_router)
    test_app.include_router(config_router)
    test_app.include_router(git_router)
    test_app.state.context = app_context
    return test_app


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)
