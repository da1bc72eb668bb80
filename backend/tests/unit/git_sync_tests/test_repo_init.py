"""
Unit tests for startup repository initialization.

Every step is best effort; these tests pin which steps run for a fresh
directory, a repository without a remote, and a repository with failures.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from git_sync.repo_init import INITIAL_COMMIT_MESSAGE, initialize_repository
from git_sync.runner import GitCommandError
from models.git_models import GitConfig


def make_runner(is_repo=True, has_remote=True, has_commits=True):
    runner = Mock()
    runner.repo_dir = '/app/data'
    runner.is_repository = AsyncMock(return_value=is_repo)
    runner.init = AsyncMock()
    runner.rename_branch = AsyncMock()
    if has_remote:
        runner.remote_url = AsyncMock(return_value='git@github.com:org/configs.git')
    else:
        runner.remote_url = AsyncMock(side_effect=GitCommandError(['remote'], 2, 'No such remote'))
    runner.has_commits = AsyncMock(return_value=has_commits)
    runner.set_identity = AsyncMock()
    runner.stage_all = AsyncMock()
    runner.commit = AsyncMock()
    runner.pull = AsyncMock()
    runner.push_upstream = AsyncMock()
    return runner


class TestInitializeRepository:

    @pytest.mark.asyncio
    async def test_initializes_fresh_directory(self):
        runner = make_runner(is_repo=False, has_remote=False)

        await initialize_repository(runner, GitConfig())

        runner.init.assert_awaited_once()
        runner.rename_branch.assert_awaited_once_with('main')

    @pytest.mark.asyncio
    async def test_no_remote_stops_before_network(self):
        runner = make_runner(has_remote=False)

        await initialize_repository(runner, GitConfig())

        runner.init.assert_not_called()
        runner.pull.assert_not_called()
        runner.push_upstream.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_initial_commit_when_empty(self):
        runner = make_runner(has_commits=False)

        await initialize_repository(runner, GitConfig())

        runner.stage_all.assert_awaited_once()
        runner.commit.assert_awaited_once_with(INITIAL_COMMIT_MESSAGE)
        runner.pull.assert_awaited_once_with('origin', 'main')
        runner.push_upstream.assert_awaited_once_with('origin', 'main')

    @pytest.mark.asyncio
    async def test_existing_history_skips_initial_commit(self):
        runner = make_runner()

        await initialize_repository(runner, GitConfig())

        runner.commit.assert_not_called()
        runner.push_upstream.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failures_do_not_raise(self):
        runner = make_runner(has_commits=False)
        runner.rename_branch.side_effect = GitCommandError(['branch'], 128, 'fatal')
        runner.commit.side_effect = GitCommandError(['commit'], 1, 'nothing to commit')
        runner.pull.side_effect = GitCommandError(['pull'], 1, 'Could not read from remote repository')
        runner.push_upstream.side_effect = GitCommandError(['push'], 128, 'Permission denied')

        await initialize_repository(runner, GitConfig())

        runner.push_upstream.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_init_failure_stops(self):
        runner = make_runner(is_repo=False)
        runner.init.side_effect = GitCommandError(['init'], 1, 'permission denied')

        await initialize_repository(runner, GitConfig())

        runner.rename_branch.assert_not_called()
