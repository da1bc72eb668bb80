"""
Unit tests for startup git authentication.

Tests verify:
- SSH remote rewritten to https://<token>@host/path when GIT_TOKEN is set
- SSH is used when no token is present
- A failing `git remote set-url` falls back to SSH
- Public status never leaks the token
"""

from unittest.mock import AsyncMock, Mock

import pytest

from git_sync.auth import (
    AUTH_METHOD_SSH,
    AUTH_METHOD_TOKEN,
    GitAuthState,
    build_token_url,
    setup_git_auth,
)
from git_sync.runner import GitCommandError
from models.git_models import GitConfig


def make_runner():
    runner = Mock()
    runner.set_remote_url = AsyncMock()
    return runner


class TestBuildTokenUrl:
    """Tests for build_token_url"""

    def test_converts_ssh_url(self):
        result = build_token_url('git@github.com:nammayatri-ai/configDashboard.git', 'tok')
        assert result == 'https://tok@github.com/nammayatri-ai/configDashboard'

    def test_keeps_path_without_git_suffix(self):
        assert build_token_url('git@gitlab.com:group/sub/repo', 'tok') == 'https://tok@gitlab.com/group/sub/repo'

    def test_returns_none_for_https(self):
        assert build_token_url('https://github.com/org/repo.git', 'tok') is None

    def test_returns_none_for_local_path(self):
        assert build_token_url('/srv/git/configs.git', 'tok') is None


class TestSetupGitAuth:
    """Tests for setup_git_auth"""

    @pytest.mark.asyncio
    async def test_no_token_uses_ssh(self):
        runner = make_runner()

        state = await setup_git_auth(runner, GitConfig(), {})

        assert state.method == AUTH_METHOD_SSH
        assert state.token is None
        runner.set_remote_url.assert_not_called()

    @pytest.mark.asyncio
    async def test_token_rewrites_remote(self):
        runner = make_runner()

        state = await setup_git_auth(runner, GitConfig(), {'GIT_TOKEN': 'ghp_abc'})

        assert state.method == AUTH_METHOD_TOKEN
        runner.set_remote_url.assert_awaited_once_with(
            'origin', 'https://ghp_abc@github.com/nammayatri-ai/configDashboard'
        )

    @pytest.mark.asyncio
    async def test_set_url_failure_falls_back_to_ssh(self):
        runner = make_runner()
        runner.set_remote_url.side_effect = GitCommandError(['remote'], 2, "error: No such remote 'origin'")

        state = await setup_git_auth(runner, GitConfig(), {'GIT_TOKEN': 'ghp_abc'})

        assert state.method == AUTH_METHOD_SSH
        assert state.token is None

    @pytest.mark.asyncio
    async def test_https_url_leaves_remote_unchanged(self):
        runner = make_runner()
        config = GitConfig.model_validate({'repository': {'url': 'https://github.com/org/repo.git'}})

        state = await setup_git_auth(runner, config, {'GIT_TOKEN': 'ghp_abc'})

        assert state.method == AUTH_METHOD_TOKEN
        runner.set_remote_url.assert_not_called()


class TestGitAuthState:
    """Tests for GitAuthState reporting"""

    def test_public_dict_hides_token(self):
        state = GitAuthState(method=AUTH_METHOD_TOKEN, token='ghp_1234567890')

        public = state.to_public_dict()

        assert public == {'method': 'token', 'hasToken': True, 'tokenLength': 14}
        assert 'ghp_1234567890' not in str(public)

    def test_hint_depends_on_method(self):
        assert 'GIT_TOKEN' in GitAuthState(method=AUTH_METHOD_TOKEN, token='x').push_failure_hint()
        assert 'SSH' in GitAuthState().push_failure_hint()
