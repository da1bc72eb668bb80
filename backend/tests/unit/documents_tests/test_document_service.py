"""
Unit tests for DocumentService.

Tests verify:
- Create-only save (409) and update-only update (404)
- The local mutation survives any git failure
- Tolerant endpoints turn git failures into a warning
- Upload is strict: anything short of a push raises GitSyncError
- Browser links for uploaded documents
- Concurrent mutations are serialized by the synchronizer lock
"""

import asyncio

import pytest

from documents.service import GIT_WARNING, document_links, repository_web_url
from errors import ConflictError, GitSyncError, NotFoundError, ValidationError
from git_sync.synchronizer import SyncState


class TestSave:

    @pytest.mark.asyncio
    async def test_save_writes_and_pushes(self, document_service, configs_dir, fake_git):
        outcome = await document_service.save("routes", '{"a": 1}')

        assert (configs_dir / "routes.json").read_text() == '{"a": 1}'
        assert outcome.sync.state == SyncState.PUSHED
        assert outcome.warning is None
        assert outcome.message == "File 'routes.json' saved and pushed to git@github.com:org/configs.git"
        assert ('commit', '[Config Dashboard] Add routes.json') in fake_git.calls

    @pytest.mark.asyncio
    async def test_save_existing_conflicts_and_keeps_content(self, document_service, configs_dir, fake_git):
        (configs_dir / "routes.json").write_text('{"old": true}')

        with pytest.raises(ConflictError):
            await document_service.save("routes", '{"new": true}')

        assert (configs_dir / "routes.json").read_text() == '{"old": true}'
        assert fake_git.calls == []

    @pytest.mark.asyncio
    async def test_save_invalid_json_writes_nothing(self, document_service, configs_dir):
        with pytest.raises(ValidationError):
            await document_service.save("routes", '{"broken"')

        assert not (configs_dir / "routes.json").exists()

    @pytest.mark.asyncio
    async def test_save_push_failure_is_warning(self, document_service, configs_dir, fake_git):
        fake_git.fail_push = True

        outcome = await document_service.save("routes", '{}')

        assert (configs_dir / "routes.json").exists()
        assert outcome.warning == GIT_WARNING
        assert "git push failed" in outcome.message

    @pytest.mark.asyncio
    async def test_save_stage_failure_is_warning(self, document_service, configs_dir, fake_git):
        fake_git.fail_stage = True

        outcome = await document_service.save("routes", '{}')

        assert (configs_dir / "routes.json").exists()
        assert outcome.warning == GIT_WARNING

    @pytest.mark.asyncio
    async def test_save_without_remote_commits_locally(self, document_service, fake_git):
        fake_git.remote = None

        outcome = await document_service.save("routes", '{}')

        assert outcome.sync.state == SyncState.LOCAL_ONLY
        assert outcome.warning is None
        assert outcome.message == "File 'routes.json' saved and committed locally"


class TestUpdate:

    @pytest.mark.asyncio
    async def test_update_missing_is_not_found(self, document_service, configs_dir, fake_git):
        with pytest.raises(NotFoundError):
            await document_service.update("routes", '{}')

        assert not (configs_dir / "routes.json").exists()
        assert fake_git.calls == []

    @pytest.mark.asyncio
    async def test_update_overwrites(self, document_service, configs_dir, fake_git):
        (configs_dir / "routes.json").write_text('{"v": 1}')

        outcome = await document_service.update("routes", '{"v": 2}')

        assert (configs_dir / "routes.json").read_text() == '{"v": 2}'
        assert outcome.message.startswith("File 'routes.json' updated and pushed")
        assert ('commit', '[Config Dashboard] Update routes.json') in fake_git.calls


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_missing_is_not_found(self, document_service):
        with pytest.raises(NotFoundError):
            await document_service.delete("absent")

    @pytest.mark.asyncio
    async def test_delete_stays_deleted_when_push_fails(self, document_service, configs_dir, fake_git):
        (configs_dir / "routes.json").write_text('{}')
        fake_git.fail_push = True

        outcome = await document_service.delete("routes")

        assert not (configs_dir / "routes.json").exists()
        assert outcome.warning == GIT_WARNING
        assert ('commit', '[Config Dashboard] Delete routes.json') in fake_git.calls

    @pytest.mark.asyncio
    async def test_delete_message(self, document_service, configs_dir):
        (configs_dir / "routes.json").write_text('{}')

        outcome = await document_service.delete("routes")

        assert outcome.message == "File 'routes.json' deleted and changes pushed to git@github.com:org/configs.git"


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_creates_and_reports_links(self, document_service, configs_dir):
        outcome = await document_service.upload("routes", '{}')

        assert outcome.is_update is False
        assert (configs_dir / "routes.json").exists()
        blob, raw = document_service.links_for(outcome)
        assert blob == "https://github.com/org/configs/blob/main/configs/routes.json"
        assert raw == "https://github.com/org/configs/raw/main/configs/routes.json"

    @pytest.mark.asyncio
    async def test_upload_overwrite_uses_update_action(self, document_service, configs_dir, fake_git):
        (configs_dir / "routes.json").write_text('{"v": 1}')

        outcome = await document_service.upload("routes", '{"v": 2}')

        assert outcome.is_update is True
        assert outcome.message.startswith("File 'routes.json' updated and pushed")
        assert ('commit', '[Config Dashboard] Update routes.json') in fake_git.calls

    @pytest.mark.asyncio
    async def test_upload_push_failure_raises_but_keeps_file(self, document_service, configs_dir, fake_git):
        fake_git.fail_push = True

        with pytest.raises(GitSyncError) as exc_info:
            await document_service.upload("routes", '{}')

        assert (configs_dir / "routes.json").exists()
        assert exc_info.value.result.state == SyncState.COMMITTED

    @pytest.mark.asyncio
    async def test_upload_without_remote_raises(self, document_service, fake_git):
        fake_git.remote = None

        with pytest.raises(GitSyncError):
            await document_service.upload("routes", '{}')

    @pytest.mark.asyncio
    async def test_upload_commit_failure_raises(self, document_service, configs_dir, fake_git):
        fake_git.fail_commit = True

        with pytest.raises(GitSyncError):
            await document_service.upload("routes", '{}')

        assert (configs_dir / "routes.json").exists()


class TestSingleWriter:
    """One lock covers check, write and every git step of a mutation"""

    @pytest.mark.asyncio
    async def test_concurrent_saves_do_not_interleave(self, document_service, configs_dir, fake_git):
        stage = fake_git.stage
        first_staged = asyncio.Event()
        release = asyncio.Event()

        async def gated_stage(path):
            await stage(path)
            if not first_staged.is_set():
                first_staged.set()
                await release.wait()

        fake_git.stage = gated_stage

        first = asyncio.create_task(document_service.save("a", '{}'))
        await first_staged.wait()
        second = asyncio.create_task(document_service.save("b", '{}'))
        for _ in range(10):
            await asyncio.sleep(0)

        # "b" is blocked before its existence check and write
        assert fake_git.ops() == ["stage"]
        assert not (configs_dir / "b.json").exists()

        release.set()
        await asyncio.gather(first, second)

        one_mutation = ["stage", "set_identity", "commit", "remote_url", "push"]
        assert fake_git.ops() == one_mutation + one_mutation
        assert fake_git.calls[0] == ("stage", str(configs_dir / "a.json"))
        assert fake_git.calls[5] == ("stage", str(configs_dir / "b.json"))

    @pytest.mark.asyncio
    async def test_concurrent_saves_of_same_name_conflict(self, document_service, configs_dir, fake_git):
        results = await asyncio.gather(
            document_service.save("routes", '{"v": 1}'),
            document_service.save("routes", '{"v": 2}'),
            return_exceptions=True,
        )

        conflicts = [r for r in results if isinstance(r, ConflictError)]
        saved = [r for r in results if not isinstance(r, Exception)]
        assert len(conflicts) == 1
        assert len(saved) == 1
        assert fake_git.ops().count("commit") == 1
        assert (configs_dir / "routes.json").read_text() == '{"v": 1}'


class TestRepositoryLinks:

    @pytest.mark.parametrize("url,expected", [
        ("git@github.com:org/repo.git", "https://github.com/org/repo"),
        ("https://github.com/org/repo.git", "https://github.com/org/repo"),
        ("https://tok@github.com/org/repo", "https://github.com/org/repo"),
        ("/srv/git/repo.git", None),
        ("", None),
    ])
    def test_repository_web_url(self, url, expected):
        assert repository_web_url(url) == expected

    def test_document_links_without_host(self):
        assert document_links("/srv/git/repo.git", "main", "configs/a.json") == (None, None)
