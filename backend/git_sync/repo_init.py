"""
Repository initialization at process start.

Every step is best effort: failures are logged and startup continues, so the
dashboard still serves local reads/writes when git or the remote is broken.
"""
import logging

from git_sync.runner import GitCommandError, GitRunner
from models.git_models import GitConfig

logger = logging.getLogger(__name__)

INITIAL_COMMIT_MESSAGE = "Initial commit from Config Dashboard"


async def initialize_repository(runner: GitRunner, config: GitConfig) -> None:
    """
    Ensure a git repository exists and, when a remote is configured, that the
    upstream tracking branch is established.
    """
    remote = config.repository.remote
    branch = config.repository.branch

    try:
        if not await runner.is_repository():
            await runner.init()
            logger.info(f"Git repository initialized at {runner.repo_dir}")
    except GitCommandError as e:
        logger.error(f"Git initialization error: {e}")
        return

    try:
        await runner.rename_branch(branch)
    except GitCommandError as e:
        logger.warning(f"Could not set default branch: {e}")

    try:
        await runner.remote_url(remote)
    except GitCommandError:
        logger.info("No remote repository configured - files will be committed locally only")
        return
    logger.info(f"Git remote '{remote}' already configured")

    try:
        if await runner.has_commits():
            logger.info("Git repository has commits")
        else:
            logger.info("Creating initial commit...")
            user = config.git.user
            await runner.set_identity(user.name or None, user.email or None)
            await runner.stage_all()
            await runner.commit(INITIAL_COMMIT_MESSAGE)
            logger.info("Initial commit created")
    except GitCommandError as e:
        logger.warning(f"Could not create initial commit: {e}")

    try:
        await runner.pull(remote, branch)
        logger.info("Pulled remote changes")
    except GitCommandError as e:
        logger.warning(f"Could not pull remote changes: {e}")

    try:
        await runner.push_upstream(remote, branch)
        logger.info("Upstream branch set and push completed")
    except GitCommandError as e:
        logger.warning(f"Could not set upstream branch: {e}")
