#!/usr/bin/env python3
"""
Config Dashboard Backend - JSON config documents versioned in git

Every document mutation is written locally first, then staged, committed and
pushed. Local durability always wins: a failed push never undoes the write.

Startup order (lifespan):
    1. Load GitConfig (defaults -> file -> environment)
    2. Choose SSH vs token authentication
    3. Initialize the repository (best effort)
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies import AppContext
from api.error_handlers import register_exception_handlers
from config.paths import CONFIGS_DIR, GIT_CONFIG_PATH, REPO_DIR, ensure_data_dirs
from config.settings import AppConfig, HealthCheckFilter, setup_logging
from documents.routes import diff_router, router as files_router
from documents.service import DocumentService
from documents.store import ConfigStore
from git_sync.auth import setup_git_auth
from git_sync.git_config import GitConfigManager
from git_sync.repo_init import initialize_repository
from git_sync.routes import config_router, git_router
from git_sync.runner import GitNotAvailableError, GitRunner
from git_sync.synchronizer import GitSynchronizer

# Configure logging
setup_logging()
logger = logging.getLogger(__name__)


async def build_context() -> AppContext:
    """Create and wire the process-wide components."""
    ensure_data_dirs()

    config_manager = GitConfigManager(GIT_CONFIG_PATH)
    config = await config_manager.load()

    try:
        runner = GitRunner(REPO_DIR, timeout=AppConfig.GIT_COMMAND_TIMEOUT)
    except GitNotAvailableError as e:
        # Documents still save locally; every sync attempt will report a warning
        logger.error(f"{e} - git synchronization will fail until git is installed")
        runner = GitRunner(REPO_DIR, timeout=AppConfig.GIT_COMMAND_TIMEOUT, verify=False)

    auth_state = await setup_git_auth(runner, config, os.environ)
    await initialize_repository(runner, config)

    synchronizer = GitSynchronizer(runner, auth_state)
    documents = DocumentService(ConfigStore(CONFIGS_DIR), synchronizer, config_manager, repo_root=REPO_DIR)
    return AppContext(
        config_manager=config_manager,
        synchronizer=synchronizer,
        documents=documents,
        runner=runner,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    # Validate configuration early to fail fast on misconfiguration
    AppConfig.validate()

    logger.info("Starting Config Dashboard backend...")
    logger.info(f"Configs directory: {CONFIGS_DIR}")

    # Reapply health check filter to uvicorn access logger (must be done after uvicorn starts)
    logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())

    app.state.context = await build_context()
    logger.info(f"Authentication method: {app.state.context.auth_state.method}")

    yield

    logger.info("Config Dashboard backend stopped")


app = FastAPI(
    title="Config Dashboard API",
    version="1.0.0",
    lifespan=lifespan
)

cors_config = AppConfig.CORS_ORIGINS
if cors_config:
    origins_list = [origin.strip() for origin in cors_config.split(',')]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    logger.info(f"CORS configured for specific origins: {origins_list}")
else:
    # The dashboard dev server runs on a different origin
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    logger.info("CORS configured to allow all origins")

register_exception_handlers(app)

# ==================== API Routes ====================

app.include_router(files_router)
app.include_router(diff_router)
app.include_router(config_router)
app.include_router(git_router)


@app.get("/api/health")
async def health_check():
    """Liveness probe - no git or filesystem access"""
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=AppConfig.HOST, port=AppConfig.PORT)
