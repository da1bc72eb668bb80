"""
Configuration Management for the Config Dashboard backend

Environment-driven settings (AppConfig) and process-wide logging setup.
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_FILE_NAME = 'config-dashboard.log'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Endpoints the dashboard polls; successful hits are left out of the access log
QUIET_PATHS = ('/api/health', '/api/git/status')


class HealthCheckFilter(logging.Filter):
    """Drop successful polling requests from the uvicorn access log"""

    def filter(self, record: logging.LogRecord) -> bool:
        # uvicorn access args: (client_addr, method, full_path, http_version, status_code)
        args = record.args
        if not isinstance(args, tuple) or len(args) < 5 or args[-1] != 200:
            return True
        path = str(args[2]).split('?', 1)[0]
        return path not in QUIET_PATHS


def _rotating_file_handler(log_dir: str) -> RotatingFileHandler:
    os.makedirs(log_dir, mode=0o700, exist_ok=True)
    return RotatingFileHandler(
        os.path.join(log_dir, LOG_FILE_NAME),
        maxBytes=10*1024*1024,  # 10MB
        backupCount=14,
        encoding='utf-8'
    )


def setup_logging(log_dir: Optional[str] = None):
    """
    Route all loggers to the console and a rotating file under log_dir.

    Existing root handlers are closed first, so calling this twice (uvicorn
    reload) does not duplicate output. A read-only log directory only
    disables the file handler.
    """
    from .paths import LOGS_DIR

    log_dir = log_dir or LOGS_DIR
    level = getattr(logging, AppConfig.LOG_LEVEL.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    handlers = [logging.StreamHandler()]
    file_error = None
    try:
        handlers.append(_rotating_file_handler(log_dir))
    except OSError as e:
        file_error = e

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    if file_error is not None:
        root_logger.warning(f"File logging disabled, {log_dir} is not writable: {file_error}")

    logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())


class AppConfig:
    """Process settings read once from the environment"""

    HOST = os.getenv('CONFIG_DASHBOARD_HOST', '0.0.0.0')
    PORT = int(os.getenv('CONFIG_DASHBOARD_PORT', 8090))

    # Comma-separated origins; unset allows any origin (dashboard dev server)
    CORS_ORIGINS = os.getenv('CONFIG_DASHBOARD_CORS_ORIGINS') or None

    LOG_LEVEL = os.getenv('CONFIG_DASHBOARD_LOG_LEVEL', 'INFO')

    # Seconds before a single git invocation is abandoned
    GIT_COMMAND_TIMEOUT = int(os.getenv('GIT_COMMAND_TIMEOUT', 300))

    # Maximum document size in characters (the dashboard sends up to 50MB bodies)
    MAX_CONTENT_LENGTH = int(os.getenv('CONFIG_DASHBOARD_MAX_CONTENT_LENGTH', 50 * 1024 * 1024))

    @classmethod
    def validate(cls):
        """Fail fast on settings that would only break later"""
        if not 1 <= cls.PORT <= 65535:
            raise ValueError(f"Invalid port: {cls.PORT}")

        if cls.GIT_COMMAND_TIMEOUT < 1:
            raise ValueError(f"Git command timeout must be at least 1 second: {cls.GIT_COMMAND_TIMEOUT}")

        return True
