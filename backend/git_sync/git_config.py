"""
Git configuration manager.

Layering, lowest to highest priority:
    1. Built-in defaults (models.git_models)
    2. JSON file on disk (config/git-config.json)
    3. Environment variables, applied by load() only

The manager is the single in-memory owner of the GitConfig. It is created
once per process, stored on app.state and handed to request handlers via
api.dependencies; replacing the config is a plain reference swap.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from errors import ConfigReloadError, ValidationError
from models.git_models import GitConfig
from utils.file_io import atomic_write_text, read_text

logger = logging.getLogger(__name__)

# Environment variable -> path inside the GitConfig file layout
ENV_OVERRIDES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('GIT_REPOSITORY_URL', ('repository', 'url')),
    ('GIT_BRANCH', ('repository', 'branch')),
    ('GIT_REMOTE', ('repository', 'remote')),
    ('GIT_USER_NAME', ('git', 'user', 'name')),
    ('GIT_USER_EMAIL', ('git', 'user', 'email')),
)

REQUIRED_FIELDS: Tuple[Tuple[str, ...], ...] = (
    ('repository', 'url'),
    ('git', 'user', 'name'),
    ('git', 'user', 'email'),
)


def _get_path(data: Any, path: Tuple[str, ...]) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _set_path(data: Dict[str, Any], path: Tuple[str, ...], value: Any) -> None:
    for key in path[:-1]:
        data = data.setdefault(key, {})
    data[path[-1]] = value


def _format_pydantic_error(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(x) for x in error['loc'])
        parts.append(f"{field}: {error['msg']}")
    return "; ".join(parts)


class GitConfigManager:
    """Owns the process-wide GitConfig and its JSON file."""

    def __init__(self, config_path: Union[str, Path], environ: Optional[Mapping[str, str]] = None):
        self.config_path = Path(config_path)
        self._environ = os.environ if environ is None else environ
        self._config = GitConfig()

    @property
    def current(self) -> GitConfig:
        return self._config

    def replace(self, config: GitConfig) -> None:
        """Atomically swap the in-memory config."""
        self._config = config

    async def _read_file(self) -> GitConfig:
        data = json.loads(await read_text(self.config_path))
        return GitConfig.model_validate(data)

    def _apply_env_overrides(self, config: GitConfig) -> GitConfig:
        """Apply each non-empty override on its own; an invalid one is skipped."""
        applied = []
        for env_name, path in ENV_OVERRIDES:
            value = self._environ.get(env_name)
            if not value:
                continue

            data = config.to_file_dict()
            _set_path(data, path, value)
            try:
                config = GitConfig.model_validate(data)
            except PydanticValidationError as e:
                logger.warning(f"Ignoring invalid {env_name}: {_format_pydantic_error(e)}")
                continue
            applied.append(env_name)

        if applied:
            logger.info(f"Git configuration overridden from environment: {', '.join(applied)}")
        return config

    async def load(self) -> GitConfig:
        """
        Load config from file, falling back to defaults, then apply env overrides.

        Never raises: a missing or corrupt file only produces a warning.
        """
        try:
            config = await self._read_file()
            logger.info(f"Git configuration loaded from file: {config.repository.url}")
        except FileNotFoundError:
            logger.warning(f"Git config file not found at {self.config_path}, using defaults")
            config = GitConfig()
        except (OSError, ValueError) as e:
            # json.JSONDecodeError and pydantic ValidationError are ValueErrors
            logger.warning(f"Could not load git config from {self.config_path}, using defaults: {e}")
            config = GitConfig()

        config = self._apply_env_overrides(config)
        self.replace(config)
        logger.info(f"Target repository: {config.repository.url}")
        return config

    async def reload(self) -> GitConfig:
        """
        Re-read the config file and replace the in-memory copy.

        Unlike load(), failure keeps the previous value and raises.

        Raises:
            ConfigReloadError: If the file cannot be read or parsed
        """
        try:
            config = await self._read_file()
        except (OSError, ValueError) as e:
            logger.error(f"Failed to reload git config: {e}")
            raise ConfigReloadError("Failed to reload git configuration") from e

        self.replace(config)
        logger.info(f"Git configuration reloaded: {config.repository.url}")
        return config

    async def save(self, new_config: Union[Dict[str, Any], GitConfig]) -> GitConfig:
        """
        Validate, persist and activate a complete new config.

        Raises:
            ValidationError: If repository.url, git.user.name or git.user.email is
                missing/empty, or any field is invalid. The file is left untouched.
            ConfigReloadError: If the written file cannot be re-read
        """
        raw = new_config.to_file_dict() if isinstance(new_config, GitConfig) else new_config
        if not isinstance(raw, dict):
            raise ValidationError("Git configuration must be a JSON object")

        missing = [
            ".".join(path) for path in REQUIRED_FIELDS
            if not isinstance(_get_path(raw, path), str) or not _get_path(raw, path).strip()
        ]
        if missing:
            raise ValidationError(
                f"Repository URL, git user name, and email are required (missing: {', '.join(missing)})"
            )

        try:
            config = GitConfig.model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid git configuration: {_format_pydantic_error(e)}") from e

        await atomic_write_text(self.config_path, json.dumps(config.to_file_dict(), indent=2))
        self.replace(config)
        logger.info(f"Git configuration saved: {config.repository.url} ({self.config_path})")

        return await self.reload()
