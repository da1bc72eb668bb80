"""
Filesystem storage for config documents.

Simple file I/O - no git interaction. One <name>.json file per document under
a single root directory, created lazily on first use.

All public methods are async to avoid blocking the event loop on slow storage
(NFS, etc.). Uses aiofiles for reads and asyncio.to_thread() for directory
operations.
"""
import asyncio
import json
import logging
import os
from pathlib import Path
from typing import List, Union

from errors import NotFoundError, ValidationError
from utils.file_io import atomic_write_text, read_text

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIX = '.json'
MAX_NAME_LENGTH = 200


def validate_document_name(name: str) -> None:
    """
    Validate a document name is a single, filesystem-safe path component.

    Names are otherwise opaque: spaces, dots and unicode are allowed.

    Raises:
        ValidationError: If name is empty, too long, or contains a path separator
    """
    if not isinstance(name, str) or not name or not name.strip():
        raise ValidationError("Filename is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Filename must be at most {MAX_NAME_LENGTH} characters")
    if '/' in name or '\\' in name or '\x00' in name:
        raise ValidationError("Filename cannot contain path separators")
    if name in ('.', '..'):
        raise ValidationError("Filename cannot be '.' or '..'")


def validate_json_content(content: str) -> None:
    """
    Raises:
        ValidationError: If content does not parse as JSON
    """
    try:
        json.loads(content)
    except (TypeError, ValueError) as e:
        raise ValidationError("Content must be valid JSON") from e


class ConfigStore:
    """Maps a logical document name to <root>/<name>.json."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    async def _ensure_root(self) -> None:
        await asyncio.to_thread(self.root.mkdir, parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path:
        """
        Get file path for a document.

        Prevents path traversal and rejects symlinks so a document can never
        resolve outside the store root.

        Raises:
            ValidationError: If the name is invalid or escapes the root
        """
        validate_document_name(name)
        path = self.root / f"{name}{DOCUMENT_SUFFIX}"
        if path.is_symlink():
            raise ValidationError("Symlinks not allowed in configs directory")
        resolved = path.resolve()
        root_resolved = self.root.resolve()
        if resolved.parent != root_resolved:
            raise ValidationError("Path escapes configs directory")
        return path

    async def exists(self, name: str) -> bool:
        path = self.path_for(name)
        return await asyncio.to_thread(path.is_file)

    async def list(self) -> List[str]:
        """
        List document names in directory-listing order.

        Returns:
            Names with the .json suffix stripped
        """
        await self._ensure_root()
        entries = await asyncio.to_thread(os.listdir, self.root)
        return [
            entry[:-len(DOCUMENT_SUFFIX)]
            for entry in entries
            if entry.endswith(DOCUMENT_SUFFIX) and len(entry) > len(DOCUMENT_SUFFIX)
        ]

    async def read(self, name: str) -> str:
        """
        Raises:
            NotFoundError: If the document does not exist
        """
        path = self.path_for(name)
        try:
            return await read_text(path)
        except FileNotFoundError:
            raise NotFoundError(f"File '{name}.json' does not exist")

    async def write(self, name: str, content: str) -> Path:
        """
        Write (create or overwrite) a document atomically.

        Existence checks for create/update semantics are the caller's job.

        Raises:
            ValidationError: If the name is invalid or content is not JSON
        """
        path = self.path_for(name)
        validate_json_content(content)
        await self._ensure_root()
        await atomic_write_text(path, content)
        logger.debug(f"Wrote document '{name}' to {path}")
        return path

    async def delete(self, name: str) -> Path:
        """
        Raises:
            NotFoundError: If the document does not exist
        """
        path = self.path_for(name)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            raise NotFoundError(f"File '{name}.json' does not exist")
        logger.info(f"Deleted document '{name}' from {path}")
        return path
