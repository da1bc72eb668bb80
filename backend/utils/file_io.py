"""
Async file helpers shared by the document store and the git config manager.

Uses aiofiles for reads/writes and asyncio.to_thread() for the rename so slow
storage (NFS volume mounts) never blocks the event loop.
"""
import asyncio
import tempfile
from pathlib import Path

import aiofiles


async def atomic_write_text(target_path: Path, content: str) -> None:
    """Write content atomically using temp file + rename pattern."""
    target_path = Path(target_path)
    await asyncio.to_thread(target_path.parent.mkdir, parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=target_path.parent, suffix='.tmp')
    try:
        async with aiofiles.open(fd, 'w', encoding='utf-8', closefd=True) as f:
            await f.write(content)
        await asyncio.to_thread(Path(temp_path).replace, target_path)
    except Exception:
        await asyncio.to_thread(Path(temp_path).unlink, True)  # missing_ok=True
        raise


async def read_text(path: Path) -> str:
    async with aiofiles.open(path, 'r', encoding='utf-8') as f:
        return await f.read()
