"""
voicerelay/uploads.py
======================
Temporary Audio Staging — VoiceRelay

Responsibility:
    - Write a submitted audio clip to a uniquely named file with the
      extension the transcription backend expects (.webm)
    - Guarantee the file is removed on every exit path of the request:
      success, provider failure, timeout, and cancellation

File I/O is pushed to worker threads with asyncio.to_thread so staging
and cleanup never block the event loop.
"""

import asyncio
import logging
import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

logger = logging.getLogger("voicerelay.uploads")

AUDIO_SUFFIX = ".webm"
FILE_PREFIX = "utterance-"


@asynccontextmanager
async def staged_audio(
    data: bytes,
    directory: str | Path,
    suffix: str = AUDIO_SUFFIX,
) -> AsyncIterator[Path]:
    """
    Stage *data* on disk for the duration of the ``async with`` block.

    Usage::

        async with staged_audio(audio_bytes, settings.upload_dir) as path:
            transcript = await provider.transcribe(path, "en")

    Yields:
        Path of the staged file. The file no longer exists once the block
        exits, whether normally or by exception.
    """
    path = await asyncio.to_thread(_write_file, data, Path(directory), suffix)
    logger.debug("Staged %d bytes at %s", len(data), path)
    try:
        yield path
    finally:
        # Shielded so a second cancellation cannot interrupt the removal.
        await asyncio.shield(asyncio.to_thread(_remove_file, path))


# ---------------------------------------------------------------------------
# Helpers (run in worker threads)
# ---------------------------------------------------------------------------


def _write_file(data: bytes, directory: Path, suffix: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(suffix=suffix, prefix=FILE_PREFIX, dir=directory)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
    except BaseException:
        os.unlink(name)
        raise
    return Path(name)


def _remove_file(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove staged audio %s: %s", path, exc)
    else:
        logger.debug("Removed staged audio %s", path)
