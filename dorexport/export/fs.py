"""Filesystem primitives for staging export content.

Copies go through a hidden temp file next to the destination and are moved into
place with ``Path.replace``, so a reader never sees a half-written file under
the final name and a re-run overwrites the previous export.
"""

from __future__ import annotations

import errno
import hashlib
import shutil
import time
import uuid
from pathlib import Path
from typing import List

from dorexport.core.logger import setup_logger

logger = setup_logger(__name__)

_VERIFY_IO_WAIT_SECONDS = 3.0
_HASH_CHUNK_SIZE = 1024 * 1024


def _is_permission_error(e: Exception) -> bool:
    """Check if exception is a permission error (including NFS/SMB issues)."""
    return isinstance(e, PermissionError) or (isinstance(e, OSError) and e.errno == errno.EPERM)


def _verify_transfer_size(dest: Path, expected_size: int) -> None:
    """Verify a copy has the expected size.

    Remote filesystems (NFS/CIFS) can report stale sizes briefly after large
    writes, so a mismatch is re-checked once after a short delay.
    """
    actual_size = dest.stat().st_size
    if actual_size == expected_size:
        return

    logger.debug(
        "File copy size mismatch, waiting for filesystem sync: %s (%d != %d)",
        dest,
        actual_size,
        expected_size,
    )
    time.sleep(_VERIFY_IO_WAIT_SECONDS)

    actual_size = dest.stat().st_size
    if actual_size != expected_size:
        raise IOError(
            f"File copy incomplete, data loss may have occurred. "
            f"'{dest}' was {actual_size} bytes instead of expected {expected_size}."
        )


def temp_sibling(dest_path: Path) -> Path:
    """Unique hidden temp path next to ``dest_path``."""
    return dest_path.parent / f".{dest_path.name}.{uuid.uuid4().hex}.tmp"


def list_regular_files(directory: Path) -> List[str]:
    """Names of the regular files directly inside ``directory``, sorted by name."""
    return sorted(entry.name for entry in directory.iterdir() if entry.is_file())


def atomic_copy(source_path: Path, dest_path: Path) -> Path:
    """Copy a file, replacing any existing file at ``dest_path``.

    Args:
        source_path: Source file to copy
        dest_path: Destination file path (parent must exist)

    Returns:
        ``dest_path``

    Raises:
        OSError: If the copy fails. No temp or partial file is left behind.
    """
    temp_path = temp_sibling(dest_path)
    expected_size = source_path.stat().st_size

    try:
        try:
            shutil.copy2(str(source_path), str(temp_path))
        except OSError as e:
            if not _is_permission_error(e):
                raise
            # NFS/SMB mounts often refuse the metadata part of copy2; copy content only.
            logger.debug(
                "Permission error during copy, falling back to copyfile (%s -> %s): %s",
                source_path,
                temp_path,
                e,
            )
            shutil.copyfile(str(source_path), str(temp_path))

        _verify_transfer_size(temp_path, expected_size)
        temp_path.replace(dest_path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise

    return dest_path


def file_fingerprint(path: Path) -> str:
    """SHA-256 hex digest of a file's content."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def write_bytes_atomic(dest_path: Path, data: bytes) -> Path:
    """Write ``data`` to ``dest_path`` via a temp file and rename."""
    temp_path = temp_sibling(dest_path)
    try:
        temp_path.write_bytes(data)
        temp_path.replace(dest_path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise
    return dest_path
