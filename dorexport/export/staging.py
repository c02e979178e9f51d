from __future__ import annotations

from pathlib import Path
from typing import Optional

from dorexport.core.logger import setup_logger
from dorexport.core.models import ContentKind, StagedFileSet
from dorexport.export.errors import ErrorKind, ExportError
from dorexport.export.fs import atomic_copy, file_fingerprint, list_regular_files

logger = setup_logger(__name__)


def verify_copy(source: Path, target: Path, kind: ContentKind) -> None:
    """Raise INTEGRITY_MISMATCH if ``target`` differs from ``source``."""
    if file_fingerprint(source) != file_fingerprint(target):
        raise ExportError(
            f"Checksum error while validating {kind.value} files: {target}",
            ErrorKind.INTEGRITY_MISMATCH,
            path=target,
        )


def stage_content(
    source_dir: Optional[Path],
    dest_dir: Path,
    kind: ContentKind,
    verify: bool = False,
) -> Optional[StagedFileSet]:
    """Copy every file of ``source_dir`` flat into ``dest_dir``.

    Returns None when the source folder does not exist; objects without a
    given kind of content (e.g. no OCR) are normal.
    """
    if source_dir is None or not source_dir.is_dir():
        logger.debug("No %s folder at %s, skipping", kind.value, source_dir)
        return None

    dest_dir.mkdir(parents=True, exist_ok=True)
    filenames = list_regular_files(source_dir)

    for filename in filenames:
        source = source_dir / filename
        target = atomic_copy(source, dest_dir / filename)
        if verify:
            verify_copy(source, target, kind)

    logger.info(
        "Staged %d %s file(s) from %s%s",
        len(filenames),
        kind.value,
        source_dir,
        " (verified)" if verify else "",
    )
    return StagedFileSet(kind=kind, source_dir=source_dir, filenames=tuple(filenames))
