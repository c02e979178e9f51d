"""Identifier-derived destination paths.

An object id such as ``druid:bb018zb8894`` is stored under
``{root}/bb/018/zb/8894/bb018zb8894`` so no single directory grows too large.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from dorexport.core.models import DirectoryLayout, ExportLayout, ShardedPath
from dorexport.export.errors import ErrorKind, ExportError

LOCAL_IDENTIFIER_LENGTH = 11
NAMESPACE_SEPARATOR = ":"

# (start, end) slices of the local identifier, one directory level each
_SHARD_SEGMENTS = ((0, 2), (2, 5), (5, 7), (7, 11))


def local_identifier(identifier: str) -> str:
    """Strip the namespace prefix (everything up to the first ':')."""
    if NAMESPACE_SEPARATOR in identifier:
        return identifier.split(NAMESPACE_SEPARATOR, 1)[1]
    return identifier


def resolve_shard_path(identifier: str, destination_root: Union[str, Path]) -> ShardedPath:
    local_id = local_identifier(identifier)
    if len(local_id) != LOCAL_IDENTIFIER_LENGTH:
        raise ExportError(
            f"Object id '{identifier}' has unexpected length {len(local_id)}, "
            f"expected {LOCAL_IDENTIFIER_LENGTH} characters",
            ErrorKind.INVALID_IDENTIFIER_LENGTH,
        )

    segments = [local_id[start:end] for start, end in _SHARD_SEGMENTS]
    root = Path(destination_root).joinpath(*segments, local_id)
    return ShardedPath(original_identifier=identifier, local_identifier=local_id, root=root)


def export_layout(shard: ShardedPath, layout: DirectoryLayout) -> ExportLayout:
    content_dir = shard.root / "content"
    if layout == DirectoryLayout.UNIFIED:
        return ExportLayout(content_dir=content_dir, metadata_dir=content_dir)
    return ExportLayout(content_dir=content_dir, metadata_dir=shard.root / "metadata")


def create_layout_dirs(layout: ExportLayout) -> None:
    layout.content_dir.mkdir(parents=True, exist_ok=True)
    layout.metadata_dir.mkdir(parents=True, exist_ok=True)
