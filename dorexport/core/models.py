"""Data types passed between the export stages."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Tuple


StatusCallback = Callable[[str, Optional[str]], None]


class ContentKind(str, Enum):
    IMAGES = "images"
    TEXT = "text"
    ALTO = "alto"
    PDF = "pdf"


class DirectoryLayout(str, Enum):
    # content/ for files, metadata/ for the manifest
    TWO_FOLDER = "two_folder"
    # content/ holds files and manifest
    UNIFIED = "unified"


@dataclass(frozen=True)
class ObjectProperties:
    """Values read from the host object's property set."""

    object_id: Optional[str] = None
    content_type: Optional[str] = None
    object_type: Optional[str] = None


@dataclass(frozen=True)
class SourceFolders:
    images: Optional[Path] = None
    text: Optional[Path] = None
    alto: Optional[Path] = None
    pdf: Optional[Path] = None

    def for_kind(self, kind: ContentKind) -> Optional[Path]:
        return getattr(self, kind.value)


@dataclass(frozen=True)
class ExportSettings:
    destination: Path
    api_base_url: str
    workflow_name: str = "assemblyWF"
    temp_destination: Optional[Path] = None
    metadata_file_name: Optional[str] = None  # None = profile default
    username: str = ""
    password: str = ""
    delay: float = 0
    http_timeout: float = 30
    profile_name: str = "stanford"
    verify_integrity: Optional[bool] = None  # None = profile default


@dataclass(frozen=True)
class ExportRequest:
    identifier: Optional[str]
    content_type: Optional[str]
    settings: ExportSettings
    sources: SourceFolders = field(default_factory=SourceFolders)
    object_type: Optional[str] = None
    title: str = ""


@dataclass(frozen=True)
class ShardedPath:
    original_identifier: str
    local_identifier: str
    root: Path


@dataclass(frozen=True)
class ExportLayout:
    content_dir: Path
    metadata_dir: Path


@dataclass(frozen=True)
class StagedFileSet:
    kind: ContentKind
    source_dir: Path
    filenames: Tuple[str, ...]

    def __len__(self) -> int:
        return len(self.filenames)


@dataclass(frozen=True)
class ExportOutcome:
    """Result of one export call. Never reused across calls."""

    success: bool = False
    problems: Tuple[str, ...] = ()
    messages: Tuple[str, ...] = ()
    manifest_path: Optional[Path] = None

    def with_problem(self, problem: str) -> "ExportOutcome":
        return replace(self, success=False, problems=self.problems + (problem,))

    def with_message(self, message: str) -> "ExportOutcome":
        return replace(self, messages=self.messages + (message,))
