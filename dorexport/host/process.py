"""Adapter for Goobi-style process folders.

A process folder looks like::

    {process}/
        properties.json
        images/{title}_media/
        ocr/{title}_txt/
        ocr/{title}_alto/
        ocr/{title}_pdf/

``properties.json`` holds the process properties, either as an object
(``{"objectId": "druid:bb018zb8894", ...}``) or as a list of
``{"title": ..., "value": ...}`` entries in the order the workflow stored them.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, Tuple

from dorexport.core.logger import setup_logger
from dorexport.core.models import ExportOutcome, ExportSettings, SourceFolders, StatusCallback
from dorexport.export.errors import ErrorKind, ExportError
from dorexport.export.orchestrator import build_export_request, export_object, get_export_settings
from dorexport.export.profiles import ExportProfile

logger = setup_logger(__name__)

PROPERTIES_FILE_NAME = "properties.json"


class ProcessFolder:
    """A process directory on disk, exposing its source folders and properties."""

    def __init__(self, path: Path, title: Optional[str] = None):
        self.path = Path(path)
        self.title = title or self.path.name

    @property
    def images_dir(self) -> Path:
        return self.path / "images" / f"{self.title}_media"

    @property
    def text_dir(self) -> Path:
        return self.path / "ocr" / f"{self.title}_txt"

    @property
    def alto_dir(self) -> Path:
        return self.path / "ocr" / f"{self.title}_alto"

    @property
    def pdf_dir(self) -> Path:
        return self.path / "ocr" / f"{self.title}_pdf"

    def source_folders(self) -> SourceFolders:
        return SourceFolders(
            images=self.images_dir,
            text=self.text_dir,
            alto=self.alto_dir,
            pdf=self.pdf_dir,
        )

    def properties(self) -> List[Tuple[str, str]]:
        """Property (key, value) pairs in stored order. Missing file means no properties."""
        properties_path = self.path / PROPERTIES_FILE_NAME
        if not properties_path.exists():
            logger.warning("No %s in process folder %s", PROPERTIES_FILE_NAME, self.path)
            return []

        try:
            with open(properties_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ExportError(
                f"Cannot read process properties {properties_path}: {e}",
                ErrorKind.CONFIGURATION_ERROR,
                path=properties_path,
            ) from e

        if isinstance(data, dict):
            return [(str(key), _as_text(value)) for key, value in data.items()]

        if isinstance(data, list):
            pairs = []
            for entry in data:
                if not isinstance(entry, dict) or "title" not in entry:
                    logger.debug("Skipping malformed property entry in %s: %r", properties_path, entry)
                    continue
                pairs.append((str(entry["title"]), _as_text(entry.get("value"))))
            return pairs

        raise ExportError(
            f"Process properties must be an object or a list: {properties_path}",
            ErrorKind.CONFIGURATION_ERROR,
            path=properties_path,
        )


def _as_text(value) -> str:
    return "" if value is None else str(value)


def export_process(
    folder: ProcessFolder,
    settings: Optional[ExportSettings] = None,
    profile: Optional[ExportProfile] = None,
    status_callback: Optional[StatusCallback] = None,
) -> ExportOutcome:
    """Export a process folder with the configured (or given) settings."""
    try:
        if settings is None:
            settings = get_export_settings()
        properties = folder.properties()
    except ExportError as e:
        logger.error("Cannot export %s: %s", folder.title, e)
        if status_callback:
            status_callback("error", str(e))
        return ExportOutcome().with_problem(f"{e}, export canceled: {folder.title}")

    request = build_export_request(properties, folder.source_folders(), settings, title=folder.title)
    return export_object(request, profile=profile, status_callback=status_callback)
