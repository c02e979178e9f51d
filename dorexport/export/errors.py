from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional


class ErrorKind(str, Enum):
    """Reasons an export can fail. Every kind is fatal for the current export."""

    MISSING_IDENTIFIER = "missing_identifier"
    MISSING_CONTENT_TYPE = "missing_content_type"
    INVALID_IDENTIFIER_LENGTH = "invalid_identifier_length"
    INTEGRITY_MISMATCH = "integrity_mismatch"
    PDF_MERGE_FAILED = "pdf_merge_failed"
    MANIFEST_WRITE_FAILED = "manifest_write_failed"
    NOTIFICATION_FAILED = "notification_failed"
    CONFIGURATION_ERROR = "configuration_error"


class ExportError(Exception):
    """Raised by pipeline stages when an export cannot continue."""

    def __init__(self, message: str, kind: ErrorKind, path: Optional[Path] = None):
        super().__init__(message)
        self.kind = kind
        self.path = path
