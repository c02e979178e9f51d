"""Export pipeline.

properties -> validate -> shard path -> stage images, companion OCR, PDFs ->
merge PDFs -> manifest -> (delay) -> workflow API -> outcome.

Each call builds its own ExportOutcome; nothing is carried between exports.
"""

from __future__ import annotations

import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

import dorexport.core.config as core_config
from dorexport.core.logger import setup_logger
from dorexport.core.models import (
    ContentKind,
    ExportOutcome,
    ExportRequest,
    ExportSettings,
    ObjectProperties,
    SourceFolders,
    StatusCallback,
)
from dorexport.export.errors import ErrorKind, ExportError
from dorexport.export.manifest import build_manifest, write_manifest
from dorexport.export.notify import build_trigger_url, trigger_workflow
from dorexport.export.pdf import merge_pdf_files
from dorexport.export.profiles import ExportProfile, get_profile
from dorexport.export.sharding import create_layout_dirs, export_layout, resolve_shard_path
from dorexport.export.staging import stage_content
from dorexport.export.steps import PlanStep, log_plan_steps, record_step

logger = setup_logger(__name__)

PROPERTY_OBJECT_ID = "objectid"
PROPERTY_CONTENT_TYPE = "contenttype"
PROPERTY_OBJECT_TYPE = "objecttype"

SECONDARY_MANIFEST_TEMPLATE = "dor_export_{identifier}.xml"

PropertySource = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


# =============================================================================
# Properties and settings
# =============================================================================


def read_object_properties(properties: PropertySource) -> ObjectProperties:
    """Pick objectId, contentType and objectType out of the host's property set.

    Keys match case-insensitively; when a key appears more than once the last
    value wins.
    """
    items = properties.items() if isinstance(properties, Mapping) else properties
    found: dict = {}
    for key, value in items:
        normalized = str(key).strip().lower()
        if normalized in (PROPERTY_OBJECT_ID, PROPERTY_CONTENT_TYPE, PROPERTY_OBJECT_TYPE):
            found[normalized] = None if value is None else str(value)

    return ObjectProperties(
        object_id=found.get(PROPERTY_OBJECT_ID),
        content_type=found.get(PROPERTY_CONTENT_TYPE),
        object_type=found.get(PROPERTY_OBJECT_TYPE),
    )


def _parse_number(value: Any, label: str, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ExportError(f"{label} must be a number", ErrorKind.CONFIGURATION_ERROR) from exc
    if number < 0:
        raise ExportError(f"{label} must not be negative", ErrorKind.CONFIGURATION_ERROR)
    return number


def _parse_optional_bool(value: Any) -> Optional[bool]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes", "on")


def build_export_settings(values: Mapping[str, Any]) -> ExportSettings:
    destination = str(values.get("DESTINATION", "") or "").strip()
    api_base_url = str(values.get("API_BASE_URL", "") or "").strip()

    if not destination:
        raise ExportError("Export destination is required", ErrorKind.CONFIGURATION_ERROR)
    if not api_base_url:
        raise ExportError("Workflow API URL is required", ErrorKind.CONFIGURATION_ERROR)

    temp_destination = str(values.get("TEMP_DESTINATION", "") or "").strip()
    metadata_file_name = str(values.get("METADATA_FILE_NAME", "") or "").strip()
    profile_name = str(values.get("EXPORT_PROFILE", "") or "stanford").strip()
    get_profile(profile_name)

    return ExportSettings(
        destination=Path(destination),
        api_base_url=api_base_url,
        workflow_name=str(values.get("ASSEMBLY_WF", "") or "assemblyWF").strip(),
        temp_destination=Path(temp_destination) if temp_destination else None,
        metadata_file_name=metadata_file_name or None,
        username=str(values.get("API_USERNAME", "") or "").strip(),
        password=values.get("API_PASSWORD", "") or "",
        delay=_parse_number(values.get("DELAY"), "Delay", 0),
        http_timeout=_parse_number(values.get("HTTP_TIMEOUT"), "API timeout", 30) or 30,
        profile_name=profile_name,
        verify_integrity=_parse_optional_bool(values.get("VERIFY_INTEGRITY")),
    )


def get_export_settings() -> ExportSettings:
    """Build ExportSettings from the configured values."""
    return build_export_settings(core_config.config.all())


def build_export_request(
    properties: PropertySource,
    sources: SourceFolders,
    settings: ExportSettings,
    title: str = "",
) -> ExportRequest:
    object_properties = read_object_properties(properties)
    return ExportRequest(
        identifier=object_properties.object_id,
        content_type=object_properties.content_type,
        object_type=object_properties.object_type,
        sources=sources,
        settings=settings,
        title=title,
    )


# =============================================================================
# Pipeline
# =============================================================================


def _report(status_callback: Optional[StatusCallback], status: str, message: Optional[str]) -> None:
    if status_callback:
        status_callback(status, message)


def _validate_request(request: ExportRequest) -> List[Tuple[ErrorKind, str]]:
    problems: List[Tuple[ErrorKind, str]] = []
    if not request.identifier or not request.identifier.strip():
        problems.append((ErrorKind.MISSING_IDENTIFIER, f"No objectId found, export canceled: {request.title}"))
    if not request.content_type or not request.content_type.strip():
        problems.append((ErrorKind.MISSING_CONTENT_TYPE, f"No contentType found, export canceled: {request.title}"))
    return problems


def _write_secondary_manifest(manifest, directory: Path, identifier: str) -> Path:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportError(
            f"Could not create manifest copy directory {directory}: {e}",
            ErrorKind.MANIFEST_WRITE_FAILED,
            path=directory,
        ) from e
    return write_manifest(manifest, directory / SECONDARY_MANIFEST_TEMPLATE.format(identifier=identifier))


def _run_pipeline(
    request: ExportRequest,
    profile: ExportProfile,
    steps: List[PlanStep],
    outcome: ExportOutcome,
    status_callback: Optional[StatusCallback],
) -> ExportOutcome:
    settings = request.settings
    identifier = request.identifier.strip()

    shard = resolve_shard_path(identifier, settings.destination)
    layout = export_layout(shard, profile.layout)
    record_step(steps, "resolve", root=str(shard.root), layout=profile.layout.value)
    create_layout_dirs(layout)

    verify = profile.verify_integrity if settings.verify_integrity is None else settings.verify_integrity
    _report(status_callback, "staging", "Copying content files")

    staged = {}
    for kind in (ContentKind.IMAGES, profile.companion_kind, ContentKind.PDF):
        staged[kind] = stage_content(request.sources.for_kind(kind), layout.content_dir, kind, verify=verify)
        if staged[kind] is not None:
            record_step(steps, f"stage_{kind.value}", files=len(staged[kind]), verified=verify)

    images = staged[ContentKind.IMAGES]
    companions = staged[profile.companion_kind]
    pdfs = staged[ContentKind.PDF]

    if pdfs is not None and pdfs.filenames:
        _report(status_callback, "merging", "Merging PDF files")
        merged = merge_pdf_files(pdfs.source_dir, pdfs.filenames, layout.content_dir, shard.local_identifier)
        record_step(steps, "merge_pdf", output=str(merged), files=len(pdfs))

    manifest = build_manifest(
        request.content_type,
        request.object_type,
        images.filenames if images is not None else None,
        companions.filenames if companions is not None else None,
        pdfs.filenames if pdfs is not None else None,
        shard.local_identifier,
        companion_kind=profile.companion_kind,
        type_mapping=profile.content_type_mapping,
    )
    metadata_file_name = settings.metadata_file_name or profile.default_metadata_file_name
    manifest_path = write_manifest(manifest, layout.metadata_dir / metadata_file_name)
    record_step(steps, "manifest", path=str(manifest_path))
    outcome = replace(outcome, manifest_path=manifest_path)

    if settings.temp_destination:
        copy_path = _write_secondary_manifest(manifest, settings.temp_destination, shard.local_identifier)
        record_step(steps, "manifest_copy", path=str(copy_path))

    if settings.delay > 0:
        logger.debug("Waiting %ss before calling the workflow API", settings.delay)
        time.sleep(settings.delay)

    url = build_trigger_url(
        settings.api_base_url,
        shard.original_identifier,
        settings.workflow_name,
        prefix=profile.workflow_prefix,
    )
    _report(status_callback, "notifying", f"Starting {settings.workflow_name}")
    result = trigger_workflow(url, settings.username, settings.password, timeout=settings.http_timeout)
    record_step(steps, "notify", url=url, status=result.status_code)

    if not result.ok:
        problem = f"Something went wrong: {result.describe()}"
        logger.warning("Export %s: %s", identifier, problem)
        _report(status_callback, "error", problem)
        return outcome.with_problem(problem)

    message = f"API call was successful: {result.describe()}"
    logger.info("Export %s complete: %s", identifier, message)
    _report(status_callback, "complete", message)
    return replace(outcome.with_message(message), success=True)


def export_object(
    request: ExportRequest,
    profile: Optional[ExportProfile] = None,
    status_callback: Optional[StatusCallback] = None,
) -> ExportOutcome:
    """Run one export. Never raises for export failures; see ``ExportOutcome.problems``."""
    outcome = ExportOutcome()
    label = request.title or request.identifier or "<unknown>"

    problems = _validate_request(request)
    if problems:
        for kind, problem in problems:
            logger.error("%s [%s]", problem, kind.value)
            _report(status_callback, "error", problem)
            outcome = outcome.with_problem(problem)
        return outcome

    steps: List[PlanStep] = []
    try:
        if profile is None:
            profile = get_profile(request.settings.profile_name)
        logger.info("Exporting %s (%s) with profile %s", request.identifier, label, profile.name)
        return _run_pipeline(request, profile, steps, outcome, status_callback)
    except ExportError as e:
        problem = f"{e}, export canceled: {label}"
        logger.error("Export %s failed [%s]: %s", request.identifier, e.kind.value, e)
        _report(status_callback, "error", problem)
        return outcome.with_problem(problem)
    except Exception as e:
        problem = f"Export failed: {e}"
        logger.error_trace("Unexpected error exporting %s: %s", request.identifier, e)
        _report(status_callback, "error", problem)
        return outcome.with_problem(problem)
    finally:
        log_plan_steps(request.identifier, steps)
