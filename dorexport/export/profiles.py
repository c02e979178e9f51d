from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from dorexport.core.models import ContentKind, DirectoryLayout
from dorexport.export.errors import ErrorKind, ExportError

DEFAULT_CONTENT_TYPE = "simple_image"

CONTENT_TYPE_MAPPING: Mapping[str, str] = {
    "image": "simple_image",
    "file": "file",
    "book": "simple_book",
    "map": "map",
}


@dataclass(frozen=True)
class ExportProfile:
    """Business rules that differ between export targets."""

    name: str
    description: str = ""
    # None passes the content type through unchanged
    content_type_mapping: Optional[Mapping[str, str]] = None
    verify_integrity: bool = False
    layout: DirectoryLayout = DirectoryLayout.TWO_FOLDER
    companion_kind: ContentKind = ContentKind.ALTO
    # Path segments inserted between the object id and the workflow name
    workflow_prefix: Tuple[str, ...] = ()
    default_metadata_file_name: str = "stubContentMetadata.xml"


_PROFILE_REGISTRY: Dict[str, ExportProfile] = {}


def register_profile(profile: ExportProfile) -> ExportProfile:
    _PROFILE_REGISTRY[profile.name] = profile
    return profile


def get_profile(name: str) -> ExportProfile:
    try:
        return _PROFILE_REGISTRY[name]
    except KeyError:
        known = ", ".join(sorted(_PROFILE_REGISTRY))
        raise ExportError(
            f"Unknown export profile '{name}' (known profiles: {known})",
            ErrorKind.CONFIGURATION_ERROR,
        ) from None


def list_profiles() -> List[ExportProfile]:
    return sorted(_PROFILE_REGISTRY.values(), key=lambda profile: profile.name)


STANFORD = register_profile(
    ExportProfile(
        name="stanford",
        description="Content type passed through, ALTO transcriptions, checksum verification.",
        verify_integrity=True,
    )
)

STANFORD_PROFILES = register_profile(
    ExportProfile(
        name="stanford_profiles",
        description="Content type mapped to DOR profiles, workflow started via apo_workflows.",
        content_type_mapping=CONTENT_TYPE_MAPPING,
        workflow_prefix=("apo_workflows",),
    )
)

STANFORD_UNIFIED = register_profile(
    ExportProfile(
        name="stanford_unified",
        description="Single content folder holding files and manifest, plain text OCR.",
        layout=DirectoryLayout.UNIFIED,
        companion_kind=ContentKind.TEXT,
        default_metadata_file_name="contentMetadata.xml",
    )
)
