"""Content manifest (``contentMetadata``) construction.

Shape::

    <content type="simple_image">
      <resource>
        <label>Page 1</label>
        <file name="00000001.tif"/>
        <file name="00000001.pdf"/>
        <file name="00000001.xml" role="transcription" publish="yes" preserve="yes" shelve="yes"/>
      </resource>
      ...
      <resource>
        <file name="bb018zb8894.pdf"/>
      </resource>
    </content>
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Mapping, Optional, Sequence

from dorexport.core.logger import setup_logger
from dorexport.core.models import ContentKind
from dorexport.export.errors import ErrorKind, ExportError
from dorexport.export.fs import write_bytes_atomic
from dorexport.export.pdf import merged_pdf_name
from dorexport.export.profiles import DEFAULT_CONTENT_TYPE

logger = setup_logger(__name__)

TRANSCRIPTION_ATTRIBUTES = {
    "role": "transcription",
    "publish": "yes",
    "preserve": "yes",
    "shelve": "yes",
}


def normalize_content_type(
    content_type: Optional[str],
    mapping: Optional[Mapping[str, str]],
) -> str:
    if mapping is None:
        return content_type or ""
    if not content_type:
        return DEFAULT_CONTENT_TYPE
    return mapping.get(content_type.strip().lower(), DEFAULT_CONTENT_TYPE)


def _add_file(resource: ET.Element, name: str, **attributes: str) -> ET.Element:
    # Undecodable bytes in a filename arrive as lone surrogates, which have no XML form.
    try:
        name.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ExportError(
            f"File name is not valid UTF-8 and cannot be written to the manifest: {name!r}",
            ErrorKind.MANIFEST_WRITE_FAILED,
        ) from e
    element = ET.SubElement(resource, "file", {"name": name})
    for key, value in attributes.items():
        element.set(key, value)
    return element


def build_manifest(
    content_type: Optional[str],
    object_type: Optional[str],
    images: Optional[Sequence[str]],
    companions: Optional[Sequence[str]],
    pdfs: Optional[Sequence[str]],
    identifier: str,
    companion_kind: ContentKind = ContentKind.ALTO,
    type_mapping: Optional[Mapping[str, str]] = None,
) -> ET.Element:
    """Build the manifest tree for one export.

    One resource per image. Images are paired with companions (and per-page
    PDFs) by position only when the lists have the same length; otherwise each
    resource holds just the image. A final resource points at the merged PDF
    whenever there are PDFs.
    """
    content = ET.Element("content", {"type": normalize_content_type(content_type, type_mapping)})
    if object_type:
        logger.debug("Building manifest for %s (object type %s)", identifier, object_type)

    if images is not None:
        paired = companions is not None and len(companions) == len(images)
        per_page_pdfs = paired and pdfs is not None and len(pdfs) == len(images)

        for index, image_name in enumerate(images):
            resource = ET.SubElement(content, "resource")
            if not paired:
                _add_file(resource, image_name)
                continue

            label = ET.SubElement(resource, "label")
            label.text = f"Page {index + 1}"
            _add_file(resource, image_name)
            if per_page_pdfs:
                _add_file(resource, pdfs[index])
            if companion_kind == ContentKind.ALTO:
                _add_file(resource, companions[index], **TRANSCRIPTION_ATTRIBUTES)
            else:
                _add_file(resource, companions[index])

        if companions is not None and not paired:
            logger.debug(
                "Image/%s count mismatch for %s (%d != %d), writing image-only resources",
                companion_kind.value,
                identifier,
                len(images),
                len(companions),
            )

    if pdfs:
        resource = ET.SubElement(content, "resource")
        _add_file(resource, merged_pdf_name(identifier))

    return content


def serialize_manifest(manifest: ET.Element) -> bytes:
    ET.indent(manifest, space="  ")
    return ET.tostring(manifest, encoding="UTF-8", xml_declaration=True)


def write_manifest(manifest: ET.Element, path: Path) -> Path:
    """Write the manifest as pretty-printed UTF-8 XML."""
    try:
        write_bytes_atomic(path, serialize_manifest(manifest))
    except OSError as e:
        raise ExportError(
            f"Could not write manifest {path}: {e}",
            ErrorKind.MANIFEST_WRITE_FAILED,
            path=path,
        ) from e
    logger.debug("Wrote manifest %s", path)
    return path
