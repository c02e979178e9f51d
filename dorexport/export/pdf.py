from __future__ import annotations

from pathlib import Path
from typing import Sequence

from PyPDF2 import PdfReader, PdfWriter

from dorexport.core.logger import setup_logger
from dorexport.export.errors import ErrorKind, ExportError
from dorexport.export.fs import temp_sibling

logger = setup_logger(__name__)


def merged_pdf_name(identifier: str) -> str:
    return f"{identifier}.pdf"


def merge_pdf_files(
    source_dir: Path,
    filenames: Sequence[str],
    dest_dir: Path,
    identifier: str,
) -> Path:
    """Concatenate single-page PDFs, in order, into ``{dest_dir}/{identifier}.pdf``.

    The merged file only appears under its final name once it is complete.

    Raises:
        ExportError: PDF_MERGE_FAILED for unreadable input or I/O errors.
    """
    output_path = dest_dir / merged_pdf_name(identifier)
    temp_path = temp_sibling(output_path)

    try:
        writer = PdfWriter()
        for filename in filenames:
            reader = PdfReader(str(source_dir / filename))
            for page in reader.pages:
                writer.add_page(page)

        with temp_path.open("wb") as handle:
            writer.write(handle)
        temp_path.replace(output_path)
    except Exception as e:
        temp_path.unlink(missing_ok=True)
        raise ExportError(
            f"Error occurred during the merge to a single PDF file: {e}",
            ErrorKind.PDF_MERGE_FAILED,
            path=output_path,
        ) from e

    logger.info("Merged %d PDF file(s) into %s", len(filenames), output_path)
    return output_path
