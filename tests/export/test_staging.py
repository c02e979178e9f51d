"""Tests for content staging.

Covers:
- atomic_copy: overwrite semantics, no partial files
- file_fingerprint
- stage_content: skip, flat copy, ordering, integrity verification
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from dorexport.core.models import ContentKind
from dorexport.export.errors import ErrorKind, ExportError
from dorexport.export.fs import atomic_copy, file_fingerprint, list_regular_files
from dorexport.export.staging import stage_content


def _make_source(directory: Path, files: dict) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        (directory / name).write_bytes(content)
    return directory


# =============================================================================
# atomic_copy Tests
# =============================================================================


class TestAtomicCopy:
    def test_copies_file(self, tmp_path):
        source = tmp_path / "source.tif"
        source.write_bytes(b"image data")
        dest = tmp_path / "dest.tif"

        result = atomic_copy(source, dest)

        assert result == dest
        assert dest.read_bytes() == b"image data"
        assert source.exists()

    def test_overwrites_existing_destination(self, tmp_path):
        """A re-run replaces the earlier export instead of renaming."""
        source = tmp_path / "source.tif"
        source.write_bytes(b"new")
        dest = tmp_path / "dest.tif"
        dest.write_bytes(b"old export")

        result = atomic_copy(source, dest)

        assert result == dest
        assert dest.read_bytes() == b"new"
        assert not (tmp_path / "dest_1.tif").exists()

    def test_no_partial_file_on_failure(self, tmp_path):
        source = tmp_path / "source.tif"
        source.write_bytes(b"content")
        dest = tmp_path / "dest.tif"

        with patch("shutil.copy2", side_effect=IOError("Disk full")):
            with pytest.raises(IOError):
                atomic_copy(source, dest)

        assert not dest.exists()
        assert list(tmp_path.glob("*.tmp")) == []

    def test_permission_error_falls_back_to_copyfile(self, tmp_path):
        source = tmp_path / "source.tif"
        source.write_bytes(b"content")
        dest = tmp_path / "dest.tif"

        with patch("shutil.copy2", side_effect=PermissionError("Operation not permitted")):
            atomic_copy(source, dest)

        assert dest.read_bytes() == b"content"


# =============================================================================
# Fingerprints and listing
# =============================================================================


class TestFingerprint:
    def test_equal_content_equal_fingerprint(self, tmp_path):
        a = tmp_path / "a"
        b = tmp_path / "b"
        a.write_bytes(b"same bytes")
        b.write_bytes(b"same bytes")

        assert file_fingerprint(a) == file_fingerprint(b)

    def test_different_content_different_fingerprint(self, tmp_path):
        a = tmp_path / "a"
        b = tmp_path / "b"
        a.write_bytes(b"same bytes")
        b.write_bytes(b"same bytez")

        assert file_fingerprint(a) != file_fingerprint(b)


class TestListRegularFiles:
    def test_sorted_and_files_only(self, tmp_path):
        _make_source(tmp_path, {"00000002.tif": b"2", "00000001.tif": b"1"})
        (tmp_path / "subdir").mkdir()

        assert list_regular_files(tmp_path) == ["00000001.tif", "00000002.tif"]


# =============================================================================
# stage_content Tests
# =============================================================================


class TestStageContent:
    def test_missing_source_is_skipped(self, tmp_path):
        dest = tmp_path / "content"

        with patch("dorexport.export.staging.atomic_copy") as mock_copy:
            result = stage_content(tmp_path / "missing", dest, ContentKind.IMAGES)

        assert result is None
        mock_copy.assert_not_called()

    def test_none_source_is_skipped(self, tmp_path):
        assert stage_content(None, tmp_path / "content", ContentKind.PDF) is None

    def test_copies_all_files_flat(self, tmp_path):
        source = _make_source(
            tmp_path / "images",
            {"00000002.tif": b"two", "00000001.tif": b"one", "00000003.tif": b"three"},
        )
        (source / "thumbs").mkdir()
        (source / "thumbs" / "t.jpg").write_bytes(b"thumb")
        dest = tmp_path / "export" / "content"

        result = stage_content(source, dest, ContentKind.IMAGES)

        assert result.kind == ContentKind.IMAGES
        assert result.source_dir == source
        assert result.filenames == ("00000001.tif", "00000002.tif", "00000003.tif")
        assert sorted(os.listdir(dest)) == ["00000001.tif", "00000002.tif", "00000003.tif"]
        assert (dest / "00000003.tif").read_bytes() == b"three"

    def test_empty_source_gives_empty_set(self, tmp_path):
        source = tmp_path / "alto"
        source.mkdir()

        result = stage_content(source, tmp_path / "content", ContentKind.ALTO)

        assert result is not None
        assert result.filenames == ()

    def test_verification_passes_for_good_copy(self, tmp_path):
        source = _make_source(tmp_path / "alto", {"00000001.xml": b"<alto/>"})

        result = stage_content(source, tmp_path / "content", ContentKind.ALTO, verify=True)

        assert result.filenames == ("00000001.xml",)

    def test_verification_detects_mismatch(self, tmp_path):
        source = _make_source(tmp_path / "images", {"00000001.tif": b"good", "00000002.tif": b"good"})
        dest = tmp_path / "content"

        def corrupting_copy(src, dst):
            dst.write_bytes(b"corrupted" if src.name == "00000002.tif" else src.read_bytes())
            return dst

        with patch("dorexport.export.staging.atomic_copy", side_effect=corrupting_copy):
            with pytest.raises(ExportError) as excinfo:
                stage_content(source, dest, ContentKind.IMAGES, verify=True)

        assert excinfo.value.kind == ErrorKind.INTEGRITY_MISMATCH
        assert excinfo.value.path == dest / "00000002.tif"
        assert "00000002.tif" in str(excinfo.value)

    def test_mismatch_ignored_without_verification(self, tmp_path):
        source = _make_source(tmp_path / "images", {"00000001.tif": b"good"})

        def corrupting_copy(src, dst):
            dst.write_bytes(b"corrupted")
            return dst

        with patch("dorexport.export.staging.atomic_copy", side_effect=corrupting_copy):
            result = stage_content(source, tmp_path / "content", ContentKind.IMAGES, verify=False)

        assert result.filenames == ("00000001.tif",)

    def test_hidden_temp_like_names_survive(self, tmp_path):
        """A source file shaped like a copy temp file is not clobbered by its sibling's copy."""
        source = _make_source(tmp_path / "images", {".a.tif.tmp": b"hidden", "a.tif": b"image"})
        dest = tmp_path / "content"

        result = stage_content(source, dest, ContentKind.IMAGES, verify=True)

        assert result.filenames == (".a.tif.tmp", "a.tif")
        assert (dest / ".a.tif.tmp").read_bytes() == b"hidden"
        assert (dest / "a.tif").read_bytes() == b"image"
        assert sorted(os.listdir(dest)) == [".a.tif.tmp", "a.tif"]
