"""
Unit tests for the file-system export locator.
"""

import os

import pytest

from roambridge.adapters.export.locator import EXPORT_FILE_MARKER, FileSystemExportLocator


def touch(path, mtime):
    path.write_bytes(b"zip")
    os.utime(path, (mtime, mtime))
    return path


class TestFileSystemExportLocator:
    """Test selection of the newest export archive."""

    def test_newest_matching_file_wins(self, tmp_path):
        """Test the most recently modified matching file is returned."""
        touch(tmp_path / "Roam-Export-1.zip", 1_000_000)
        newer = touch(tmp_path / "Roam-Export-2.zip", 2_000_000)
        touch(tmp_path / "notes.txt", 3_000_000)

        artifact = FileSystemExportLocator().find_latest(tmp_path)

        assert artifact.file_path == newer
        assert artifact.last_modified == 2_000_000

    def test_name_order_does_not_matter(self, tmp_path):
        """Test modification time, not name, decides."""
        newer = touch(tmp_path / "Roam-Export-1.zip", 2_000_000)
        touch(tmp_path / "Roam-Export-2.zip", 1_000_000)

        assert FileSystemExportLocator().find_latest(tmp_path).file_path == newer

    def test_no_match_returns_none(self, tmp_path):
        """Test a directory without exports yields None."""
        touch(tmp_path / "notes.txt", 1_000_000)

        assert FileSystemExportLocator().find_latest(tmp_path) is None

    def test_empty_directory_returns_none(self, tmp_path):
        """Test an empty directory yields None."""
        assert FileSystemExportLocator().find_latest(tmp_path) is None

    def test_directories_and_symlinks_ignored(self, tmp_path):
        """Test only regular files are candidates."""
        regular = touch(tmp_path / "Roam-Export-1.zip", 1_000_000)
        (tmp_path / "Roam-Export-dir").mkdir()
        target = touch(tmp_path / "elsewhere.zip", 5_000_000)
        (tmp_path / "Roam-Export-link.zip").symlink_to(target)

        artifacts = FileSystemExportLocator().list_exports(tmp_path)

        assert [a.file_path for a in artifacts] == [regular]

    def test_equal_times_ordered_by_name(self, tmp_path):
        """Test ties are broken by name, descending."""
        touch(tmp_path / "Roam-Export-a.zip", 1_000_000)
        touch(tmp_path / "Roam-Export-b.zip", 1_000_000)

        artifacts = FileSystemExportLocator().list_exports(tmp_path)

        assert [a.file_path.name for a in artifacts] == ["Roam-Export-b.zip", "Roam-Export-a.zip"]

    def test_custom_marker(self, tmp_path):
        """Test the marker is configurable."""
        match = touch(tmp_path / "backup-2026.zip", 1_000_000)
        touch(tmp_path / f"{EXPORT_FILE_MARKER}-1.zip", 2_000_000)

        locator = FileSystemExportLocator(marker="backup")

        assert locator.find_latest(tmp_path).file_path == match

    def test_missing_directory_raises(self, tmp_path):
        """Test a missing directory is an error, not an empty result."""
        with pytest.raises(FileNotFoundError):
            FileSystemExportLocator().find_latest(tmp_path / "missing")
