"""
Tests for squirrelpack.metadata.asar module.

Tests asar archive reading including:
- Top-level and nested members
- Link entries
- Unpacked members stored beside the archive
- Malformed archives and missing members
"""

from __future__ import annotations

import json
import struct

import pytest

from squirrelpack.metadata.asar import read_asar_file, read_asar_index

pytestmark = pytest.mark.unit


class TestReadAsarFile:
    """Tests for read_asar_file."""

    def test_reads_top_level_member(self, tmp_path, asar_builder):
        """Test reading package.json from the archive root."""
        archive = tmp_path / "app.asar"
        payload = json.dumps({"name": "footest"}).encode()
        archive.write_bytes(asar_builder({"package.json": payload, "main.js": b"x"}))

        assert read_asar_file(archive, "package.json") == payload
        assert read_asar_file(archive, "main.js") == b"x"

    def test_reads_nested_member(self, tmp_path, asar_builder):
        """Test reading a file inside a directory entry."""
        archive = tmp_path / "app.asar"
        archive.write_bytes(
            asar_builder({"package.json": b"{}", "lib/util/a.js": b"module.exports = 1"})
        )

        assert read_asar_file(archive, "lib/util/a.js") == b"module.exports = 1"

    def test_follows_links(self, tmp_path, asar_builder):
        """Test that link entries resolve to their target."""
        archive = tmp_path / "app.asar"
        archive.write_bytes(
            asar_builder(
                {"real/package.json": b'{"name": "linked"}'},
                links={"package.json": "real/package.json"},
            )
        )

        assert read_asar_file(archive, "package.json") == b'{"name": "linked"}'

    def test_link_cycle_raises(self, tmp_path, asar_builder):
        """Test that self-referencing links stop with ValueError."""
        archive = tmp_path / "app.asar"
        archive.write_bytes(
            asar_builder({}, links={"a.json": "b.json", "b.json": "a.json"})
        )

        with pytest.raises(ValueError, match="too many links"):
            read_asar_file(archive, "a.json")

    def test_reads_unpacked_member(self, tmp_path, asar_builder):
        """Test that unpacked members are read from <archive>.unpacked/."""
        archive = tmp_path / "app.asar"
        archive.write_bytes(asar_builder({}, unpacked={"package.json": 9}))
        unpacked = tmp_path / "app.asar.unpacked"
        unpacked.mkdir()
        (unpacked / "package.json").write_bytes(b'{"a": 1}\n')

        assert read_asar_file(archive, "package.json") == b'{"a": 1}\n'

    def test_missing_member_raises(self, tmp_path, asar_builder):
        """Test that a missing member raises FileNotFoundError."""
        archive = tmp_path / "app.asar"
        archive.write_bytes(asar_builder({"main.js": b"x"}))

        with pytest.raises(FileNotFoundError, match="package.json"):
            read_asar_file(archive, "package.json")

    def test_directory_member_raises(self, tmp_path, asar_builder):
        """Test that asking for a directory raises IsADirectoryError."""
        archive = tmp_path / "app.asar"
        archive.write_bytes(asar_builder({"lib/a.js": b"x"}))

        with pytest.raises(IsADirectoryError):
            read_asar_file(archive, "lib")

    def test_truncated_archive_raises(self, tmp_path):
        """Test that a truncated header raises ValueError."""
        archive = tmp_path / "app.asar"
        archive.write_bytes(b"\x04\x00")

        with pytest.raises(ValueError, match="truncated"):
            read_asar_file(archive, "package.json")

    def test_truncated_data_raises(self, tmp_path, asar_builder):
        """Test that missing file data raises ValueError."""
        archive = tmp_path / "app.asar"
        raw = asar_builder({"package.json": b'{"name": "footest"}'})
        archive.write_bytes(raw[:-5])

        with pytest.raises(ValueError, match="truncated data"):
            read_asar_file(archive, "package.json")

    def test_invalid_index_raises(self, tmp_path):
        """Test that a non-JSON header raises ValueError."""
        archive = tmp_path / "app.asar"
        junk = b"not json"
        header = struct.pack("<II", len(junk) + 4, len(junk)) + junk
        archive.write_bytes(struct.pack("<II", 4, len(header)) + header)

        with pytest.raises(ValueError, match="invalid asar index"):
            read_asar_file(archive, "package.json")

    def test_missing_archive_raises(self, tmp_path):
        """Test that a missing archive raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            read_asar_file(tmp_path / "nope.asar", "package.json")


class TestReadAsarIndex:
    """Tests for read_asar_index."""

    def test_data_offset_points_at_file_data(self, tmp_path, asar_builder):
        """Test that data_offset plus the entry offset locates the bytes."""
        archive = tmp_path / "app.asar"
        archive.write_bytes(asar_builder({"a.txt": b"hello", "b.txt": b"world"}))

        index, data_offset = read_asar_index(archive)
        entry = index["files"]["b.txt"]

        raw = archive.read_bytes()
        start = data_offset + int(entry["offset"])
        assert raw[start : start + entry["size"]] == b"world"
