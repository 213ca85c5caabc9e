#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for virtual files and path detection."""

import io
import sys

import pytest

from docodec import vfile
from docodec.exceptions import FileNotFoundError
from docodec.vfile import VFile, is_path


@pytest.mark.unit
class TestIsPath:
    """Tests for the path-or-content heuristic."""

    @pytest.mark.parametrize(
        "content",
        ["/tmp/a", "./a", "../a", "~/notes", "C:\\docs\\a.md", "article.md", "data.xlsx"],
    )
    def test_paths(self, content):
        """Test strings recognized as paths."""
        assert is_path(content)

    @pytest.mark.parametrize(
        "content",
        ["", "# Title\n\nText", "https://example.org/a.md", "two words.md", "plain text", "version 1.0"],
    )
    def test_not_paths(self, content):
        """Test strings recognized as raw content."""
        assert not is_path(content)

    def test_existing_file_without_extension(self, temp_dir, monkeypatch):
        """Test that an existing file is a path even without an extension."""
        (temp_dir / "README").write_text("hi")
        monkeypatch.chdir(temp_dir)
        assert is_path("README")


@pytest.mark.unit
class TestVFile:
    """Tests for VFile and the load/dump helpers."""

    def test_load_and_dump_text(self):
        """Test loading raw text."""
        file = vfile.load("Hello")
        assert file.path is None
        assert vfile.dump(file) == "Hello"
        assert str(file) == "Hello"

    def test_dump_bytes_replaces_invalid_utf8(self):
        """Test decoding binary contents."""
        assert vfile.dump(VFile(contents=b"caf\xc3\xa9 \xff")) == "café \ufffd"

    def test_binary_flag_and_as_bytes(self):
        """Test binary detection and byte conversion."""
        assert VFile(contents=b"x").is_binary
        assert not VFile(contents="x").is_binary
        assert VFile(contents="é").as_bytes() == "é".encode()
        assert VFile().as_bytes() == b""

    def test_create(self):
        """Test creating a file with a path."""
        file = vfile.create("x", path="out.md")
        assert file.contents == "x"
        assert file.path == "out.md"


@pytest.mark.unit
class TestReadWrite:
    """Tests for reading from and writing to disk and the standard streams."""

    def test_read_existing_file(self, temp_dir):
        """Test reading a file from disk."""
        path = temp_dir / "a.md"
        path.write_text("# Hi", encoding="utf-8")
        file = vfile.read(str(path))
        assert file.contents == b"# Hi"
        assert file.path == str(path)

    def test_read_raw_content(self):
        """Test that raw content is loaded as-is."""
        file = vfile.read("# Title\n\nBody")
        assert file.contents == "# Title\n\nBody"
        assert file.path is None

    def test_read_missing_explicit_path(self, temp_dir):
        """Test that a missing explicit path raises."""
        with pytest.raises(FileNotFoundError):
            vfile.read(str(temp_dir / "missing.md"))

    def test_read_missing_bare_name_is_content(self, temp_dir, monkeypatch):
        """Test that a missing bare file name is treated as content."""
        monkeypatch.chdir(temp_dir)
        assert vfile.read("missing.md").contents == "missing.md"

    def test_read_stdin(self, monkeypatch):
        """Test reading standard input."""
        monkeypatch.setattr(sys, "stdin", io.StringIO("from stdin"))
        assert vfile.read("-").contents == "from stdin"

    def test_write_creates_parent_dirs(self, temp_dir):
        """Test writing to a nested path."""
        path = temp_dir / "nested" / "dir" / "out.txt"
        vfile.write(VFile(contents="text"), str(path))
        assert path.read_text(encoding="utf-8") == "text"

    def test_write_stdout(self, capsys):
        """Test writing text to standard output."""
        vfile.write(VFile(contents="hello"), "-")
        assert capsys.readouterr().out == "hello"
