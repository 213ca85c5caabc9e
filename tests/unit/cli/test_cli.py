#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the docodec command-line interface.

This module tests argument parsing, environment variable defaults,
configuration files, exit codes and the ``convert`` and ``formats``
commands.
"""

import argparse
import logging
import os

import pytest

from docodec.cli import create_parser, get_exit_code_for_exception, main
from docodec.cli.builder import (
    EXIT_DEPENDENCY_ERROR,
    EXIT_ERROR,
    EXIT_FILE_ERROR,
    EXIT_FORMAT_ERROR,
    EXIT_PARSING_ERROR,
    EXIT_RENDERING_ERROR,
    EXIT_SECURITY_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
)
from docodec.cli.config import find_config_in_parents, flatten_config, load_config_file, load_config_with_priority
from docodec.cli.custom_actions import env_key_for
from docodec.exceptions import (
    DependencyError,
    FileNotFoundError,
    InvalidOptionsError,
    MalformedInputError,
    NetworkSecurityError,
    NoCodecMatchError,
    RenderingError,
    ValidationError,
)

MARKDOWN = "# Title\n\nSome *text*.\n"


@pytest.fixture(autouse=True)
def _restore_logging():
    """Restore root logger handlers changed by ``configure_logging``."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def workdir(temp_dir, monkeypatch):
    """Run in a temporary directory holding an empty configuration file."""
    (temp_dir / ".docodec.toml").write_text("")
    monkeypatch.chdir(temp_dir)
    monkeypatch.delenv("DOCODEC_CONFIG", raising=False)
    return temp_dir


@pytest.mark.unit
@pytest.mark.cli
class TestParser:
    """Tests for argument parsing."""

    def test_convert_arguments(self):
        """Test the convert command arguments."""
        args = create_parser().parse_args(["convert", "in.md", "out.html", "--from", "md", "--to", "html"])
        assert args.command == "convert"
        assert args.input == "in.md"
        assert args.output == "out.html"
        assert args.from_ == "md"
        assert args.to == "html"
        assert args.standalone is None
        assert args.log_level == "WARNING"

    def test_standalone_flags(self):
        """Test the --standalone/--no-standalone pair."""
        parser = create_parser()
        assert parser.parse_args(["convert", "x", "--standalone"]).standalone is True
        assert parser.parse_args(["convert", "x", "--no-standalone"]).standalone is False

    def test_provided_args_tracked(self):
        """Test that explicitly given arguments are recorded."""
        args = create_parser().parse_args(["convert", "x", "--to", "html", "--verbose"])
        assert args._provided_args == {"to", "verbose"}

    def test_log_level_upper_cased(self):
        """Test that log levels are case insensitive."""
        assert create_parser().parse_args(["formats", "--log-level", "debug"]).log_level == "DEBUG"

    def test_environment_defaults(self, monkeypatch):
        """Test that DOCODEC_ variables supply defaults."""
        monkeypatch.setenv("DOCODEC_LOG_LEVEL", "info")
        monkeypatch.setenv("DOCODEC_STANDALONE", "false")
        monkeypatch.setenv("DOCODEC_VERBOSE", "yes")
        args = create_parser().parse_args(["convert", "x"])
        assert args.log_level == "INFO"
        assert args.standalone is False
        assert args.verbose is True

    def test_arguments_override_environment(self, monkeypatch):
        """Test that arguments win over environment variables."""
        monkeypatch.setenv("DOCODEC_TO", "html")
        assert create_parser().parse_args(["convert", "x", "--to", "jats"]).to == "jats"

    def test_version(self, capsys):
        """Test the version flag."""
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert capsys.readouterr().out.startswith("docodec ")

    @pytest.mark.parametrize("dest,expected", [("log_level", "DOCODEC_LOG_LEVEL"), ("log-file", "DOCODEC_LOG_FILE")])
    def test_env_key_for(self, dest, expected):
        """Test environment variable names."""
        assert env_key_for(dest) == expected

    def test_env_key_for_trailing_underscore(self):
        """Test that a trailing underscore in the destination is dropped."""
        assert env_key_for("from_") == "DOCODEC_FROM"


@pytest.mark.unit
@pytest.mark.cli
class TestExitCodes:
    """Tests for mapping exceptions to exit codes."""

    @pytest.mark.parametrize(
        "exception,expected",
        [
            (NetworkSecurityError("blocked"), EXIT_SECURITY_ERROR),
            (DependencyError("pdf", [("reportlab", ">=4.0")]), EXIT_DEPENDENCY_ERROR),
            (ImportError("no module"), EXIT_DEPENDENCY_ERROR),
            (ValidationError("bad"), EXIT_VALIDATION_ERROR),
            (InvalidOptionsError("html", int, str), EXIT_VALIDATION_ERROR),
            (FileNotFoundError("missing.md"), EXIT_FILE_ERROR),
            (NoCodecMatchError("???"), EXIT_FORMAT_ERROR),
            (MalformedInputError("broken"), EXIT_PARSING_ERROR),
            (RenderingError("failed"), EXIT_RENDERING_ERROR),
            (RuntimeError("other"), EXIT_ERROR),
        ],
    )
    def test_exit_code(self, exception, expected):
        """Test each exception family."""
        assert get_exit_code_for_exception(exception) == expected


@pytest.mark.unit
@pytest.mark.cli
class TestConfig:
    """Tests for configuration files."""

    def test_flatten(self):
        """Test that nested tables are flattened."""
        config = {"is_standalone": False, "network": {"timeout": 5, "max-size-bytes": 10}}
        assert flatten_config(config) == {"is_standalone": False, "timeout": 5, "max_size_bytes": 10}

    @pytest.mark.parametrize(
        "name,text",
        [
            (".docodec.toml", 'delimiter = ";"\n[network]\ntimeout = 5\n'),
            (".docodec.yaml", 'delimiter: ";"\nnetwork:\n  timeout: 5\n'),
            (".docodec.json", '{"delimiter": ";", "network": {"timeout": 5}}'),
        ],
    )
    def test_load_formats(self, temp_dir, name, text):
        """Test TOML, YAML and JSON configuration files."""
        path = temp_dir / name
        path.write_text(text)
        assert load_config_file(path) == {"delimiter": ";", "network": {"timeout": 5}}

    def test_pyproject_section(self, temp_dir):
        """Test the [tool.docodec] table of a pyproject.toml."""
        path = temp_dir / "pyproject.toml"
        path.write_text('[project]\nname = "x"\n\n[tool.docodec]\nis_standalone = false\n')
        assert load_config_file(path) == {"is_standalone": False}

    def test_empty_yaml(self, temp_dir):
        """Test that an empty file is an empty configuration."""
        path = temp_dir / ".docodec.yaml"
        path.write_text("")
        assert load_config_file(path) == {}

    @pytest.mark.parametrize(
        "name,text",
        [("config.ini", "[x]"), (".docodec.toml", "= broken"), (".docodec.json", "[1, 2]")],
    )
    def test_invalid(self, temp_dir, name, text):
        """Test unsupported, invalid and non-mapping files."""
        path = temp_dir / name
        path.write_text(text)
        with pytest.raises(argparse.ArgumentTypeError):
            load_config_file(path)

    def test_missing(self, temp_dir):
        """Test that a missing explicit file raises."""
        with pytest.raises(argparse.ArgumentTypeError):
            load_config_file(temp_dir / "nope.toml")

    def test_found_in_parent(self, temp_dir):
        """Test discovery from a nested directory."""
        (temp_dir / ".docodec.json").write_text("{}")
        nested = temp_dir / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_in_parents(nested) == (temp_dir / ".docodec.json").resolve()

    def test_environment_path(self, temp_dir, monkeypatch):
        """Test the DOCODEC_CONFIG variable."""
        path = temp_dir / "custom.toml"
        path.write_text("[network]\ntimeout = 2.5\n")
        monkeypatch.setenv("DOCODEC_CONFIG", str(path))
        assert load_config_with_priority() == {"timeout": 2.5}

    def test_explicit_path_wins(self, temp_dir, monkeypatch):
        """Test that --config wins over DOCODEC_CONFIG."""
        explicit = temp_dir / "explicit.toml"
        explicit.write_text("delimiter = '|'\n")
        monkeypatch.setenv("DOCODEC_CONFIG", str(temp_dir / "nope.toml"))
        assert load_config_with_priority(str(explicit)) == {"delimiter": "|"}


@pytest.mark.unit
@pytest.mark.cli
class TestMain:
    """Tests for running the CLI."""

    def test_no_command(self, capsys):
        """Test that running without a command prints help."""
        assert main([]) == EXIT_VALIDATION_ERROR
        assert "usage:" in capsys.readouterr().err

    def test_convert_to_stdout(self, workdir, capsys):
        """Test printing Markdown to standard output by default."""
        source = workdir / "doc.md"
        source.write_text(MARKDOWN)
        assert main(["convert", str(source)]) == EXIT_SUCCESS
        assert capsys.readouterr().out == "---\ntitle: Title\n---\n\nSome *text*.\n"

    def test_convert_to_file(self, workdir):
        """Test choosing the output format from the output path."""
        source = workdir / "doc.md"
        source.write_text(MARKDOWN)
        target = workdir / "out" / "doc.html"
        assert main(["convert", str(source), str(target)]) == EXIT_SUCCESS
        html = target.read_text()
        assert html.startswith("<!DOCTYPE html>")
        assert "<title>Title</title>" in html

    def test_no_standalone(self, workdir, capsys):
        """Test fragment output."""
        source = workdir / "doc.md"
        source.write_text(MARKDOWN)
        assert main(["convert", str(source), "--to", "html", "--no-standalone"]) == EXIT_SUCCESS
        assert capsys.readouterr().out == "<h1>Title</h1>\n<p>Some <em>text</em>.</p>\n"

    def test_config_file_options(self, workdir, capsys):
        """Test that configuration values apply to the conversion."""
        (workdir / ".docodec.toml").write_text("is_standalone = false\n")
        source = workdir / "doc.md"
        source.write_text(MARKDOWN)
        assert main(["convert", str(source), "--to", "html"]) == EXIT_SUCCESS
        assert capsys.readouterr().out == "<h1>Title</h1>\n<p>Some <em>text</em>.</p>\n"

    def test_argument_overrides_config(self, workdir, capsys):
        """Test that --standalone wins over the configuration file."""
        (workdir / ".docodec.toml").write_text("is_standalone = false\n")
        source = workdir / "doc.md"
        source.write_text(MARKDOWN)
        assert main(["convert", str(source), "--to", "md", "--standalone"]) == EXIT_SUCCESS
        assert capsys.readouterr().out.startswith("---\ntitle: Title\n---\n")

    def test_pdf_output(self, workdir):
        """Test binary output to a file."""
        source = workdir / "doc.md"
        source.write_text(MARKDOWN)
        target = workdir / "doc.pdf"
        assert main(["convert", str(source), str(target)]) == EXIT_SUCCESS
        assert target.read_bytes().startswith(b"%PDF")

    def test_missing_input(self, workdir, capsys):
        """Test the exit code for a missing input file."""
        assert main(["convert", str(workdir / "missing.md"), "--to", "html"]) == EXIT_FILE_ERROR
        assert "Error:" in capsys.readouterr().err

    def test_unsupported_decode(self, workdir, capsys):
        """Test the exit code when a format cannot be decoded."""
        source = workdir / "doc.pdf"
        source.write_bytes(b"%PDF-1.4")
        assert main(["convert", str(source), "--to", "md"]) == EXIT_FORMAT_ERROR
        assert "not supported" in capsys.readouterr().err

    def test_invalid_config(self, workdir, capsys):
        """Test the exit code for a broken configuration file."""
        (workdir / ".docodec.toml").write_text("= broken")
        source = workdir / "doc.md"
        source.write_text(MARKDOWN)
        assert main(["convert", str(source), "--to", "html"]) == EXIT_VALIDATION_ERROR
        assert "Invalid config file" in capsys.readouterr().err

    def test_log_file(self, workdir):
        """Test that --log-file writes debug logs."""
        source = workdir / "doc.md"
        source.write_text(MARKDOWN)
        log_file = workdir / "docodec.log"
        assert main(["convert", str(source), "--to", "txt", "-v", "--log-file", str(log_file)]) == EXIT_SUCCESS
        assert os.path.getsize(log_file) > 0

    def test_formats(self, workdir, capsys):
        """Test the formats listing."""
        assert main(["formats"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        lines = {line.split()[0]: line for line in out.splitlines()}
        assert "decode/encode" in lines["md"]
        assert lines["pdf"].split()[1] == "encode"
        assert "decode" in lines["doi"]
