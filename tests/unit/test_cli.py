"""
Unit tests for the command-line interface.
"""

from pathlib import Path

import pytest

from fileserve.__main__ import build_parser, config_from_args, main


def parse(*argv: str):
    return config_from_args(build_parser().parse_args(list(argv)))


class TestArguments:
    """Tests for argument parsing and the config they produce."""

    def test_directory_is_required(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args([])

        assert exc_info.value.code == 2
        assert "usage" in capsys.readouterr().err

    def test_defaults(self):
        config = parse("./public")

        assert config.root_dir == "./public"
        assert config.host == "127.0.0.1"
        assert config.port == 9000
        assert config.buffer_size == 8196
        assert config.timeout == 30.0
        assert config.strict_paths is True
        assert config.log_level == "INFO"

    def test_short_options(self):
        config = parse("site", "-H", "0.0.0.0", "-p", "8000", "-b", "4096", "-l", "DEBUG")

        assert config.host == "0.0.0.0"
        assert config.port == 8000
        assert config.buffer_size == 4096
        assert config.log_level == "DEBUG"

    def test_timeout_zero_disables_deadline(self):
        assert parse("site", "--timeout", "0").timeout is None

    def test_timeout_value(self):
        assert parse("site", "-t", "2.5").timeout == 2.5

    def test_allow_traversal(self):
        assert parse("site", "--allow-traversal").strict_paths is False

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["site", "--log-level", "TRACE"])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert "fileserve" in capsys.readouterr().out


class TestMain:
    """Tests for main() exit statuses that never reach the accept loop."""

    def test_missing_directory_argument(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_nonexistent_directory(self, tmp_path: Path, capsys):
        assert main([str(tmp_path / "missing")]) == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_file_instead_of_directory(self, tmp_path: Path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        assert main([str(path)]) == 1

    def test_invalid_buffer_size(self, tmp_path: Path, capsys):
        assert main([str(tmp_path), "--buffer-size", "10"]) == 1
        assert "buffer_size" in capsys.readouterr().err
