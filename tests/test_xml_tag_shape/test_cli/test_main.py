"""Tests for the CLI main module."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from xml_tag_shape.cli.main import (
    EXIT_INTERRUPTED,
    EXIT_OK,
    EXIT_SOURCE_UNAVAILABLE,
    EXIT_TRUNCATED,
    build_config,
    create_argument_parser,
    main,
)
from xml_tag_shape.shared import TruncationPolicy, UnderflowPolicy


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep the CLI from replacing pytest's logging handlers."""
    with patch("xml_tag_shape.cli.main.configure_logging") as mock_configure:
        yield mock_configure


@pytest.fixture
def xml_file(tmp_path: Path) -> Path:
    path = tmp_path / "doc.xml"
    path.write_bytes(b"<feed><entry><title/></entry><entry><id/></entry></feed>")
    return path


class TestArgumentParser:
    """Argument parsing."""

    def test_defaults(self):
        """Without arguments the sitemap file is used."""
        args = create_argument_parser().parse_args([])

        assert args.path == Path("sitemap.xml")
        assert args.indent is None
        assert args.verbose == 0
        assert not args.strict and not args.silent

    def test_policy_flags_are_exclusive(self):
        """--strict and --silent cannot be combined."""
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(["--strict", "--silent"])

    def test_build_config_flags(self):
        """Flags translate into configuration overrides."""
        args = create_argument_parser().parse_args(["x.xml", "--strict", "--indent", "4", "--unsorted"])

        config = build_config(args)

        assert config.builder.underflow_policy is UnderflowPolicy.WARN
        assert config.render.indent_width == 4
        assert config.render.sort_children is False

    def test_build_config_file_with_silent(self, tmp_path: Path):
        """A config file can be combined with a policy flag."""
        config_path = tmp_path / "shape.json"
        config_path.write_text(json.dumps({"render": {"indent_width": 1}}))
        args = create_argument_parser().parse_args(["x.xml", "-c", str(config_path), "--silent"])

        config = build_config(args)

        assert config.render.indent_width == 1
        assert config.builder.truncation_policy is TruncationPolicy.SILENT


class TestMain:
    """End-to-end command runs."""

    def test_prints_shape(self, xml_file: Path, capsys: pytest.CaptureFixture):
        """A clean file prints the tree and exits 0."""
        exit_code = main([str(xml_file)])

        captured = capsys.readouterr()
        assert exit_code == EXIT_OK
        assert captured.out == (
            "<feed>\n"
            "  <entry>\n"
            "    <id />\n"
            "    <title />\n"
            "  </entry>\n"
            "</feed>\n"
        )

    def test_custom_indent(self, xml_file: Path, capsys: pytest.CaptureFixture):
        """--indent changes the indentation unit."""
        main([str(xml_file), "--indent", "0"])

        assert capsys.readouterr().out.splitlines()[1] == "<entry>"

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture):
        """A missing input exits 2 with a message and no tree."""
        exit_code = main([str(tmp_path / "nope.xml")])

        captured = capsys.readouterr()
        assert exit_code == EXIT_SOURCE_UNAVAILABLE
        assert captured.out == ""
        assert "File not found" in captured.err

    def test_truncated_file_still_prints(self, tmp_path: Path, capsys: pytest.CaptureFixture):
        """Malformed input prints the partial tree and exits 1."""
        path = tmp_path / "broken.xml"
        path.write_bytes(b"<a><b/><b/>")

        exit_code = main([str(path)])

        assert exit_code == EXIT_TRUNCATED
        assert "<b />" in capsys.readouterr().out

    def test_summary_goes_to_stderr(self, xml_file: Path, capsys: pytest.CaptureFixture):
        """--summary writes JSON metrics to stderr."""
        main([str(xml_file), "--summary"])

        summary = json.loads(capsys.readouterr().err)
        assert summary["success"] is True
        assert summary["tag_names"] == ["entry", "feed", "id", "title"]
        assert summary["metrics"]["nodes_created"] == 4

    def test_invalid_config_file(self, xml_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture):
        """A broken configuration file is reported."""
        config_path = tmp_path / "bad.json"
        config_path.write_text("{broken")

        exit_code = main([str(xml_file), "--config", str(config_path)])

        assert exit_code == EXIT_SOURCE_UNAVAILABLE
        assert "invalid configuration" in capsys.readouterr().err

    def test_mistyped_config_value(self, xml_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture):
        """A wrongly typed configuration value exits 2 without a traceback."""
        config_path = tmp_path / "typed.json"
        config_path.write_text(json.dumps({"render": {"indent_width": "4"}}))

        exit_code = main([str(xml_file), "--config", str(config_path)])

        captured = capsys.readouterr()
        assert exit_code == EXIT_SOURCE_UNAVAILABLE
        assert captured.out == ""
        assert "indent_width must be an integer" in captured.err

    def test_verbosity_is_passed_to_logging(self, xml_file: Path, no_logging_setup):
        """-vv asks for debug logging, -q for errors only."""
        main([str(xml_file), "-vv"])
        no_logging_setup.assert_called_with(2)

        main([str(xml_file), "-q"])
        no_logging_setup.assert_called_with(-1)

    def test_keyboard_interrupt(self, xml_file: Path):
        """Interruption exits 130."""
        with patch("xml_tag_shape.cli.main.shape_file", side_effect=KeyboardInterrupt):
            assert main([str(xml_file)]) == EXIT_INTERRUPTED

    def test_version(self, capsys: pytest.CaptureFixture):
        """--version prints the package version."""
        with pytest.raises(SystemExit) as excinfo:
            main(["--version"])

        assert excinfo.value.code == 0
        assert "0.1.0" in capsys.readouterr().out
