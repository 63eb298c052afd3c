"""Tests for the interdoc CLI (typer CliRunner)."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from interdoc.cli import app
from interdoc.codecs.markup import MarkupCodec
from interdoc.document.models import Document, Paragraph, Run

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
    # Keep entry point plugins installed in the environment out of the way.
    with patch("interdoc.plugins.loader.CodecPluginLoader.load_all", return_value=[]):
        yield tmp_path


# ---------------------------------------------------------------------------
# convert
# ---------------------------------------------------------------------------


class TestConvert:
    def test_converts_beside_source(self, isolated):
        (isolated / "notes.txt").write_bytes(b"Hello\nWorld")
        result = runner.invoke(app, ["convert", "notes.txt", "--to", "markup"])
        assert result.exit_code == 0, result.output
        assert "Converted" in result.output
        doc = MarkupCodec().import_document((isolated / "notes.idoc").read_bytes())
        assert doc == Document((Paragraph((Run("Hello"),)), Paragraph((Run("World"),))))

    def test_output_dir_created(self, isolated):
        (isolated / "page.html").write_bytes(b"<p>x</p>")
        result = runner.invoke(app, ["convert", "page.html", "--to", "txt", "-o", "out/sub"])
        assert result.exit_code == 0, result.output
        assert (isolated / "out" / "sub" / "page.txt").read_bytes() == b"x\n"

    def test_same_format_skipped(self, isolated):
        (isolated / "a.txt").write_bytes(b"x")
        result = runner.invoke(app, ["convert", "a.txt", "--to", "txt"])
        assert result.exit_code == 0
        assert "Skipped" in result.output

    def test_malformed_input_fails(self, isolated):
        (isolated / "bad.html").write_bytes(b"<p>unterminated")
        result = runner.invoke(app, ["convert", "bad.html", "--to", "txt"])
        assert result.exit_code == 1
        assert "malformed_input" in result.output
        assert not (isolated / "bad.txt").exists()

    def test_missing_source(self, isolated):
        result = runner.invoke(app, ["convert", "nope.txt", "--to", "html"])
        assert result.exit_code == 1
        assert "is not a file" in result.output

    def test_invalid_target_rejected_by_parser(self, isolated):
        (isolated / "a.txt").write_bytes(b"x")
        result = runner.invoke(app, ["convert", "a.txt", "--to", "odt"])
        assert result.exit_code != 0

    def test_existing_output_needs_force(self, isolated):
        (isolated / "a.txt").write_bytes(b"new")
        (isolated / "a.html").write_bytes(b"old")
        result = runner.invoke(app, ["convert", "a.txt", "--to", "html"])
        assert result.exit_code == 1
        assert (isolated / "a.html").read_bytes() == b"old"

        result = runner.invoke(app, ["convert", "a.txt", "--to", "html", "--force"])
        assert result.exit_code == 0
        assert b"<p>new</p>" in (isolated / "a.html").read_bytes()

    def test_partial_failure_converts_the_rest(self, isolated):
        (isolated / "good.txt").write_bytes(b"ok")
        (isolated / "bad.rtf").write_bytes(b"not rtf")
        result = runner.invoke(app, ["convert", "good.txt", "bad.rtf", "--to", "html"])
        assert result.exit_code == 1
        assert (isolated / "good.html").exists()

    def test_config_applied(self, isolated):
        (isolated / "interdoc.yaml").write_text("text:\n  line_ending: crlf\n")
        (isolated / "a.idoc").write_bytes(b"%IDOC 1\n[normal]{|a}\n[normal]{|b}\n")
        result = runner.invoke(app, ["convert", "a.idoc", "--to", "txt"])
        assert result.exit_code == 0, result.output
        assert (isolated / "a.txt").read_bytes() == b"a\r\nb\r\n"

    def test_explicit_config_path(self, isolated):
        cfg = isolated / "custom.yaml"
        cfg.write_text("html:\n  title: Custom\n")
        (isolated / "a.txt").write_bytes(b"x")
        result = runner.invoke(app, ["--config", str(cfg), "convert", "a.txt", "--to", "html"])
        assert result.exit_code == 0, result.output
        assert b"<title>Custom</title>" in (isolated / "a.html").read_bytes()

    def test_bad_config_reported(self, isolated):
        (isolated / "interdoc.yaml").write_text("rtf:\n  font_size: 0\n")
        result = runner.invoke(app, ["formats"])
        assert result.exit_code == 1
        assert "Invalid config" in result.output


# ---------------------------------------------------------------------------
# formats
# ---------------------------------------------------------------------------


class TestFormats:
    def test_lists_builtin_codecs(self):
        result = runner.invoke(app, ["formats"])
        assert result.exit_code == 0, result.output
        for name in ("markup", "docx", "rtf", "html", "txt"):
            assert name in result.output
        assert ".idoc" in result.output


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_init_writes_template(self, isolated):
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 0
        assert "log_level" in (isolated / "interdoc.yaml").read_text()

    def test_init_refuses_to_overwrite(self, isolated):
        (isolated / "interdoc.yaml").write_text("log_level: debug\n")
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_init_force_and_custom_path(self, isolated):
        target = isolated / "conf.yaml"
        target.write_text("old")
        result = runner.invoke(app, ["config", "init", "--path", str(target), "--force"])
        assert result.exit_code == 0
        assert target.read_text() != "old"

    def test_show_prints_effective_config(self, isolated):
        (isolated / "interdoc.yaml").write_text("rtf:\n  font: Georgia\n")
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "Georgia" in result.output
