"""Tests for the command-line interface."""

import logging
import xml.etree.ElementTree as ET

import yaml
from click.testing import CliRunner
from conftest import SIMPLE_CHART_TEXT

from spc_labels import __version__
from spc_labels.cli import cli
from spc_labels.config import DEFAULT_CONFIG
from spc_labels.logging_config import configure_logging, resolve_log_level


def _chart_file(tmp_path, text=SIMPLE_CHART_TEXT):
    path = tmp_path / "chart.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestRender:
    def test_render_writes_svg(self, tmp_path):
        out = tmp_path / "out" / "chart.svg"
        result = CliRunner().invoke(
            cli, ["render", str(_chart_file(tmp_path)), "-o", str(out)]
        )
        assert result.exit_code == 0, result.output
        assert "2 label(s)" in result.output
        ET.fromstring(out.read_text(encoding="utf-8"))

    def test_render_size_and_theme_options(self, tmp_path):
        out = tmp_path / "chart.svg"
        result = CliRunner().invoke(
            cli,
            [
                "render",
                str(_chart_file(tmp_path)),
                "-o",
                str(out),
                "--width",
                "8",
                "--height",
                "4",
                "--theme",
                "plain",
                "--cache",
                "--debug",
            ],
        )
        assert result.exit_code == 0, result.output
        root = ET.fromstring(out.read_text(encoding="utf-8"))
        assert float(root.get("width")) == 768

    def test_render_without_surface(self, tmp_path):
        out = tmp_path / "chart.svg"
        result = CliRunner().invoke(
            cli,
            ["render", str(_chart_file(tmp_path)), "-o", str(out), "--measure", "none"],
        )
        assert result.exit_code == 0, result.output
        assert out.exists()

    def test_render_invalid_chart(self, tmp_path):
        path = _chart_file(tmp_path, "data: []\n")
        result = CliRunner().invoke(
            cli, ["render", str(path), "-o", str(tmp_path / "x.svg")]
        )
        assert result.exit_code != 0
        assert "non-empty list" in result.output

    def test_render_invalid_size(self, tmp_path):
        result = CliRunner().invoke(
            cli,
            [
                "render",
                str(_chart_file(tmp_path)),
                "-o",
                str(tmp_path / "x.svg"),
                "--width",
                "0",
            ],
        )
        assert result.exit_code != 0


class TestPlace:
    def test_two_labels(self):
        result = CliRunner().invoke(cli, ["place", "0.8", "0.2"])
        assert result.exit_code == 0, result.output
        assert "strategy: stacked-normal" in result.output
        assert "a: 0.7560" in result.output
        assert "b: 0.2440" in result.output
        assert "gap_factor: 1.0" in result.output

    def test_single_label(self):
        result = CliRunner().invoke(cli, ["place", "0.4"])
        assert result.exit_code == 0, result.output
        assert "strategy: single" in result.output
        assert "b:" not in result.output

    def test_range_option(self):
        result = CliRunner().invoke(
            cli, ["place", "0.53", "0.47", "--range", "0.39", "0.61"]
        )
        assert "strategy: shelved-center" in result.output


class TestConfigCommand:
    def test_dumps_defaults(self):
        result = CliRunner().invoke(cli, ["config"])
        assert result.exit_code == 0
        data = yaml.safe_load(result.output)
        assert data["relative_gap_line"] == DEFAULT_CONFIG.relative_gap_line
        assert data["gap_reduction_factors"] == [0.75, 0.5, 0.25, 0.1]


class TestLogging:
    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert __version__ in result.output

    def test_log_level_option(self):
        result = CliRunner().invoke(cli, ["--log-level", "debug", "config"])
        assert result.exit_code == 0
        assert logging.getLogger("spc_labels").level == logging.DEBUG
        configure_logging("WARNING")

    def test_resolve_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "info")
        assert resolve_log_level() == "INFO"
        assert resolve_log_level("error") == "ERROR"

    def test_unknown_level_uses_default(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert resolve_log_level("chatty") == "WARNING"
        assert configure_logging("chatty") == "WARNING"
