"""Tests for haute.cli: command smoke tests via CliRunner.

Manifests are written to a temporary ``.py`` file and resolved against the
closet directory; nothing is ever invoked on a host instance.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from haute import __version__
from haute.cli.app import app
from haute.cli.utils import load_manifest

runner = CliRunner()


MANIFEST_SOURCE = """
MANIFEST = [
    {"place": "file", "method": "call_this"},
    {"place": "list-as-file", "method": "call_this_too", "list": True},
    {"place": "func", "method": "deep.call_this"},
    {"place": "doesnt-exist", "method": "never"},
]

OTHER = [{"place": "json-file", "method": "call_this_three"}]
"""


@pytest.fixture(autouse=True)
def _quiet_logs(monkeypatch):
    monkeypatch.setenv("HAUTE_LOG_LEVEL", "WARNING")
    monkeypatch.setenv("HAUTE_LOG_JSON", "true")


@pytest.fixture
def manifest_file(tmp_path):
    path = tmp_path / "manifest.py"
    path.write_text(MANIFEST_SOURCE)
    return path


# ─── Root callback ───────────────────────────────────────────────────────


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.stdout.strip() == f"haute {__version__}"

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "plan" in result.output
        assert "config" in result.output


# ─── plan ────────────────────────────────────────────────────────────────


class TestPlanCommand:
    def test_plan_json(self, manifest_file, closet):
        result = runner.invoke(
            app,
            ["plan", f"{manifest_file}:MANIFEST", "--instance", "widget", "--dirname", str(closet), "--json"],
        )

        assert result.exit_code == 0, result.output
        rows = json.loads(result.stdout)

        assert [row["method"] for row in rows] == ["call_this", "call_this_too", "call_this_too", "deep.call_this"]
        assert rows[0]["args"] == {"file": "value"}
        assert rows[0]["file"] == str(closet / "file.py")
        assert rows[1]["list"] is True
        assert rows[3]["lazy"] is True
        assert rows[3]["args"].startswith("<lazy exports")
        assert all(row["instance_name"] == "widget" for row in rows)

    def test_plan_default_attribute(self, manifest_file, closet):
        result = runner.invoke(
            app, ["plan", str(manifest_file), "-i", "widget", "-d", str(closet), "--json"]
        )
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.stdout)) == 4

    def test_plan_named_attribute(self, manifest_file, closet):
        result = runner.invoke(
            app, ["plan", f"{manifest_file}:OTHER", "-i", "widget", "-d", str(closet), "--json"]
        )
        rows = json.loads(result.stdout)
        assert rows[0]["args"] == {"json": "value"}

    def test_plan_table(self, manifest_file, closet):
        result = runner.invoke(app, ["plan", str(manifest_file), "-i", "widget", "-d", str(closet)])

        assert result.exit_code == 0, result.output
        assert "Plan: widget" in result.stdout
        assert "No calls resolved." not in result.stdout

    def test_plan_empty(self, tmp_path, closet):
        path = tmp_path / "empty.py"
        path.write_text("MANIFEST = [{'place': 'doesnt-exist', 'method': 'never'}]\n")

        result = runner.invoke(app, ["plan", str(path), "-i", "widget", "-d", str(closet)])

        assert result.exit_code == 0
        assert "No calls resolved." in result.stdout

    def test_plan_bad_directory(self, manifest_file, tmp_path):
        result = runner.invoke(
            app, ["plan", str(manifest_file), "-i", "widget", "-d", str(tmp_path / "missing")]
        )

        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_plan_missing_manifest_file(self, tmp_path, closet):
        result = runner.invoke(app, ["plan", str(tmp_path / "nope.py"), "-i", "widget", "-d", str(closet)])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_plan_missing_attribute(self, manifest_file, closet):
        result = runner.invoke(app, ["plan", f"{manifest_file}:NOPE", "-i", "widget", "-d", str(closet)])

        assert result.exit_code == 1
        assert "NOPE" in result.output

    def test_plan_requires_instance(self, manifest_file):
        result = runner.invoke(app, ["plan", str(manifest_file)])
        assert result.exit_code != 0


# ─── config ──────────────────────────────────────────────────────────────


class TestConfigCommand:
    def test_config_lists_settings(self, monkeypatch):
        monkeypatch.setenv("HAUTE_EXPORT_NAME", "manifest_value")

        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "export_name" in result.stdout
        assert "manifest_value" in result.stdout
        assert "log_level" in result.stdout


# ─── utils ───────────────────────────────────────────────────────────────


class TestLoadManifest:
    def test_module_reference(self, tmp_path, monkeypatch):
        (tmp_path / "haute_cli_manifest_module.py").write_text("MANIFEST = [{'place': 'a', 'method': 'b'}]\n")
        monkeypatch.syspath_prepend(str(tmp_path))

        assert load_manifest("haute_cli_manifest_module") == [{"place": "a", "method": "b"}]

    def test_file_reference(self, manifest_file):
        assert load_manifest(f"{manifest_file}:OTHER") == [{"place": "json-file", "method": "call_this_three"}]
