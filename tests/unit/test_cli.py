"""Tests for the twcompat command line."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from twcompat import __version__
from twcompat.cli import app

runner = CliRunner()

BASELINE_YAML = """
default:
  --color-red-500: "#ef4444"
  --breakpoint-sm: 40rem
theme:
  --breakpoint-md: 50rem
variants:
  dark: "&:is(.my-dark)"
"""

PLUGIN_MODULE = '''
from twcompat.plugins import plugin as make_plugin


def tabs(api):
    api.add_utilities({".tab-4": {"tabSize": "4"}})


plugin = make_plugin(tabs)
'''


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "config.json").write_text(
        json.dumps(
            {
                "content": ["./src/**/*.html"],
                "theme": {"extend": {"colors": {"primary": "#c0ffee"}}},
            }
        )
    )
    (tmp_path / "baseline.yaml").write_text(BASELINE_YAML)
    (tmp_path / "plugin.py").write_text(PLUGIN_MODULE)
    return tmp_path


def _args(project: Path, *extra: str) -> list[str]:
    return [
        *extra,
        "--config",
        str(project / "config.json"),
        "--plugin",
        str(project / "plugin.py"),
        "--baseline",
        str(project / "baseline.yaml"),
        "--project-root",
        str(project),
    ]


class TestResolve:
    """Tests for the resolve command."""

    def test_css(self, project):
        result = runner.invoke(app, _args(project, "resolve"))

        assert result.exit_code == 0, result.output
        assert result.output.startswith(":root {")
        assert "--color-primary: #c0ffee;" in result.output
        assert "--breakpoint-md: 50rem;" in result.output
        assert "--color-red-500" not in result.output

    def test_json(self, project):
        result = runner.invoke(app, _args(project, "resolve", "--json"))

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["theme"]["--color-primary"] == "#c0ffee"
        assert data["content"] == [{"base": str(project.resolve()), "pattern": "./src/**/*.html"}]
        assert "dark" in data["variants"]

    def test_missing_config(self, project):
        result = runner.invoke(
            app,
            [
                "resolve",
                "--config",
                str(project / "missing.json"),
                "--project-root",
                str(project),
            ],
        )

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_no_overrides(self, tmp_path):
        result = runner.invoke(app, ["resolve", "--project-root", str(tmp_path)])

        assert result.exit_code == 0
        assert "/* no theme overrides */" in result.output


class TestInspect:
    """Tests for the inspect command."""

    def test_table(self, project):
        result = runner.invoke(app, _args(project, "inspect"))

        assert result.exit_code == 0, result.output
        assert "Theme" in result.output
        assert "--color-primary" in result.output
        assert "Plugin tabs: 1 utilities, 0 variants" in result.output


class TestBuild:
    """Tests for the build command."""

    def test_plugin_utility(self, project):
        result = runner.invoke(app, _args(project, "build") + ["tab-4"])

        assert result.exit_code == 0, result.output
        assert result.output == ".tab-4 {\n  tab-size: 4;\n}\n"

    def test_no_match(self, project):
        result = runner.invoke(app, _args(project, "build") + ["nope"])

        assert result.exit_code == 1


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"twcompat {__version__}" in result.output
