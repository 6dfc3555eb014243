"""Tests for the gilt command line."""

import pytest
from typer.testing import CliRunner

from gilt import __version__
from gilt.cli import typer_app
from gilt.config import BASE_DIR_ENV

runner = CliRunner()


@pytest.fixture
def project(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(BASE_DIR_ENV, raising=False)
    monkeypatch.delenv("GILT_DEBUG", raising=False)
    views = tmp_path / "views"
    views.mkdir()
    (views / "hello.gilt").write_text("p\n  | Hello,\n  = name\n")
    (views / "broken.gilt").write_text("div#a#b\n")
    return tmp_path


def test_version():
    result = runner.invoke(typer_app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_compile_prints_markup(project):
    result = runner.invoke(typer_app, ["compile", "hello", "--base-dir", "views"])
    assert result.exit_code == 0
    assert result.output == "<p>Hello,{{name}}</p>"


def test_compile_to_file(project):
    out = project / "build" / "hello.j2"
    result = runner.invoke(
        typer_app, ["compile", "hello", "--base-dir", "views", "-o", str(out)]
    )
    assert result.exit_code == 0
    assert out.read_text() == "<p>Hello,{{name}}</p>"


def test_render_with_data(project):
    (project / "data.yaml").write_text("name: World\n")
    result = runner.invoke(
        typer_app, ["render", "hello", "--base-dir", "views", "-d", "data.yaml"]
    )
    assert result.exit_code == 0
    assert result.output == "<p>Hello,World</p>"


def test_base_dir_from_config_file(project):
    (project / "gilt.yaml").write_text("base_dir: views\n")
    result = runner.invoke(typer_app, ["compile", "hello"])
    assert result.exit_code == 0
    assert "{{name}}" in result.output


def test_template_error_exits_nonzero(project):
    result = runner.invoke(typer_app, ["compile", "broken", "--base-dir", "views"])
    assert result.exit_code == 1
    assert "Error" in result.output
    assert "multiple ids" in result.output


def test_missing_template(project):
    result = runner.invoke(typer_app, ["compile", "nope", "--base-dir", "views"])
    assert result.exit_code == 1
    assert "template not found" in result.output


def test_missing_config_file(project):
    result = runner.invoke(typer_app, ["compile", "hello", "-c", "other.yaml"])
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_non_mapping_data_file(project):
    (project / "data.yaml").write_text("- 1\n")
    result = runner.invoke(
        typer_app, ["render", "hello", "--base-dir", "views", "-d", "data.yaml"]
    )
    assert result.exit_code == 1
    assert "mapping" in result.output


def test_malformed_data_file(project):
    (project / "data.yaml").write_text("name: [unclosed\n")
    result = runner.invoke(
        typer_app, ["render", "hello", "--base-dir", "views", "-d", "data.yaml"]
    )
    assert result.exit_code == 1
    assert "Invalid data file" in result.output
