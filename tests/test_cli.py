"""Tests for CLI commands — registry and Maven are mocked."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from conftest import SAMPLE_POM
from mpm import __version__
from mpm.cli import main, run, sanitize_artifact_id
from mpm.pom.editor import PomEditor
from mpm.pom.template import render_pom
from mpm.testing import FakeRegistry


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def fake_central(registry: FakeRegistry):
    with patch("mpm.cli._make_client", side_effect=lambda settings: registry.client()):
        yield registry


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "pom.xml").write_text(render_pom("com.example", "demo", "1.0.0-SNAPSHOT"))
    return tmp_path


def _invoke(runner: CliRunner, directory: Path, *args: str):
    return runner.invoke(main, ["--no-color", "-C", str(directory), *args])


# ── sanitize ──


class TestSanitizeArtifactId:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("my-app", "my-app"),
            ("My Cool_App", "my-cool-app"),
            ("--demo--", "demo"),
            ("123service", "app"),
            ("___", "app"),
            ("", "app"),
        ],
    )
    def test_sanitize(self, name, expected):
        assert sanitize_artifact_id(name) == expected


# ── install ──


class TestInstall:
    def test_pinned_version(self, runner, project, fake_central):
        result = _invoke(runner, project, "install", "jackson-databind@2.15.2", "--no-resolve")
        assert result.exit_code == 0, result.output
        assert "Added to pom.xml" in result.output
        deps = PomEditor(project / "pom.xml").list_dependencies()
        assert [(d.group, d.name, d.version, d.scope) for d in deps] == [
            ("com.fasterxml.jackson.core", "jackson-databind", "2.15.2", None)
        ]
        assert "<scope>" not in (project / "pom.xml").read_text()

    def test_full_coordinates_with_scope(self, runner, project, fake_central):
        result = _invoke(runner, project, "i", "junit:junit", "--scope", "test", "--no-resolve")
        assert result.exit_code == 0, result.output
        entry = PomEditor(project / "pom.xml").find_dependencies("junit")[0]
        assert (entry.version, entry.scope) == ("4.13.2", "test")
        assert "(test)" in result.output

    def test_ambiguous_name_warns(self, runner, project, fake_central):
        result = _invoke(runner, project, "add", "spring", "--no-resolve")
        assert result.exit_code == 0, result.output
        assert "Multiple artifacts found" in result.output
        assert "org.springframework.boot:spring-boot-starter (250 versions)" in result.output
        assert "org.springframework.boot:spring-boot (240 versions)" in result.output
        assert PomEditor(project / "pom.xml").has_dependency(
            "org.springframework.boot", "spring-boot-starter"
        )

    def test_existing_dependency_is_warning(self, runner, tmp_path, fake_central):
        (tmp_path / "pom.xml").write_text(SAMPLE_POM)
        result = _invoke(runner, tmp_path, "install", "lombok", "--no-resolve")
        assert result.exit_code == 0, result.output
        assert "Dependency already exists: org.projectlombok:lombok" in result.output
        assert (tmp_path / "pom.xml").read_text() == SAMPLE_POM

    def test_invalid_scope(self, runner, project, fake_central):
        result = _invoke(runner, project, "install", "lombok", "--scope", "bogus")
        assert result.exit_code == 1
        assert "Invalid scope: bogus" in result.output
        assert fake_central.requests == []

    def test_missing_argument(self, runner, project):
        result = _invoke(runner, project, "install")
        assert result.exit_code == 1
        assert "Missing artifact name" in result.output

    def test_without_pom(self, runner, tmp_path, fake_central):
        result = _invoke(runner, tmp_path, "install", "lombok")
        assert result.exit_code == 1
        assert "pom.xml not found" in result.output
        assert fake_central.requests == []

    def test_not_found(self, runner, project, fake_central):
        result = _invoke(runner, project, "install", "nonexistent", "--no-resolve")
        assert result.exit_code == 1
        assert "No artifacts found matching: nonexistent" in result.output

    def test_registry_failure(self, runner, project):
        with patch("mpm.cli._make_client", side_effect=lambda s: FakeRegistry(status=503).client()):
            result = _invoke(runner, project, "install", "lombok")
        assert result.exit_code == 1
        assert "status 503" in result.output
        assert PomEditor(project / "pom.xml").list_dependencies() == []

    def test_runs_maven_resolve(self, runner, project, fake_central):
        with patch("mpm.cli.is_maven_available", new=AsyncMock(return_value=True)), patch(
            "mpm.cli.resolve_dependencies", new=AsyncMock(return_value=True)
        ) as resolve:
            result = _invoke(runner, project, "install", "lombok")
        assert result.exit_code == 0, result.output
        assert "Installed org.projectlombok:lombok@1.18.30" in result.output
        resolve.assert_awaited_once()
        assert resolve.await_args.args == (project,)

    def test_maven_resolve_failure(self, runner, project, fake_central):
        with patch("mpm.cli.is_maven_available", new=AsyncMock(return_value=True)), patch(
            "mpm.cli.resolve_dependencies", new=AsyncMock(return_value=False)
        ):
            result = _invoke(runner, project, "install", "lombok")
        assert result.exit_code == 1
        assert "Maven resolve failed" in result.output
        assert PomEditor(project / "pom.xml").has_dependency("org.projectlombok", "lombok")

    def test_maven_missing(self, runner, project, fake_central):
        with patch("mpm.cli.is_maven_available", new=AsyncMock(return_value=False)), patch(
            "mpm.cli.resolve_dependencies", new=AsyncMock()
        ) as resolve:
            result = _invoke(runner, project, "install", "lombok")
        assert result.exit_code == 1
        assert "Maven (mvn) was not found" in result.output
        resolve.assert_not_awaited()


# ── search / versions ──


class TestSearch:
    def test_lists_results(self, runner, tmp_path, fake_central):
        result = _invoke(runner, tmp_path, "search", "spring-boot")
        assert result.exit_code == 0, result.output
        assert "Found 2 artifact(s):" in result.output
        assert "mpm install org.springframework.boot:spring-boot-starter" in result.output
        assert result.output.index("spring-boot-starter") < result.output.index(
            "org.springframework.boot:spring-boot\n"
        )

    def test_limit(self, runner, tmp_path, fake_central):
        result = _invoke(runner, tmp_path, "s", "spring", "--limit", "1")
        assert result.exit_code == 0
        assert "Found 1 artifact(s):" in result.output
        assert fake_central.requests[0].url.params["rows"] == "1"

    def test_json(self, runner, tmp_path, fake_central):
        result = _invoke(runner, tmp_path, "find", "lombok", "--json")
        assert result.exit_code == 0
        assert json.loads(result.output) == [
            {
                "groupId": "org.projectlombok",
                "artifactId": "lombok",
                "latestVersion": "1.18.30",
                "versionCount": 60,
            }
        ]

    def test_no_results(self, runner, tmp_path, fake_central):
        result = _invoke(runner, tmp_path, "search", "zzz")
        assert result.exit_code == 0
        assert "No artifacts found matching: zzz" in result.output

    def test_missing_query(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "search")
        assert result.exit_code == 1
        assert "Missing search query" in result.output


class TestVersions:
    def test_full_coordinates(self, runner, tmp_path, fake_central):
        result = _invoke(runner, tmp_path, "versions", "com.fasterxml.jackson.core:jackson-databind")
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0] == "com.fasterxml.jackson.core:jackson-databind (4 versions)"
        assert lines[1:] == ["  2.15.2 (latest)", "  2.15.1", "  2.15.0", "  2.14.3"]

    def test_bare_name_and_limit(self, runner, tmp_path, fake_central):
        result = _invoke(runner, tmp_path, "versions", "jackson-databind", "--limit", "2")
        assert result.exit_code == 0, result.output
        assert "  2.15.1\n" in result.output
        assert "2.15.0" not in result.output
        assert "... 2 more" in result.output

    def test_unknown(self, runner, tmp_path, fake_central):
        result = _invoke(runner, tmp_path, "versions", "org.nope:nope")
        assert result.exit_code == 1
        assert "Artifact not found: org.nope:nope" in result.output


# ── remove / list ──


class TestRemove:
    def test_by_name(self, runner, tmp_path):
        (tmp_path / "pom.xml").write_text(SAMPLE_POM)
        result = _invoke(runner, tmp_path, "rm", "lombok")
        assert result.exit_code == 0, result.output
        assert "Removed org.projectlombok:lombok" in result.output
        assert not PomEditor(tmp_path / "pom.xml").has_dependency("org.projectlombok", "lombok")

    def test_not_found(self, runner, tmp_path):
        (tmp_path / "pom.xml").write_text(SAMPLE_POM)
        result = _invoke(runner, tmp_path, "uninstall", "junit-bom")
        assert result.exit_code == 1
        assert "Dependency not found: junit-bom" in result.output
        assert (tmp_path / "pom.xml").read_text() == SAMPLE_POM

    def test_several_matches(self, runner, project):
        pom = PomEditor(project / "pom.xml")
        pom.add_dependency("org.one", "commons", "1.0")
        pom.add_dependency("org.two", "commons", "2.0")
        pom.save()

        result = _invoke(runner, project, "remove", "commons")
        assert result.exit_code == 1
        assert "Multiple dependencies match 'commons'" in result.output
        assert "  - org.one:commons" in result.output
        assert "  - org.two:commons" in result.output

        result = _invoke(runner, project, "remove", "org.two:commons")
        assert result.exit_code == 0, result.output
        assert [d.group for d in PomEditor(project / "pom.xml").list_dependencies()] == ["org.one"]

    def test_without_pom(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "remove", "lombok")
        assert result.exit_code == 1
        assert "pom.xml not found" in result.output


class TestList:
    def test_grouped_by_scope(self, runner, tmp_path):
        (tmp_path / "pom.xml").write_text(SAMPLE_POM)
        result = _invoke(runner, tmp_path, "ls")
        assert result.exit_code == 0, result.output
        out = result.output
        assert "Dependencies (3):" in out
        assert out.index("Compile:") < out.index("Test:") < out.index("Provided:")
        assert "com.google.guava:guava@${guava.version}" in out
        assert "    org.junit.jupiter:junit-jupiter\n" in out
        assert "junit-bom" not in out

    def test_json(self, runner, tmp_path):
        (tmp_path / "pom.xml").write_text(SAMPLE_POM)
        result = _invoke(runner, tmp_path, "list", "--json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data[1] == {
            "groupId": "org.junit.jupiter",
            "artifactId": "junit-jupiter",
            "version": None,
            "scope": "test",
        }

    def test_empty(self, runner, project):
        result = _invoke(runner, project, "list")
        assert result.exit_code == 0
        assert "No dependencies found" in result.output

    def test_malformed_pom(self, runner, tmp_path):
        (tmp_path / "pom.xml").write_text("<project>")
        result = _invoke(runner, tmp_path, "list")
        assert result.exit_code == 1
        assert "could not be loaded" in result.output


# ── init ──


class TestInit:
    def test_yes_uses_defaults(self, runner, tmp_path):
        project_dir = tmp_path / "My Cool_App"
        project_dir.mkdir()
        result = _invoke(runner, project_dir, "init", "--yes")
        assert result.exit_code == 0, result.output
        assert "Created pom.xml" in result.output
        assert (project_dir / "pom.xml").read_text() == render_pom(
            "com.example", "my-cool-app", "1.0.0-SNAPSHOT"
        )

    def test_options(self, runner, tmp_path):
        result = _invoke(
            runner, tmp_path, "init", "-y", "-g", "org.acme", "-a", "shop", "--version", "0.1.0", "--java", "21"
        )
        assert result.exit_code == 0, result.output
        assert (tmp_path / "pom.xml").read_text() == render_pom("org.acme", "shop", "0.1.0", "21")

    def test_prompts(self, runner, tmp_path):
        result = runner.invoke(
            main, ["--no-color", "-C", str(tmp_path), "init", "-a", "svc"], input="org.acme\n\n"
        )
        assert result.exit_code == 0, result.output
        assert (tmp_path / "pom.xml").read_text() == render_pom("org.acme", "svc", "1.0.0-SNAPSHOT")

    def test_refuses_existing(self, runner, project):
        before = (project / "pom.xml").read_text()
        result = _invoke(runner, project, "init", "--yes")
        assert result.exit_code == 1
        assert "pom.xml already exists" in result.output
        assert (project / "pom.xml").read_text() == before


# ── misc ──


class TestMisc:
    def test_version_command(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "version")
        assert result.output == f"mpm v{__version__}\n"

    def test_version_option(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert result.output == f"mpm v{__version__}\n"

    def test_help_lists_commands(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "help")
        assert result.exit_code == 0
        for name in ("install", "search", "remove", "init", "list", "versions"):
            assert name in result.output

    def test_bad_timeout_env(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("MPM_HTTP_TIMEOUT", "soon")
        result = _invoke(runner, tmp_path, "list")
        assert result.exit_code == 1
        assert "MPM_HTTP_TIMEOUT" in result.output

    def test_run_maps_usage_error_to_one(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["mpm", "--no-such-option"])
        with pytest.raises(SystemExit) as exc_info:
            run()
        assert exc_info.value.code == 1

    def test_run_success(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["mpm", "version"])
        with pytest.raises(SystemExit) as exc_info:
            run()
        assert exc_info.value.code == 0
        assert capsys.readouterr().out == f"mpm v{__version__}\n"

    def test_run_command_failure(self, monkeypatch, tmp_path):
        monkeypatch.setattr(sys, "argv", ["mpm", "-C", str(tmp_path), "list"])
        with pytest.raises(SystemExit) as exc_info:
            run()
        assert exc_info.value.code == 1
