"""CLI entry point for mpm, the npm-style dependency manager for Maven.

Commands:
    mpm init [--yes]                          # Create a new pom.xml
    mpm install lombok                        # Add the latest version (aliases: i, add)
    mpm install jackson-databind@2.15.2       # Pin a version
    mpm install junit:junit --scope test      # Full coordinates + scope
    mpm search spring-boot [--limit 5]        # Search Maven Central (aliases: s, find)
    mpm versions com.google.guava:guava       # Released versions, newest first
    mpm list                                  # Dependencies by scope (alias: ls)
    mpm remove lombok                         # Remove a dependency (aliases: rm, uninstall)

Every command exits with 0 on success and 1 on failure.
"""

from __future__ import annotations

import asyncio
import json
import re
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import click

from mpm import __version__
from mpm.core.config import Settings
from mpm.core.console import Console
from mpm.core.logging import setup_logging
from mpm.exceptions import InputError, MpmError, NotFoundError
from mpm.executor import is_maven_available, resolve_dependencies
from mpm.pom.editor import PomEditor
from mpm.pom.models import DEFAULT_SCOPE, VALID_SCOPES, DependencyEntry
from mpm.pom.template import DEFAULT_JAVA_VERSION
from mpm.registry.client import MavenCentralClient
from mpm.resolver.coordinate import parse_coordinate
from mpm.resolver.resolve import resolve_coordinate
from mpm.resolver.selector import Selection

_ALIASES = {
    "i": "install",
    "add": "install",
    "rm": "remove",
    "uninstall": "remove",
    "ls": "list",
    "s": "search",
    "find": "search",
}

_SCOPE_LABELS = [
    ("compile", "Compile"),
    ("test", "Test"),
    ("provided", "Provided"),
    ("runtime", "Runtime"),
    ("system", "System"),
    ("import", "Import"),
]

_DEFAULT_GROUP_ID = "com.example"
_DEFAULT_VERSION = "1.0.0-SNAPSHOT"


class AliasedGroup(click.Group):
    """Group that also accepts the short command aliases (``i``, ``rm``, ...)."""

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        name = cmd_name.lower()
        return super().get_command(ctx, _ALIASES.get(name, name))

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        _, cmd, rest = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, rest


@dataclass
class CliContext:
    settings: Settings
    console: Console
    project_dir: Path

    @property
    def pom_path(self) -> Path:
        return self.project_dir / "pom.xml"


def _make_client(settings: Settings) -> MavenCentralClient:
    return MavenCentralClient(
        settings.search_url,
        timeout=settings.timeout,
        connect_timeout=settings.connect_timeout,
    )


def _exit_with(ctx: click.Context, action: Callable[[], int]) -> NoReturn:
    """Run a command body and exit with its code; mpm errors become exit 1."""
    cli: CliContext = ctx.obj
    try:
        code = action()
    except MpmError as exc:
        cli.console.error(str(exc))
        code = 1
    ctx.exit(code)


def sanitize_artifact_id(name: str) -> str:
    """Turn a directory name into a usable artifactId."""
    sanitized = re.sub(r"[^a-zA-Z0-9]", "-", name)
    sanitized = sanitized.strip("-").lower()
    if not sanitized or not sanitized[0].isalpha():
        return "app"
    return sanitized


def _require_pom(cli: CliContext) -> PomEditor | None:
    pom = PomEditor(cli.pom_path)
    if not pom.exists():
        cli.console.error("pom.xml not found in current directory")
        cli.console.info("Run 'mpm init' to create a new project")
        return None
    return pom


# ── group ─────────────────────────────────────────────────────────────────


@click.group(cls=AliasedGroup)
@click.version_option(version=__version__, prog_name="mpm", message="%(prog)s v%(version)s")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.option("--no-color", is_flag=True, help="Disable coloured output")
@click.option(
    "-C",
    "--directory",
    default=".",
    type=click.Path(file_okay=False, path_type=Path),
    help="Project directory (default: current directory)",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, no_color: bool, directory: Path) -> None:
    """mpm - Maven Package Manager.

    Add, remove and list pom.xml dependencies by name, the way npm does.
    """
    try:
        settings = Settings.from_env()
    except InputError as exc:
        click.echo(f"x {exc}", err=True)
        ctx.exit(1)
    if no_color:
        settings.color = False
    setup_logging("DEBUG" if verbose else settings.log_level, settings.log_format)
    ctx.obj = CliContext(settings=settings, console=Console(settings.color), project_dir=directory)


# ── install ───────────────────────────────────────────────────────────────


def _warn_ambiguous(console: Console, selection: Selection) -> None:
    top = selection.candidate
    console.warn("Multiple artifacts found. The most popular is:")
    console.line(f"  {console.bold(top.key)} ({top.version_count} versions)")
    console.line()
    console.info("If this is not the right one, use the full coordinates:")
    console.line(f"  mpm install {console.cyan('<groupId>:<artifactId>')}")
    if selection.alternatives:
        console.line()
        console.line("Other matches:")
        for alt in selection.alternatives:
            console.line("  " + console.dim(f"{alt.key} ({alt.version_count} versions)"))
    console.line()


async def _install(cli: CliContext, artifact: str | None, scope: str, resolve: bool) -> int:
    console = cli.console
    if not artifact:
        raise InputError("Missing artifact name. Usage: mpm install <artifact> [--scope <scope>]")
    if scope not in VALID_SCOPES:
        raise InputError(f"Invalid scope: {scope}. Valid scopes: {', '.join(VALID_SCOPES)}")

    pom = _require_pom(cli)
    if pom is None:
        return 1

    partial = parse_coordinate(artifact)
    async with _make_client(cli.settings) as client:
        if partial.group is None:
            console.info(f"Searching for {console.bold(partial.name)}...")
        resolution = await resolve_coordinate(client, partial)

    if resolution.selection is not None and resolution.selection.ambiguous:
        _warn_ambiguous(console, resolution.selection)

    coord = resolution.coordinate
    pom.load()
    if pom.has_dependency(coord.group, coord.name):
        console.warn(f"Dependency already exists: {coord.key}")
        console.info("Use 'mpm remove' to remove it first, or edit pom.xml manually")
        return 0

    scope_label = "" if scope == DEFAULT_SCOPE else f" ({scope})"
    console.info(f"Installing {console.bold(str(coord))}{scope_label}")
    pom.add_dependency(coord.group, coord.name, coord.version, scope)
    pom.save()
    console.success("Added to pom.xml")

    if not resolve:
        return 0

    mvn = cli.settings.mvn_command
    if not await is_maven_available(mvn):
        console.warn("Dependency added to pom.xml but Maven (mvn) was not found")
        console.info("Install Maven, then run 'mvn dependency:resolve'")
        return 1

    console.info("Downloading dependencies...")
    if await resolve_dependencies(cli.project_dir, mvn_command=mvn):
        console.success(f"Installed {coord}")
        return 0
    console.warn("Dependency added to pom.xml but Maven resolve failed")
    console.info("Try running 'mvn dependency:resolve' manually")
    return 1


@main.command()
@click.argument("artifact", required=False)
@click.option("--scope", default=DEFAULT_SCOPE, help=f"One of: {', '.join(VALID_SCOPES)}")
@click.option("--resolve/--no-resolve", default=True, help="Run 'mvn dependency:resolve' afterwards")
@click.pass_context
def install(ctx: click.Context, artifact: str | None, scope: str, resolve: bool) -> None:
    """Install a Maven dependency.

    ARTIFACT is a name (lombok), name@version, groupId:artifactId or
    groupId:artifactId:version.
    """
    _exit_with(ctx, lambda: asyncio.run(_install(ctx.obj, artifact, scope, resolve)))


# ── search ────────────────────────────────────────────────────────────────


async def _search(cli: CliContext, query: str | None, limit: int, as_json: bool) -> int:
    console = cli.console
    if not query:
        raise InputError("Missing search query. Usage: mpm search <query> [--limit <n>]")

    if not as_json:
        console.info(f"Searching for {console.bold(query)}...")
        console.line()

    async with _make_client(cli.settings) as client:
        results = await client.search(query, limit)

    if as_json:
        rows = [
            {
                "groupId": a.group,
                "artifactId": a.name,
                "latestVersion": a.latest_version,
                "versionCount": a.version_count,
            }
            for a in results
        ]
        console.line(json.dumps(rows, indent=2))
        return 0

    if not results:
        console.warn(f"No artifacts found matching: {query}")
        return 0

    console.line(console.bold(f"Found {len(results)} artifact(s):"))
    console.line()
    for i, artifact in enumerate(results, start=1):
        console.line(f"{console.dim(f'{i:2d}.')} {console.bold(artifact.key)}")
        console.line(
            f"     Latest: {console.green(artifact.latest_version)}"
            + console.dim(f" ({artifact.version_count} versions)")
        )
        if i == 1:
            console.line(f"     Install: {console.cyan('mpm install ' + artifact.key)}")
        console.line()
    return 0


@main.command()
@click.argument("query", required=False)
@click.option("--limit", default=10, show_default=True, type=int, help="Maximum results")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def search(ctx: click.Context, query: str | None, limit: int, as_json: bool) -> None:
    """Search Maven Central for artifacts."""
    _exit_with(ctx, lambda: asyncio.run(_search(ctx.obj, query, limit, as_json)))


# ── versions ──────────────────────────────────────────────────────────────


async def _versions(cli: CliContext, artifact: str | None, limit: int) -> int:
    console = cli.console
    if not artifact:
        raise InputError("Missing artifact name. Usage: mpm versions <groupId:artifactId>")

    partial = parse_coordinate(artifact)
    async with _make_client(cli.settings) as client:
        group, name = partial.group, partial.name
        if group is None:
            resolution = await resolve_coordinate(client, partial)
            if resolution.selection is not None and resolution.selection.ambiguous:
                _warn_ambiguous(console, resolution.selection)
            group, name = resolution.coordinate.group, resolution.coordinate.name
        versions = await client.list_versions(group, name)

    if not versions:
        raise NotFoundError(f"Artifact not found: {group}:{name}")

    shown = versions[:limit] if limit > 0 else versions
    console.line(console.bold(f"{group}:{name}") + console.dim(f" ({len(versions)} versions)"))
    for i, version in enumerate(shown):
        marker = console.green(" (latest)") if i == 0 else ""
        console.line(f"  {version}{marker}")
    if len(shown) < len(versions):
        console.line(console.dim(f"  ... {len(versions) - len(shown)} more"))
    return 0


@main.command()
@click.argument("artifact", required=False)
@click.option("--limit", default=20, show_default=True, type=int, help="Versions to show (0 = all)")
@click.pass_context
def versions(ctx: click.Context, artifact: str | None, limit: int) -> None:
    """List released versions of an artifact, newest first."""
    _exit_with(ctx, lambda: asyncio.run(_versions(ctx.obj, artifact, limit)))


# ── remove ────────────────────────────────────────────────────────────────


def _remove(cli: CliContext, artifact: str | None) -> int:
    console = cli.console
    if not artifact:
        raise InputError("Missing artifact name. Usage: mpm remove <artifact|groupId:artifactId>")

    pom = _require_pom(cli)
    if pom is None:
        return 1

    partial = parse_coordinate(artifact)
    pom.load()
    matches = pom.find_dependencies(partial.name, partial.group)

    if not matches:
        console.error(f"Dependency not found: {artifact}")
        console.info("Use 'mpm list' to see installed dependencies")
        return 1

    if len(matches) > 1:
        console.error(f"Multiple dependencies match '{partial.name}'")
        console.info(f"Please specify the full coordinates: mpm remove <groupId>:{partial.name}")
        for dep in matches:
            console.line(f"  - {dep.group}:{dep.name}")
        return 1

    target = matches[0]
    console.info(f"Removing {console.bold(f'{target.group}:{target.name}')}...")
    pom.remove_dependency(target.group, target.name)
    pom.save()
    console.success(f"Removed {target.group}:{target.name}")
    return 0


@main.command()
@click.argument("artifact", required=False)
@click.pass_context
def remove(ctx: click.Context, artifact: str | None) -> None:
    """Remove a dependency from pom.xml."""
    _exit_with(ctx, lambda: _remove(ctx.obj, artifact))


# ── list ──────────────────────────────────────────────────────────────────


def _group_by_scope(deps: list[DependencyEntry]) -> list[tuple[str, list[DependencyEntry]]]:
    by_scope: dict[str, list[DependencyEntry]] = {}
    for dep in deps:
        by_scope.setdefault(dep.effective_scope, []).append(dep)

    groups = [(label, by_scope.pop(scope)) for scope, label in _SCOPE_LABELS if scope in by_scope]
    # Whatever is left is a scope Maven itself would reject; show it anyway.
    groups.extend((scope.title(), entries) for scope, entries in sorted(by_scope.items()))
    return groups


def _list(cli: CliContext, as_json: bool) -> int:
    console = cli.console
    pom = _require_pom(cli)
    if pom is None:
        return 1

    deps = pom.list_dependencies()
    if as_json:
        console.line(json.dumps([d.to_dict() for d in deps], indent=2))
        return 0

    if not deps:
        console.info("No dependencies found")
        console.line("Run 'mpm install <artifact>' to add dependencies")
        return 0

    console.line(console.bold(f"Dependencies ({len(deps)}):"))
    console.line()
    for label, entries in _group_by_scope(deps):
        console.line(console.dim(f"  {label}:"))
        for dep in entries:
            version = console.green(f"@{dep.version}") if dep.version else ""
            console.line(f"    {dep.group}:{console.bold(dep.name)}{version}")
        console.line()
    return 0


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_(ctx: click.Context, as_json: bool) -> None:
    """List project dependencies."""
    _exit_with(ctx, lambda: _list(ctx.obj, as_json))


# ── init ──────────────────────────────────────────────────────────────────


def _init(
    cli: CliContext,
    yes: bool,
    group_id: str | None,
    artifact_id: str | None,
    version: str | None,
    java_version: str,
) -> int:
    console = cli.console
    pom = PomEditor(cli.pom_path)
    if pom.exists():
        console.error("pom.xml already exists in current directory")
        console.info("Use 'mpm install' to add dependencies")
        return 1

    default_artifact_id = sanitize_artifact_id(cli.project_dir.resolve().name)
    if yes:
        group_id = group_id or _DEFAULT_GROUP_ID
        artifact_id = artifact_id or default_artifact_id
        version = version or _DEFAULT_VERSION
    else:
        console.line(console.bold("Initialize new Maven project"))
        console.line()
        group_id = group_id or click.prompt("groupId", default=_DEFAULT_GROUP_ID)
        artifact_id = artifact_id or click.prompt("artifactId", default=default_artifact_id)
        version = version or click.prompt("version", default=_DEFAULT_VERSION)
        console.line()

    pom.create_new(group_id, artifact_id, version, java_version=java_version)

    console.success("Created pom.xml")
    console.line()
    console.line(console.dim("  groupId:    ") + group_id)
    console.line(console.dim("  artifactId: ") + artifact_id)
    console.line(console.dim("  version:    ") + version)
    console.line()
    console.info("Run 'mpm install <artifact>' to add dependencies")
    return 0


@main.command()
@click.option("-y", "--yes", is_flag=True, help="Accept defaults without prompting")
@click.option("-g", "--group-id", default=None, help="Project groupId")
@click.option("-a", "--artifact-id", default=None, help="Project artifactId")
@click.option("--version", "project_version", default=None, help="Project version")
@click.option("--java", "java_version", default=DEFAULT_JAVA_VERSION, show_default=True, help="Java release")
@click.pass_context
def init(
    ctx: click.Context,
    yes: bool,
    group_id: str | None,
    artifact_id: str | None,
    project_version: str | None,
    java_version: str,
) -> None:
    """Initialize a new Maven project."""
    _exit_with(ctx, lambda: _init(ctx.obj, yes, group_id, artifact_id, project_version, java_version))


# ── help / version ────────────────────────────────────────────────────────


@main.command("help")
@click.pass_context
def help_(ctx: click.Context) -> None:
    """Show this help message."""
    click.echo(ctx.parent.get_help() if ctx.parent else ctx.get_help())


@main.command("version")
def version_() -> None:
    """Show version."""
    click.echo(f"mpm v{__version__}")


def run() -> None:
    """Console-script entry point.

    Usage errors that click would report with exit code 2 are mapped to 1.
    """
    try:
        code = main.main(prog_name="mpm", standalone_mode=False)
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        code = 1
    except click.ClickException as exc:
        exc.show()
        code = 1
    sys.exit(1 if code else 0)
