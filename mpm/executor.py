"""Run Maven as a subprocess."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import structlog

log = structlog.get_logger("mpm.maven")


def default_mvn_command() -> str:
    return "mvn.cmd" if os.name == "nt" else "mvn"


async def run_maven(project_dir: Path, *goals: str, mvn_command: str | None = None) -> bool:
    """Run ``mvn <goals>`` in *project_dir* and wait for it.

    The child shares this process's stdin/stdout/stderr. Returns True on
    exit code 0; any other outcome, including a missing ``mvn``, is False.
    """
    cmd = [mvn_command or default_mvn_command(), *goals]
    try:
        proc = await asyncio.create_subprocess_exec(*cmd, cwd=str(project_dir))
    except OSError as exc:
        log.error("maven.start_failed", cmd=cmd, error=str(exc))
        return False
    returncode = await proc.wait()
    if returncode != 0:
        log.warning("maven.failed", cmd=cmd, returncode=returncode)
    return returncode == 0


async def resolve_dependencies(project_dir: Path, *, mvn_command: str | None = None) -> bool:
    """Download the pom's dependencies into the local repository."""
    return await run_maven(project_dir, "dependency:resolve", "-q", mvn_command=mvn_command)


async def is_maven_available(mvn_command: str | None = None) -> bool:
    try:
        proc = await asyncio.create_subprocess_exec(
            mvn_command or default_mvn_command(),
            "-v",
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError:
        return False
    return await proc.wait() == 0
