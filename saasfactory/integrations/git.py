"""Local git repository setup for a freshly generated project."""

import asyncio
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from saasfactory.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

COMMIT_MESSAGE = "Initial commit: {name}\n\nGenerated with SaasFactory"

DEFAULT_GITIGNORE = """# Dependencies
node_modules

# Next.js
.next/
out/
build

# Local env files
.env*.local
.env

# Vercel
.vercel

# TypeScript
*.tsbuildinfo
next-env.d.ts

# Convex
.convex
"""


@dataclass
class GitResult:
    success: bool
    error: str | None = None


async def run_git(*args: str, cwd: Path) -> str:
    """Run one git command and return its stdout. Raises ExternalServiceError on failure."""
    try:
        proc = await asyncio.create_subprocess_exec(
            "git",
            *args,
            cwd=str(cwd),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise ExternalServiceError("git", "git is not installed") from e
    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        detail = stderr.decode(errors="replace").strip() or f"exit code {proc.returncode}"
        raise ExternalServiceError("git", f"git {args[0]} failed: {detail}")
    return stdout.decode(errors="replace").strip()


def is_git_installed() -> bool:
    return shutil.which("git") is not None


async def is_git_repo(path: Path) -> bool:
    try:
        await run_git("rev-parse", "--git-dir", cwd=path)
    except ExternalServiceError:
        return False
    # a parent repository also answers rev-parse; only a .git here counts
    return (path / ".git").exists()


def ensure_gitignore(path: Path) -> None:
    gitignore = path / ".gitignore"
    if not gitignore.exists():
        gitignore.write_text(DEFAULT_GITIGNORE, encoding="utf-8")


async def push_to_remote(path: Path, branch: str = "main") -> None:
    await run_git("branch", "-M", branch, cwd=path)
    await run_git("push", "-u", "origin", branch, cwd=path)


async def setup_git(
    path: Path,
    project_name: str,
    *,
    remote_url: str | None = None,
    push: bool = False,
) -> GitResult:
    """Init, commit and optionally add a remote and push. Never raises."""
    if not is_git_installed():
        return GitResult(success=False, error="Git is not installed")
    if await is_git_repo(path):
        return GitResult(success=False, error="Directory is already a git repository")
    try:
        ensure_gitignore(path)
        await run_git("init", cwd=path)
        await run_git("add", ".", cwd=path)
        await run_git("commit", "-m", COMMIT_MESSAGE.format(name=project_name), cwd=path)
        if remote_url:
            await run_git("remote", "add", "origin", remote_url, cwd=path)
            if push:
                await push_to_remote(path)
    except (ExternalServiceError, OSError) as e:
        logger.warning("Git setup failed for %s: %s", path, e)
        return GitResult(success=False, error=str(e))
    logger.info("Initialized git repository in %s", path)
    return GitResult(success=True)
