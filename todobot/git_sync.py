from __future__ import annotations

from dataclasses import dataclass
import subprocess
from pathlib import Path
from urllib.parse import quote, urlsplit, urlunsplit

from .config import GitConfig
from .errors import SyncError


def _run_git(repo_root: Path, *args: str, timeout_s: float = 30.0) -> subprocess.CompletedProcess[str]:
    try:
        return subprocess.run(
            ["git", *args],
            cwd=str(repo_root),
            text=True,
            capture_output=True,
            check=False,
            timeout=timeout_s,
        )
    except Exception:
        return subprocess.CompletedProcess(args=["git", *args], returncode=124, stdout="", stderr="git invocation failed")


@dataclass(frozen=True)
class SyncResult:
    ok: bool
    changed: bool
    summary: str
    commit: str = ""


def _redact(text: str, secret: str) -> str:
    if not secret:
        return text
    return text.replace(secret, "***").replace(quote(secret, safe=""), "***")


def _detail(proc: subprocess.CompletedProcess[str], git: GitConfig) -> str:
    detail = " ".join(proc.stderr.strip().split()) or f"exit={proc.returncode}"
    return _redact(detail, git.token)


def authenticated_url(url: str, username: str, token: str) -> str:
    """Embed credentials into an https remote; other schemes pass through."""

    parts = urlsplit(url)
    if parts.scheme != "https" or not token:
        return url
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    netloc = f"{quote(username, safe='')}:{quote(token, safe='')}@{host}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


def is_git_repo(repo_root: Path) -> bool:
    if not repo_root.is_dir():
        return False
    proc = _run_git(repo_root, "rev-parse", "--is-inside-work-tree")
    return proc.returncode == 0 and proc.stdout.strip() == "true"


def _remote_and_branch(repo_root: Path, git: GitConfig) -> tuple[str, str]:
    if not is_git_repo(repo_root):
        raise SyncError(f"sync failed: {repo_root} is not a git repository")
    remote = _run_git(repo_root, "remote", "get-url", "origin")
    if remote.returncode != 0 or not remote.stdout.strip():
        raise SyncError("sync failed: no `origin` remote configured")
    branch = _run_git(repo_root, "rev-parse", "--abbrev-ref", "HEAD")
    name = branch.stdout.strip()
    if branch.returncode != 0 or not name or name == "HEAD":
        raise SyncError("sync failed: record directory is not on a branch")
    return authenticated_url(remote.stdout.strip(), git.username, git.token), name


def pull_records(repo_root: Path, git: GitConfig) -> SyncResult:
    url, branch = _remote_and_branch(repo_root, git)
    proc = _run_git(repo_root, "pull", "--ff-only", url, branch)
    if proc.returncode != 0:
        raise SyncError(f"pull failed: {_detail(proc, git)}")
    changed = "Already up to date" not in proc.stdout
    return SyncResult(True, changed, "pulled" if changed else "already up to date")


def _identity_args(git: GitConfig) -> list[str]:
    args: list[str] = []
    if git.username:
        args.extend(["-c", f"user.name={git.username}"])
    if git.mail:
        args.extend(["-c", f"user.email={git.mail}"])
    return args


def push_records(repo_root: Path, git: GitConfig, *, message: str) -> SyncResult:
    url, branch = _remote_and_branch(repo_root, git)

    status = _run_git(repo_root, "status", "--porcelain")
    if status.returncode != 0:
        raise SyncError(f"status failed: {_detail(status, git)}")
    if not status.stdout.strip():
        return SyncResult(True, False, "no pending changes")

    add = _run_git(repo_root, "add", "-A")
    if add.returncode != 0:
        raise SyncError(f"add failed: {_detail(add, git)}")

    commit = _run_git(repo_root, *_identity_args(git), "commit", "-m", message)
    if commit.returncode != 0:
        raise SyncError(f"commit failed: {_detail(commit, git)}")

    head = _run_git(repo_root, "rev-parse", "--short", "HEAD")
    sha = head.stdout.strip() if head.returncode == 0 else ""

    push = _run_git(repo_root, "push", url, f"HEAD:{branch}")
    if push.returncode != 0:
        raise SyncError(f"push failed: {_detail(push, git)}")
    return SyncResult(True, True, "committed and pushed", commit=sha)
