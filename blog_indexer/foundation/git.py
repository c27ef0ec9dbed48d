"""Low-level helpers for invoking the git CLI."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Sequence

__all__ = ["COMMIT_DATE_FORMAT", "clone_repository", "latest_commit_date", "run_git"]

COMMIT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def run_git(
    args: Sequence[str],
    *,
    binary: str = "git",
    timeout: float = 60.0,
    env: dict[str, str] | None = None,
) -> str:
    """Run ``git`` with ``args`` and return its stripped stdout."""

    command = [binary, *args]
    process = subprocess.run(
        command,
        capture_output=True,
        check=False,
        timeout=timeout,
        env=env,
    )
    if process.returncode != 0:
        stderr = process.stderr.decode("utf-8", errors="ignore").strip()
        raise RuntimeError(
            f"git {args[0] if args else ''} exited with status "
            f"{process.returncode}: {stderr or 'no stderr'}"
        )
    return process.stdout.decode("utf-8", errors="ignore").strip()


def clone_repository(
    source: Path | str,
    target: Path | str,
    *,
    binary: str = "git",
    timeout: float = 120.0,
) -> None:
    """Clone the repository at ``source`` into ``target``."""

    run_git(
        ["clone", "--quiet", str(source), str(target)],
        binary=binary,
        timeout=timeout,
    )


def latest_commit_date(
    repository: Path | str,
    *,
    binary: str = "git",
    timeout: float = 10.0,
) -> str:
    """Return the committer date of the newest commit in ``repository``."""

    return run_git(
        [
            "-C",
            str(repository),
            "log",
            "-1",
            "--format=%cd",
            f"--date=format:{COMMIT_DATE_FORMAT}",
        ],
        binary=binary,
        timeout=timeout,
    )
