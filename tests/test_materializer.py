"""Tests for working-copy materialization and storage removal."""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from blog_indexer.middleware.materializer import (
    ExtractionError,
    WorkingCopyMaterializer,
    validate_post_id,
)
from blog_indexer.middleware.timestamps import CommitTimestampResolver


def copy_cloner(source: Path, target: Path, timeout: float) -> None:
    shutil.copytree(source, target)
    (target / ".git").mkdir(exist_ok=True)
    (target / ".git" / "HEAD").write_text("ref: refs/heads/main\n")


def _make_roots(tmp_path: Path) -> tuple[Path, Path]:
    content_root = tmp_path / "data"
    repository_root = tmp_path / "git"
    content_root.mkdir()
    repository_root.mkdir()
    return content_root, repository_root


def test_materialize_replaces_previous_copy_and_strips_git(tmp_path: Path) -> None:
    content_root, repository_root = _make_roots(tmp_path)
    (repository_root / "hello").mkdir()
    (repository_root / "hello" / "README.md").write_text("# Hello\n")
    stale = content_root / "hello"
    stale.mkdir()
    (stale / "old.txt").write_text("stale")

    materializer = WorkingCopyMaterializer(
        content_root, repository_root, cloner=copy_cloner
    )
    target = materializer.materialize("hello")

    assert target == content_root / "hello"
    assert (target / "README.md").read_text() == "# Hello\n"
    assert not (target / "old.txt").exists()
    assert not (target / ".git").exists()


def test_missing_repository_raises_extraction_error(tmp_path: Path) -> None:
    content_root, repository_root = _make_roots(tmp_path)
    materializer = WorkingCopyMaterializer(
        content_root, repository_root, cloner=copy_cloner
    )

    with pytest.raises(ExtractionError, match="No repository"):
        materializer.materialize("ghost")


def test_clone_failure_raises_extraction_error(tmp_path: Path) -> None:
    content_root, repository_root = _make_roots(tmp_path)
    (repository_root / "broken").mkdir()

    def failing_cloner(source: Path, target: Path, timeout: float) -> None:
        raise RuntimeError("git clone exited with status 128: fatal")

    materializer = WorkingCopyMaterializer(
        content_root, repository_root, cloner=failing_cloner
    )

    with pytest.raises(ExtractionError, match="Unable to clone"):
        materializer.materialize("broken")


def test_clone_timeout_raises_extraction_error(tmp_path: Path) -> None:
    content_root, repository_root = _make_roots(tmp_path)
    (repository_root / "slow").mkdir()

    def slow_cloner(source: Path, target: Path, timeout: float) -> None:
        raise subprocess.TimeoutExpired(cmd=["git", "clone"], timeout=timeout)

    materializer = WorkingCopyMaterializer(
        content_root, repository_root, timeout=1.0, cloner=slow_cloner
    )

    with pytest.raises(ExtractionError):
        materializer.materialize("slow")


@pytest.mark.parametrize("post_id", ["", "../etc", "a/b", ".config", " padded"])
def test_invalid_ids_are_rejected(tmp_path: Path, post_id: str) -> None:
    content_root, repository_root = _make_roots(tmp_path)
    materializer = WorkingCopyMaterializer(
        content_root, repository_root, cloner=copy_cloner
    )

    with pytest.raises(ValueError):
        validate_post_id(post_id)
    with pytest.raises(ExtractionError):
        materializer.materialize(post_id)


def test_destroy_removes_both_storages_and_is_repeatable(tmp_path: Path) -> None:
    content_root, repository_root = _make_roots(tmp_path)
    (repository_root / "bye").mkdir()
    (content_root / "bye").mkdir()
    materializer = WorkingCopyMaterializer(
        content_root, repository_root, cloner=copy_cloner
    )

    materializer.destroy("bye")
    materializer.destroy("bye")

    assert not (repository_root / "bye").exists()
    assert not (content_root / "bye").exists()


def test_listing_skips_hidden_directories_and_files(tmp_path: Path) -> None:
    content_root, repository_root = _make_roots(tmp_path)
    for name in ("b", "a", ".config", ".pages"):
        (content_root / name).mkdir()
    (content_root / "notes.txt").write_text("x")
    (repository_root / "c").mkdir()

    materializer = WorkingCopyMaterializer(content_root, repository_root)

    assert materializer.list_working_copies() == ["a", "b"]
    assert materializer.list_repositories() == ["c"]


@pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")
def test_real_git_clone_and_commit_date(tmp_path: Path) -> None:
    content_root, repository_root = _make_roots(tmp_path)
    repo = repository_root / "real"
    repo.mkdir()
    env = {
        **os.environ,
        "GIT_AUTHOR_NAME": "Tester",
        "GIT_AUTHOR_EMAIL": "tester@example.com",
        "GIT_COMMITTER_NAME": "Tester",
        "GIT_COMMITTER_EMAIL": "tester@example.com",
        "GIT_AUTHOR_DATE": "2024-05-06 07:08:09 +0000",
        "GIT_COMMITTER_DATE": "2024-05-06 07:08:09 +0000",
    }
    subprocess.run(["git", "init", "--quiet", str(repo)], check=True, env=env)
    (repo / "README.md").write_text("<!-- public -->\n# Real\n", encoding="utf-8")
    subprocess.run(["git", "-C", str(repo), "add", "README.md"], check=True, env=env)
    subprocess.run(
        ["git", "-C", str(repo), "commit", "--quiet", "-m", "first"],
        check=True,
        env=env,
    )

    materializer = WorkingCopyMaterializer(content_root, repository_root)
    target = materializer.materialize("real")

    assert (target / "README.md").exists()
    assert not (target / ".git").exists()
    assert CommitTimestampResolver().resolve(repo) == "2024-05-06 07:08:09"
