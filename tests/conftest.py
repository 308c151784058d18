"""Shared fixtures: a small real git repository with a known history."""

from __future__ import annotations

import dataclasses
import os
import pathlib
import shutil
import subprocess
import sys

import pytest


def git(cwd: pathlib.Path, *args: str, date: str | None = None) -> str:
    env = dict(os.environ)
    env.update(
        GIT_CONFIG_NOSYSTEM="1",
        GIT_AUTHOR_NAME="Ada",
        GIT_AUTHOR_EMAIL="ada@example.com",
        GIT_COMMITTER_NAME="Ada",
        GIT_COMMITTER_EMAIL="ada@example.com",
    )
    if date is not None:
        env["GIT_AUTHOR_DATE"] = date
        env["GIT_COMMITTER_DATE"] = date
    cp = subprocess.run(
        ["git", "-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false", *args],
        cwd=cwd,
        env=env,
        check=True,
        capture_output=True,
        text=True,
    )
    return cp.stdout.strip()


def write(root: pathlib.Path, rel: str, text: str) -> None:
    p = root / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")


@dataclasses.dataclass
class SampleRepo:
    path: pathlib.Path
    c1: str
    c2: str
    c3: str


@pytest.fixture
def sample_repo(tmp_path) -> SampleRepo:
    """
    History C1 (root) -> C2 -> C3 on ``main``.

    ``v1`` is a lightweight tag on C2, ``release`` an annotated tag on C1 and
    ``feature`` a branch left at C1.
    """
    root = tmp_path / "demo"
    _init(root)

    write(root, "readme.md", "# Hello\n")
    write(root, "src/a.py", "x = 1\n")
    git(root, "add", "-A")
    git(root, "commit", "-q", "-m", "initial commit", date="2024-01-01T12:00:00+00:00")
    c1 = git(root, "rev-parse", "HEAD")

    write(root, "src/a.py", "x = 2\ny = 3\n")
    write(root, "docs/guide.txt", "guide\n")
    git(root, "add", "-A")
    git(root, "commit", "-q", "-m", "second commit", date="2024-01-02T12:00:00+00:00")
    c2 = git(root, "rev-parse", "HEAD")

    write(root, "readme.md", "# Hello world\n")
    write(root, "aaa.txt", "first\n")
    write(root, "b.txt", "bee\n")
    write(root, "zeta/deep/leaf.txt", "leaf\n")
    git(root, "add", "-A")
    git(root, "commit", "-q", "-m", "third commit", date="2024-01-03T12:00:00+00:00")
    c3 = git(root, "rev-parse", "HEAD")

    git(root, "tag", "v1", c2)
    git(root, "tag", "-a", "release", "-m", "first release", c1, date="2024-01-04T12:00:00+00:00")
    git(root, "branch", "feature", c1)
    return SampleRepo(path=root, c1=c1, c2=c2, c3=c3)


def _init(root: pathlib.Path) -> None:
    if shutil.which("git") is None:
        pytest.skip("git is required")
    root.mkdir()
    git(root, "init", "-q")
    git(root, "symbolic-ref", "HEAD", "refs/heads/main")


@pytest.fixture
def index_repo(tmp_path) -> pathlib.Path:
    """One commit holding files named like listing pages: ``docs/index`` and ``~notes.txt``."""
    root = tmp_path / "indexed"
    _init(root)
    write(root, "docs/index", "the docs index file\n")
    write(root, "docs/other.txt", "other\n")
    write(root, "~notes.txt", "notes\n")
    git(root, "add", "-A")
    git(root, "commit", "-q", "-m", "index files", date="2024-02-01T12:00:00+00:00")
    return root


LATIN1_NAME = b"caf\xe9.txt"


@pytest.fixture
def latin1_repo(tmp_path) -> pathlib.Path:
    """One commit with a file whose name is Latin-1, not UTF-8."""
    if sys.platform != "linux":
        pytest.skip("needs a filesystem that accepts arbitrary name bytes")
    root = tmp_path / "latin1"
    _init(root)
    (root / os.fsdecode(LATIN1_NAME)).write_text("bonjour\n", encoding="utf-8")
    write(root, "plain.txt", "plain\n")
    git(root, "add", "-A")
    git(root, "commit", "-q", "-m", "latin-1 name", date="2024-02-01T12:00:00+00:00")
    return root
