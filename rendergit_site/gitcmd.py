"""
Read-only access to a git repository through the ``git`` executable.

Every query shells out once and parses porcelain output. A ``Repository``
holds no mutable state, so one instance is shared by all workers.
"""

from __future__ import annotations

import dataclasses
import os
import subprocess
from typing import List, Optional, Tuple

import structlog

from rendergit_site.errors import RepositoryError
from rendergit_site.models import GitRef

logger = structlog.get_logger()

# field sep 0x1f, record sep 0x1e; ISO strict dates
LOG_FORMAT = "%H%x1f%P%x1f%an%x1f%ae%x1f%aI%x1f%s%x1f%B%x1e"


def run(cmd: List[str], cwd: str | None = None) -> str:
    # Paths are bytes to git. fsdecode keeps undecodable bytes as surrogates,
    # and subprocess fsencodes them back when a path is passed to git again.
    return os.fsdecode(run_bytes(cmd, cwd=cwd))


def run_bytes(cmd: List[str], cwd: str | None = None) -> bytes:
    try:
        cp = subprocess.run(cmd, cwd=cwd, check=True, capture_output=True)
    except subprocess.CalledProcessError as e:
        stderr = e.stderr.decode("utf-8", errors="replace").strip()
        raise RepositoryError(
            f"`{' '.join(cmd)}` failed with exit code {e.returncode}: {stderr}",
            cmd=cmd,
            stderr=stderr,
        ) from e
    except FileNotFoundError as e:
        raise RepositoryError(f"cannot run `{cmd[0]}` in {cwd or '.'}: {e}", cmd=cmd) from e
    return cp.stdout


# ---- porcelain records -------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class LsTreeEntry:
    mode: str
    type: str  # blob, tree or commit (submodule)
    object_id: str
    size: int
    name: str


@dataclasses.dataclass(frozen=True)
class RawCommit:
    sha: str
    parents: Tuple[str, ...]
    author_name: str
    author_email: str
    author_date_iso: str
    subject: str
    body: str

    @property
    def first_parent(self) -> Optional[str]:
        return self.parents[0] if self.parents else None


@dataclasses.dataclass(frozen=True)
class RawDiffEntry:
    status: str  # e.g. "M", "A", "R100"
    old_mode: str
    new_mode: str
    old_path: str
    new_path: str


@dataclasses.dataclass(frozen=True)
class FilePatch:
    entry: RawDiffEntry
    additions: int
    deletions: int
    hunks: List[str]


# ---- parsers -----------------------------------------------------------------

def parse_log(out: str) -> List[RawCommit]:
    commits: List[RawCommit] = []
    for rec in out.split("\x1e"):
        rec = rec.strip("\n")
        if not rec:
            continue
        h, p, an, ae, ad, s, b = rec.split("\x1f", 6)
        commits.append(
            RawCommit(
                sha=h,
                parents=tuple(x for x in p.split() if x),
                author_name=an,
                author_email=ae,
                author_date_iso=ad,
                subject=s.strip(),
                body=b.strip("\n"),
            )
        )
    return commits


def parse_ls_tree(out: str) -> List[LsTreeEntry]:
    """Parse ``git ls-tree -l -z`` output."""
    entries: List[LsTreeEntry] = []
    for rec in out.split("\0"):
        if not rec:
            continue
        meta, name = rec.split("\t", 1)
        mode, typ, oid, size = meta.split()
        entries.append(
            LsTreeEntry(
                mode=mode,
                type=typ,
                object_id=oid,
                size=int(size) if size.isdigit() else 0,
                name=name,
            )
        )
    return entries


def parse_raw_diff(out: str) -> List[RawDiffEntry]:
    """Parse ``git diff --raw -z`` output."""
    tokens = out.split("\0")
    entries: List[RawDiffEntry] = []
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if not tok.startswith(":"):
            i += 1
            continue
        old_mode, new_mode, _old_oid, _new_oid, status = tok[1:].split(" ")
        if status[:1] in ("R", "C"):
            old_path, new_path = tokens[i + 1], tokens[i + 2]
            i += 3
        else:
            old_path = new_path = tokens[i + 1]
            i += 2
        entries.append(
            RawDiffEntry(
                status=status,
                old_mode=old_mode,
                new_mode=new_mode,
                old_path=old_path,
                new_path=new_path,
            )
        )
    return entries


def parse_numstat(out: str) -> List[Tuple[int, int]]:
    """
    Parse ``git diff --numstat -z`` output into (additions, deletions) pairs.

    Binary files report ``-`` for both counts and are counted as zero.
    """
    tokens = out.split("\0")
    stats: List[Tuple[int, int]] = []
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if not tok:
            i += 1
            continue
        a, d, path = tok.split("\t", 2)
        # renames put an empty path here followed by old and new paths
        i += 3 if path == "" else 1
        stats.append((int(a) if a.isdigit() else 0, int(d) if d.isdigit() else 0))
    return stats


def split_patch(out: str) -> List[List[str]]:
    """
    Split a unified ``git diff`` into per-file hunk lines.

    Each element holds the lines of one file's hunks, starting at the first
    ``@@`` header. Files without hunks (binary, mode-only) get an empty list.
    """
    files: List[List[str]] = []
    current: Optional[List[str]] = None
    in_hunks = False
    # only "\n" ends a line; splitlines() would also break on \f, \x1c, \x85
    lines = out.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    for line in lines:
        if line.startswith("diff --git "):
            current = []
            files.append(current)
            in_hunks = False
            continue
        if current is None:
            continue
        if line.startswith("@@"):
            in_hunks = True
        if in_hunks:
            current.append(line)
    return files


# ---- repository --------------------------------------------------------------

class Repository:
    """A git repository on disk, queried through the git CLI."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.git_dir = self._git("rev-parse", "--git-dir").strip()

    def _cmd(self, *args: str) -> List[str]:
        return ["git", "--literal-pathspecs", "-c", "core.quotepath=false", *args]

    def _git(self, *args: str) -> str:
        logger.debug("git", args=list(args))
        return run(self._cmd(*args), cwd=self.path)

    def rev_parse(self, expr: str) -> str:
        """Resolve a revision expression to a full commit id."""
        return self._git("rev-parse", "--verify", f"{expr}^{{commit}}").strip()

    def list_refs(self) -> List[GitRef]:
        """Branches and tags, with annotated tags peeled to their commit."""
        out = self._git(
            "for-each-ref",
            "--format=%(objectname) %(*objectname) %(refname)",
            "refs/heads",
            "refs/tags",
        )
        refs = []
        for line in out.splitlines():
            if not line.strip():
                continue
            oid, peeled, refname = line.split(" ", 2)
            refs.append(GitRef(id=peeled or oid, refspec=refname))
        return refs

    def ls_tree(self, treeish: str) -> List[LsTreeEntry]:
        return parse_ls_tree(self._git("ls-tree", "-l", "-z", treeish))

    def log(self, rev: str, skip: int = 0, max_count: int = 100) -> List[RawCommit]:
        out = self._git(
            "log",
            f"--skip={skip}",
            f"--max-count={max_count}",
            "--pretty=format:" + LOG_FORMAT,
            rev,
            "--",
        )
        return parse_log(out)

    def last_commit_for_path(self, rev: str, path: str) -> Optional[RawCommit]:
        """The newest commit reachable from ``rev`` that touched ``path``."""
        out = self._git("log", "-1", "--pretty=format:" + LOG_FORMAT, rev, "--", path)
        commits = parse_log(out)
        return commits[0] if commits else None

    def diff(self, parent: str, sha: str, context: int = 3) -> List[FilePatch]:
        """Per-file changes between two commits, with renames detected."""
        base = ("diff", "-M", "--no-color", "--no-ext-diff")
        entries = parse_raw_diff(self._git(*base, "--raw", "-z", parent, sha))
        if not entries:
            return []
        stats = parse_numstat(self._git(*base, "--numstat", "-z", parent, sha))
        hunks = split_patch(self._git(*base, f"-U{context}", parent, sha))

        patches: List[FilePatch] = []
        for i, entry in enumerate(entries):
            additions, deletions = stats[i] if i < len(stats) else (0, 0)
            patches.append(
                FilePatch(
                    entry=entry,
                    additions=additions,
                    deletions=deletions,
                    hunks=hunks[i] if i < len(hunks) else [],
                )
            )
        return patches

    def blob(self, object_id: str) -> bytes:
        return run_bytes(self._cmd("cat-file", "blob", object_id), cwd=self.path)
