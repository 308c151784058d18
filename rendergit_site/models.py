"""Data model shared by the rendering pipeline."""

from __future__ import annotations

import dataclasses
import datetime as dt
from typing import List, Optional


@dataclasses.dataclass(frozen=True)
class Revision:
    """A resolved revision: full commit id plus the label used in URLs."""

    id: str
    name: str


@dataclasses.dataclass(frozen=True)
class GitRef:
    """A repository reference as listed by git (full refspec)."""

    id: str
    refspec: str

    @property
    def short_name(self) -> str:
        for prefix in ("refs/heads/", "refs/tags/", "refs/remotes/"):
            if self.refspec.startswith(prefix):
                return self.refspec[len(prefix):]
        return self.refspec


@dataclasses.dataclass
class RefInfo:
    id: str
    refspec: str
    url: str = ""


@dataclasses.dataclass
class Breadcrumb:
    text: str
    url: str
    is_last: bool = False


@dataclasses.dataclass
class TreeEntry:
    """One file or directory inside a revision's tree."""

    path: str
    name: str
    is_dir: bool
    url: str
    object_id: str
    mode: str
    size: int = 0
    size_str: str = ""
    crumbs: List[Breadcrumb] = dataclasses.field(default_factory=list)
    # last modifying commit, left empty when that lookup is disabled
    commit_id: str = ""
    commit_url: str = ""
    summary: str = ""
    when: str = ""
    # filled in when the file page is rendered
    is_text: bool = False
    num_lines: int = 0


@dataclasses.dataclass
class TreeNode:
    """The listing of one directory level."""

    path: str
    url: str
    items: List[TreeEntry]
    crumbs: List[Breadcrumb]


@dataclasses.dataclass
class CommitRecord:
    id: str
    parent_id: str
    short_id: str
    author_name: str
    author_email: str
    authored_at: dt.datetime
    when: str
    summary: str
    message: str
    url: str
    refs: List[RefInfo] = dataclasses.field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.parent_id == self.id


@dataclasses.dataclass
class DiffFile:
    kind: str  # A/M/D/R, "" when unrecognized
    old_name: str
    old_mode: str
    name: str
    mode: str
    content: str
    additions: int = 0
    deletions: int = 0


@dataclasses.dataclass
class DiffRender:
    num_files: int = 0
    total_additions: int = 0
    total_deletions: int = 0
    files: List[DiffFile] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class CommitLog:
    commits: List[CommitRecord]
    last_commit: Optional[CommitRecord]


@dataclasses.dataclass
class BranchOutput:
    """What rendering one revision produced for the root pages."""

    readme: str = ""
    readme_path: str = ""
    last_commit: Optional[CommitRecord] = None
