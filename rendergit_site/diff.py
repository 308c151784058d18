"""Per-commit diff pages, rendered at most once per commit per run."""

from __future__ import annotations

import threading
from concurrent.futures import Executor
from typing import Iterator, List

import structlog

from rendergit_site import pages
from rendergit_site.gitcmd import FilePatch, Repository
from rendergit_site.highlight import Highlighter
from rendergit_site.models import CommitRecord, DiffFile, DiffRender
from rendergit_site.site import SiteWriter
from rendergit_site.urls import commit_url

logger = structlog.get_logger()

_KIND_CODES = {
    "A": "A",
    "M": "M",
    "T": "M",
    "D": "D",
    "R": "R",
}


def diff_kind(status: str) -> str:
    """One-letter change kind; rename scores like ``R100`` reduce to ``R``."""
    return _KIND_CODES.get(status[:1], "")


class RenderCache:
    """Commit ids whose diff page has been claimed during this run."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids: set[str] = set()

    def claim(self, commit_id: str) -> bool:
        """Atomically insert ``commit_id``; False if it was already present."""
        with self._lock:
            if commit_id in self._ids:
                return False
            self._ids.add(commit_id)
            return True

    def __contains__(self, commit_id: object) -> bool:
        with self._lock:
            return commit_id in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._ids))


class DiffRenderer:
    def __init__(
        self,
        repo: Repository,
        site: SiteWriter,
        cache: RenderCache,
        highlighter: Highlighter,
        ctx: pages.PageContext,
    ) -> None:
        self.repo = repo
        self.site = site
        self.cache = cache
        self.highlighter = highlighter
        self.ctx = ctx

    def build_diff(self, commit: CommitRecord) -> DiffRender:
        if commit.is_root:
            # self-diff of the initial commit
            return DiffRender()

        patches = self.repo.diff(commit.parent_id, commit.id)
        render = DiffRender(num_files=len(patches))
        for patch in patches:
            render.files.append(self._render_file(patch))
            render.total_additions += patch.additions
            render.total_deletions += patch.deletions
        return render

    def _render_file(self, patch: FilePatch) -> DiffFile:
        entry = patch.entry
        content = "".join(f"{line}\n" for line in patch.hunks)
        return DiffFile(
            kind=diff_kind(entry.status),
            old_name=entry.old_path,
            old_mode=entry.old_mode,
            name=entry.new_path,
            mode=entry.new_mode,
            content=self.highlighter.parse_diff(content),
            additions=patch.additions,
            deletions=patch.deletions,
        )

    def render_commit(self, commit: CommitRecord) -> bool:
        """Write ``commits/<id>.html`` unless another worker already claimed it."""
        if not self.cache.claim(commit.id):
            logger.debug("commit_already_rendered", commit=commit.short_id)
            return False

        diff = self.build_diff(commit)
        self.site.write(commit_url(commit.id), pages.commit_page(self.ctx, commit, diff))
        return True

    def render_log(self, commits: List[CommitRecord], pool: Executor) -> int:
        """Render every commit of a log on ``pool``; returns how many were new."""
        futures = [pool.submit(self.render_commit, commit) for commit in commits]
        return sum(1 for f in futures if f.result())
