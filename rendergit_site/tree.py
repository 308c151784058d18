"""
Concurrent traversal of a revision's file tree.

The walker lists one directory per unit of work on a shared pool. Each visit
pushes its entries, in listing order, onto ``entries`` and its finished
listing onto ``listings``. Consumers can start writing pages for early
directories while deeper ones are still being listed. Both queues end with
``DONE`` once every visit has finished.
"""

from __future__ import annotations

import posixpath
from concurrent.futures import FIRST_COMPLETED, Executor, Future, wait
from queue import Queue
from typing import Iterator, List, Set, Tuple

import structlog

from rendergit_site.errors import RepositoryError
from rendergit_site.gitcmd import LsTreeEntry, Repository
from rendergit_site.highlight import bytes_human
from rendergit_site.history import format_when, parse_when
from rendergit_site.models import Breadcrumb, Revision, TreeEntry, TreeNode
from rendergit_site.urls import commit_url, dir_url, file_url, tree_url

logger = structlog.get_logger()

DONE = object()


def drain(q: Queue) -> Iterator:
    """Yield items from ``q`` until the ``DONE`` sentinel."""
    while True:
        item = q.get()
        if item is DONE:
            return
        yield item


def sort_entries(items: List[TreeEntry]) -> List[TreeEntry]:
    """Directories before files, each group ordered by name."""
    return sorted(items, key=lambda e: (not e.is_dir, e.name))


def breadcrumbs(repo_name: str, rev_name: str, path: str) -> List[Breadcrumb]:
    """
    Crumbs for ``path``: the repo root, then one per ancestor directory.

    The final segment is the page itself: marked ``is_last`` and not linked.
    """
    if not path:
        return [Breadcrumb(text=repo_name, url="", is_last=True)]

    crumbs = [Breadcrumb(text=repo_name, url=tree_url(rev_name))]
    parts = path.split("/")
    cur = ""
    for part in parts[:-1]:
        cur = posixpath.join(cur, part)
        crumbs.append(Breadcrumb(text=part, url=dir_url(rev_name, cur)))
    crumbs.append(Breadcrumb(text=parts[-1], url="", is_last=True))
    return crumbs


class TreeWalker:
    def __init__(
        self,
        repo: Repository,
        revision: Revision,
        pool: Executor,
        repo_name: str,
        show_last_commit: bool = True,
    ) -> None:
        self.repo = repo
        self.revision = revision
        self.pool = pool
        self.repo_name = repo_name
        self.show_last_commit = show_last_commit
        self.entries: Queue = Queue()
        self.listings: Queue = Queue()

    def _make_entry(self, raw: LsTreeEntry, parent: str) -> TreeEntry:
        path = posixpath.join(parent, raw.name)
        is_dir = raw.type == "tree"
        rev_name = self.revision.name
        entry = TreeEntry(
            path=path,
            name=raw.name,
            is_dir=is_dir,
            url=dir_url(rev_name, path) if is_dir else file_url(rev_name, path),
            object_id=raw.object_id,
            mode=raw.mode,
            size=0 if is_dir else raw.size,
            size_str="" if is_dir else bytes_human(raw.size),
            crumbs=breadcrumbs(self.repo_name, rev_name, path),
        )
        if self.show_last_commit:
            self._attach_last_commit(entry)
        return entry

    def _attach_last_commit(self, entry: TreeEntry) -> None:
        last = self.repo.last_commit_for_path(self.revision.id, entry.path)
        if last is None:
            raise RepositoryError(
                f"no commit found for {entry.path!r} at revision {self.revision.name}"
            )
        entry.commit_id = last.sha
        entry.commit_url = commit_url(last.sha)
        entry.summary = last.subject
        entry.when = format_when(parse_when(last.author_date_iso))

    def visit(self, treeish: str, path: str) -> List[Tuple[str, str]]:
        """
        List one directory and emit its entries and listing.

        Returns the (tree object id, path) of each subdirectory still to visit.
        """
        items: List[TreeEntry] = []
        for raw in self.repo.ls_tree(treeish):
            # submodules have no tree to show
            if raw.type not in ("blob", "tree"):
                continue
            items.append(self._make_entry(raw, path))
        items = sort_entries(items)

        for item in items:
            self.entries.put(item)
        self.listings.put(
            TreeNode(
                path=path,
                url=dir_url(self.revision.name, path),
                items=items,
                crumbs=breadcrumbs(self.repo_name, self.revision.name, path),
            )
        )
        return [(item.object_id, item.path) for item in items if item.is_dir]

    def walk(self) -> int:
        """
        Visit the whole tree; returns the number of directories listed.

        Both queues are closed even when a visit fails, then the failure is
        re-raised.
        """
        if not self.show_last_commit:
            logger.info("skipping_last_commit", revision=self.revision.name)

        visited = 0
        pending: Set[Future] = set()
        try:
            pending.add(self.pool.submit(self.visit, self.revision.id, ""))
            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for fut in done:
                    visited += 1
                    for object_id, path in fut.result():
                        pending.add(self.pool.submit(self.visit, object_id, path))
        finally:
            self.entries.put(DONE)
            self.listings.put(DONE)

        logger.info("walk_complete", revision=self.revision.name, directories=visited)
        return visited
