"""
Drives a full site build.

The first requested revision is rendered on the calling thread and supplies
the readme and latest commit for the root pages. Further revisions run
concurrently. Every revision shares the repository, the leaf worker pool,
and one ``RenderCache``, so commits common to several histories get a
single diff page.
"""

from __future__ import annotations

from concurrent.futures import Executor, ThreadPoolExecutor
from typing import List, Optional, Tuple

import structlog

from rendergit_site import pages
from rendergit_site.config import SiteConfig
from rendergit_site.diff import DiffRenderer, RenderCache
from rendergit_site.gitcmd import Repository
from rendergit_site.highlight import Highlighter, count_lines, is_text
from rendergit_site.history import build_log
from rendergit_site.models import BranchOutput, CommitLog, RefInfo, Revision, TreeEntry
from rendergit_site.revisions import build_ref_catalog, resolve_revisions
from rendergit_site.site import SiteWriter
from rendergit_site.tree import TreeWalker, drain
from rendergit_site.urls import log_url, refs_url, summary_url

logger = structlog.get_logger()

BINARY_NOTICE = "<p><em>binary file, cannot display</em></p>"


class RenderOrchestrator:
    def __init__(self, config: SiteConfig) -> None:
        self.config = config
        self.highlighter = Highlighter(config.theme)
        self.site = SiteWriter(config.outdir)
        self.cache = RenderCache()
        self.repo = Repository(config.repo_path)
        self.revisions: List[Revision] = []
        self.refs: List[RefInfo] = []

    def page_context(self, revision: Optional[Revision]) -> pages.PageContext:
        return pages.PageContext(
            repo_name=self.config.repo_name,
            desc=self.config.desc,
            clone_url=self.config.clone_url,
            home_url=self.config.home_url,
            revision=revision,
        )

    def run(self) -> BranchOutput:
        repo = self.repo
        git_refs = repo.list_refs()
        self.revisions = resolve_revisions(repo, self.config.revs, git_refs)
        self.refs = build_ref_catalog(self.revisions, git_refs)

        main, rest = self.revisions[0], self.revisions[1:]
        with ThreadPoolExecutor(max_workers=self.config.workers, thread_name_prefix="rendergit-worker") as pool:
            main_output = self.write_revision(main, pool)
            if rest:
                with ThreadPoolExecutor(max_workers=len(rest), thread_name_prefix="rendergit-rev") as revs:
                    futures = [revs.submit(self.write_revision, rev, pool) for rev in rest]
                    for fut in futures:
                        fut.result()

        # use the first revision to generate the root summary and refs pages
        ctx = self.page_context(main)
        self.site.write(refs_url(), pages.refs_page(ctx, self.refs))
        self.site.write(summary_url(), pages.summary_page(ctx, main_output.readme, main_output.last_commit))
        self.site.write_static(pages.MAIN_CSS, self.highlighter.css())
        return main_output

    def write_revision(self, revision: Revision, pool: Executor) -> BranchOutput:
        """Render tree, log and diffs of one revision; returns once all are written."""
        log = logger.bind(repo=self.config.repo_name, revision=revision.name)
        log.info("compiling_revision")

        ctx = self.page_context(revision)
        walker = TreeWalker(
            self.repo,
            revision,
            pool,
            repo_name=self.config.repo_name,
            show_last_commit=not self.config.hide_tree_last_commit,
        )
        diffs = DiffRenderer(self.repo, self.site, self.cache, self.highlighter, ctx)

        with ThreadPoolExecutor(max_workers=3, thread_name_prefix=f"rendergit-{revision.name}") as stages:
            walk_f = stages.submit(walker.walk)
            listings_f = stages.submit(self.write_listings, ctx, walker)
            log_f = stages.submit(self.write_log, ctx, revision, diffs, pool)
            readme_path, readme = self.write_files(ctx, walker, pool)
            walk_f.result()
            listings_f.result()
            commit_log: CommitLog = log_f.result()

        log.info("revision_complete", commits=len(commit_log.commits), readme=readme_path or None)
        return BranchOutput(readme=readme, readme_path=readme_path, last_commit=commit_log.last_commit)

    def write_listings(self, ctx: pages.PageContext, walker: TreeWalker) -> int:
        count = 0
        for node in drain(walker.listings):
            self.site.write(node.url, pages.tree_page(ctx, node))
            count += 1
        return count

    def write_log(self, ctx: pages.PageContext, revision: Revision, diffs: DiffRenderer, pool: Executor) -> CommitLog:
        commit_log = build_log(self.repo, revision, self.refs, self.config.max_commits)
        self.site.write(log_url(revision.name), pages.log_page(ctx, commit_log.commits))
        diffs.render_log(commit_log.commits, pool)
        return commit_log

    def write_file(self, ctx: pages.PageContext, entry: TreeEntry) -> str:
        """Write one file page; returns the rendered contents."""
        data = self.repo.blob(entry.object_id)
        entry.is_text = is_text(data)

        contents = BINARY_NOTICE
        if entry.is_text:
            text = data.decode("utf-8", errors="replace")
            entry.num_lines = count_lines(text)
            contents = self.highlighter.parse_text(entry.name, text)

        self.site.write(entry.url, pages.file_page(ctx, entry, contents))
        return contents

    def write_files(self, ctx: pages.PageContext, walker: TreeWalker, pool: Executor) -> Tuple[str, str]:
        """
        Dispatch a page write for every file the walker emits.

        Returns (path, contents) of the readme, or empty strings when the tree
        has none. The shallowest match wins, ties broken by path.
        """
        readme_name = self.config.readme_name
        jobs = []
        for entry in drain(walker.entries):
            if entry.is_dir:
                continue
            jobs.append((entry, pool.submit(self.write_file, ctx, entry)))

        candidates = []
        for entry, fut in jobs:
            contents = fut.result()
            if entry.name.lower() == readme_name:
                candidates.append((entry.path.count("/"), entry.path, contents))

        if not candidates:
            return "", ""
        _, path, contents = min(candidates)
        return path, contents
