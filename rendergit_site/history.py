"""Commit log construction for a revision."""

from __future__ import annotations

import datetime as dt
from typing import List

from rendergit_site.gitcmd import RawCommit, Repository
from rendergit_site.models import CommitLog, CommitRecord, RefInfo, Revision
from rendergit_site.revisions import refs_for_commit
from rendergit_site.urls import commit_url, short_id

DEFAULT_MAX_COMMITS = 5000
DEFAULT_PAGE_SIZE = 500
WHEN_FORMAT = "%d %b %y"


def parse_when(iso: str) -> dt.datetime:
    return dt.datetime.fromisoformat(iso.replace("Z", "+00:00"))


def format_when(when: dt.datetime) -> str:
    return when.strftime(WHEN_FORMAT)


def to_record(raw: RawCommit, refs: List[RefInfo]) -> CommitRecord:
    authored_at = parse_when(raw.author_date_iso)
    # a root commit is its own parent so URLs can always be built
    parent_id = raw.first_parent or raw.sha
    return CommitRecord(
        id=raw.sha,
        parent_id=parent_id,
        short_id=short_id(raw.sha),
        author_name=raw.author_name,
        author_email=raw.author_email,
        authored_at=authored_at,
        when=format_when(authored_at),
        summary=raw.subject,
        message=raw.body,
        url=commit_url(raw.sha),
        refs=refs_for_commit(raw.sha, refs),
    )


def build_log(
    repo: Repository,
    revision: Revision,
    refs: List[RefInfo],
    max_commits: int = DEFAULT_MAX_COMMITS,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> CommitLog:
    """Newest-first history of ``revision``, bounded by ``max_commits``."""
    if max_commits <= 0:
        max_commits = DEFAULT_MAX_COMMITS
    page_size = max(1, min(page_size, max_commits))

    commits: List[CommitRecord] = []
    while len(commits) < max_commits:
        want = min(page_size, max_commits - len(commits))
        page = repo.log(revision.id, skip=len(commits), max_count=want)
        commits.extend(to_record(raw, refs) for raw in page)
        if len(page) < want:
            break

    return CommitLog(commits=commits, last_commit=commits[0] if commits else None)
