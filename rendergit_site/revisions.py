"""Revision resolution and the reference catalog."""

from __future__ import annotations

from typing import Dict, List

import structlog

from rendergit_site.errors import ConfigError, RepositoryError, RevisionError
from rendergit_site.gitcmd import Repository
from rendergit_site.models import GitRef, RefInfo, Revision
from rendergit_site.urls import short_id, tree_url

logger = structlog.get_logger()


def resolve_revisions(repo: Repository, exprs: List[str], refs: List[GitRef]) -> List[Revision]:
    """
    Resolve user-supplied revision expressions to commits.

    An expression naming a branch or tag (short or full refspec) is labelled
    with the reference's short name; anything else is labelled with its
    short commit id. Any expression that does not resolve aborts the run.
    """
    if not exprs:
        raise ConfigError("you must provide at least one revision (--revs)")

    revisions: List[Revision] = []
    seen: set[str] = set()
    for expr in exprs:
        try:
            full_id = repo.rev_parse(expr)
        except RepositoryError as e:
            raise RevisionError(f"could not resolve revision {expr!r}: {e.stderr or e}") from e

        name = short_id(full_id)
        # if it's a reference then label it as such
        for ref in refs:
            if expr == ref.short_name or expr == ref.refspec:
                name = ref.short_name
                break

        if name in seen:
            logger.warning("duplicate_revision", revision=expr, name=name)
            continue
        seen.add(name)
        revisions.append(Revision(id=full_id, name=name))

    if not revisions:
        raise RevisionError("could not find a git reference that matches criteria")
    return revisions


def sort_refs(refs: List[RefInfo]) -> List[RefInfo]:
    """Linked refs first (URL descending), then refspec ascending."""
    ordered = sorted(refs, key=lambda r: r.refspec)
    ordered.sort(key=lambda r: r.url, reverse=True)
    return ordered


def build_ref_catalog(revisions: List[Revision], refs: List[GitRef]) -> List[RefInfo]:
    """
    Collect every reference for the refs page.

    Requested revisions come first in the map and carry the URL of their
    tree; every other branch or tag is added without a URL.
    """
    catalog: Dict[str, RefInfo] = {}
    for rev in revisions:
        catalog[rev.name] = RefInfo(id=rev.id, refspec=rev.name, url=tree_url(rev.name))

    # loop through ALL refs that don't have URLs and add them to the map
    for ref in refs:
        refspec = ref.short_name
        if refspec in catalog:
            continue
        catalog[refspec] = RefInfo(id=ref.id, refspec=refspec)

    return sort_refs(list(catalog.values()))


def refs_for_commit(commit_id: str, refs: List[RefInfo]) -> List[RefInfo]:
    return [ref for ref in refs if ref.id == commit_id]
