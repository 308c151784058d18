"""Command-line configuration."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import pathlib
from typing import List, Optional

from pygments.styles import get_all_styles

from rendergit_site.errors import ConfigError
from rendergit_site.highlight import DEFAULT_THEME

DEFAULT_README = "readme.md"


def default_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


@dataclasses.dataclass
class SiteConfig:
    outdir: str
    repo_path: str
    revs: List[str]
    repo_name: str
    desc: str = ""
    clone_url: str = ""
    home_url: str = ""
    theme: str = DEFAULT_THEME
    # 0 means the builder's default bound
    max_commits: int = 0
    readme: str = ""
    # finding the last commit per file is one history scan per file, so it
    # can be turned off for faster builds
    hide_tree_last_commit: bool = False
    workers: int = dataclasses.field(default_factory=default_workers)
    log_level: str = "INFO"

    @property
    def readme_name(self) -> str:
        return (self.readme or DEFAULT_README).lower()


def split_revs(value: str) -> List[str]:
    return [r.strip() for r in value.split(",") if r.strip()]


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="rendergit-site",
        description="Render a git repository as a static website (tree, log, commit diffs)",
    )
    ap.add_argument("--out", default="./public", help="Output directory")
    ap.add_argument("--repo", default=".", help="Path to the git repository")
    ap.add_argument("--revs", default="HEAD", help="Comma-separated revisions to render (e.g. main,v1,c69f86f,HEAD)")
    ap.add_argument("--theme", default=DEFAULT_THEME, help="Pygments color theme for highlighted code")
    ap.add_argument("--label", default="", help="Pretty name for the repo (default: last folder in --repo)")
    ap.add_argument("--desc", default="", help="Description shown in the site header")
    ap.add_argument("--clone-url", default="", help="git clone URL shown in the site header")
    ap.add_argument("--home-url", default="", help="URL linking back to a list of repositories")
    ap.add_argument("--max-commits", type=int, default=0, help="Maximum number of commits per revision (0: 5000)")
    ap.add_argument("--hide-tree-last-commit", action="store_true", help="Don't compute the last commit for each file in the tree")
    ap.add_argument("--readme", default="", help=f"Readme filename shown on the summary page (default: {DEFAULT_README})")
    ap.add_argument("--workers", type=int, default=default_workers(), help="Size of the worker pool")
    ap.add_argument("--log-level", default="INFO", help="Logging level")
    return ap


def config_from_args(argv: Optional[List[str]] = None) -> SiteConfig:
    args = build_parser().parse_args(argv)

    revs = split_revs(args.revs)
    if not revs:
        raise ConfigError("you must provide --revs")
    if args.workers < 1:
        raise ConfigError("--workers must be at least 1")
    if not isinstance(logging.getLevelName(args.log_level.upper()), int):
        raise ConfigError(f"unknown log level {args.log_level!r}")
    if args.theme not in set(get_all_styles()):
        raise ConfigError(f"unknown theme {args.theme!r}")

    repo_path = pathlib.Path(args.repo).resolve()
    return SiteConfig(
        outdir=str(pathlib.Path(args.out).resolve()),
        repo_path=str(repo_path),
        revs=revs,
        repo_name=args.label or repo_path.name,
        desc=args.desc,
        clone_url=args.clone_url,
        home_url=args.home_url,
        theme=args.theme,
        max_commits=args.max_commits,
        readme=args.readme,
        hide_tree_last_commit=args.hide_tree_last_commit,
        workers=args.workers,
        log_level=args.log_level.upper(),
    )
