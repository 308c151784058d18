"""
URL and output-path scheme for the generated site.

Every URL is site-absolute and uses forward slashes regardless of platform:

    /index.html                          summary
    /refs.html                           all references
    /tree/<rev>/index.html               root listing of a revision
    /tree/<rev>/item/<dir>/index.html    directory listing
    /tree/<rev>/item/<path>.html         file view
    /logs/<rev>/index.html               commit log
    /commits/<id>.html                   commit diff

A file whose name is ``index`` would collide with its directory's listing,
so file names equal to ``index`` or starting with ``~`` get one extra ``~``
in front (``docs/index`` -> ``docs/~index.html``). ``~`` is never
percent-encoded, so the escaped name is also the name on disk.
"""

from __future__ import annotations

import posixpath
from typing import Iterable, Optional, Tuple

SHORT_ID_LEN = 7
LISTING_NAME = "index"
FILE_ESCAPE = "~"


def short_id(commit_id: str) -> str:
    # Ids shorter than SHORT_ID_LEN come back unchanged.
    return commit_id[:SHORT_ID_LEN]


def summary_url() -> str:
    return "/index.html"


def refs_url() -> str:
    return "/refs.html"


def tree_base_dir(rev_name: str) -> str:
    return posixpath.join("/", "tree", rev_name)


def item_base_dir(rev_name: str) -> str:
    return posixpath.join(tree_base_dir(rev_name), "item")


def log_base_dir(rev_name: str) -> str:
    return posixpath.join("/", "logs", rev_name)


def tree_url(rev_name: str) -> str:
    return posixpath.join(tree_base_dir(rev_name), "index.html")


def log_url(rev_name: str) -> str:
    return posixpath.join(log_base_dir(rev_name), "index.html")


def dir_url(rev_name: str, path: str) -> str:
    """Listing URL for a directory; the empty path is the revision's root."""
    path = path.strip("/")
    if not path:
        return tree_url(rev_name)
    return posixpath.join(item_base_dir(rev_name), path, "index.html")


def escape_file_name(name: str) -> str:
    if name == LISTING_NAME or name.startswith(FILE_ESCAPE):
        return FILE_ESCAPE + name
    return name


def unescape_file_name(name: str) -> str:
    if name.startswith(FILE_ESCAPE):
        return name[len(FILE_ESCAPE):]
    return name


def file_url(rev_name: str, path: str) -> str:
    parent, name = posixpath.split(path.strip("/"))
    return posixpath.join(item_base_dir(rev_name), parent, escape_file_name(name) + ".html")


def commit_url(commit_id: str) -> str:
    return f"/commits/{commit_id}.html"


def _split_rev(rest: str, rev_names: Optional[Iterable[str]]) -> Optional[Tuple[str, str]]:
    """Split ``<rev>/<remainder>``; known names win over the first ``/item/``."""
    if rev_names is not None:
        # longest first, so "a/item/b" beats "a"
        for name in sorted(rev_names, key=len, reverse=True):
            if rest.startswith(name + "/"):
                return name, rest[len(name) + 1:]
        return None
    idx = rest.find("/item/")
    if idx < 0:
        idx = rest.rfind("/")
        if idx < 0:
            return None
    return rest[:idx], rest[idx + 1:]


def parse_item_url(url: str, rev_names: Optional[Iterable[str]] = None) -> Optional[Tuple[str, str, bool]]:
    """
    Split a tree URL back into (revision name, path, is_dir).

    Without ``rev_names`` the revision ends at the first ``/item/``, which is
    ambiguous for revision names that contain ``/item/`` themselves. Pass the
    rendered revision names to resolve those.

    Returns None when the URL is not one of the tree URLs produced above.
    """
    prefix = "/tree/"
    if not url.startswith(prefix):
        return None
    split = _split_rev(url[len(prefix):], rev_names)
    if split is None:
        return None
    rev_name, rest = split

    if rest == "index.html":
        return rev_name, "", True
    if not rest.startswith("item/"):
        return None
    path = rest[len("item/"):]
    if path.endswith("/index.html"):
        return rev_name, path[: -len("/index.html")], True
    if path.endswith(".html"):
        parent, name = posixpath.split(path[: -len(".html")])
        return rev_name, posixpath.join(parent, unescape_file_name(name)), False
    return None


def url_to_output_path(url: str) -> str:
    """Relative output file path for a site URL (``/a/b.html`` -> ``a/b.html``)."""
    return url.lstrip("/")
