"""
HTML page builders.

Each function turns page data into a complete HTML document. They are pure:
no I/O, no repository access.
"""

from __future__ import annotations

import dataclasses
import html
from typing import List, Optional
from urllib.parse import quote

from rendergit_site.models import (
    Breadcrumb,
    CommitRecord,
    DiffRender,
    RefInfo,
    Revision,
    TreeEntry,
    TreeNode,
)
from rendergit_site.urls import commit_url, log_url, refs_url, short_id, summary_url, tree_url

MAIN_CSS = """\
* { box-sizing: border-box; }
body { margin: 0 auto; max-width: 1100px; padding: 1rem;
  font-family: -apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,Helvetica,Arial; line-height: 1.45; }
code, pre { font-family: ui-monospace,SFMono-Regular,Menlo,Monaco,Consolas,'Liberation Mono','Courier New', monospace; }
a { color: #0366d6; text-decoration: none; }
a:hover { text-decoration: underline; }
header { border-bottom: 1px solid #eee; margin-bottom: 1rem; }
header h1 { margin: 0; font-size: 1.4rem; }
header .desc { color: #666; }
nav a { margin-right: .75rem; }
table.listing { border-collapse: collapse; width: 100%; }
table.listing td { padding: .2rem .5rem; border-bottom: 1px solid #f0f1f2; }
.muted { color: #666; }
.sha { background: #eef2f7; padding: .05rem .35rem; border-radius: 4px; }
.crumbs { margin: .5rem 0; }
.pill { background: #f2f4f7; border: 1px solid #e1e5ea; padding: .15rem .5rem; border-radius: 999px; font-size: .85rem; }
.pill.plus { color: #0a7b34; }
.pill.minus { color: #a01515; }
.badge { display: inline-block; font-size: .75rem; padding: .05rem .4rem; border-radius: 999px; border: 1px solid #d1d9e0; }
.highlight { overflow-x: auto; }
pre { padding: .75rem; overflow: auto; border-radius: 6px; }
"""


@dataclasses.dataclass
class PageContext:
    """Site-wide header data plus the revision the page belongs to."""

    repo_name: str
    desc: str = ""
    clone_url: str = ""
    home_url: str = ""
    revision: Optional[Revision] = None


def esc(s: str) -> str:
    return html.escape(s, quote=True)


def href(url: str) -> str:
    """Percent-encode a site URL for an attribute; non-UTF-8 path bytes map to ``%XX``."""
    return esc(quote(url, safe="/~", errors="surrogateescape"))


def layout(ctx: PageContext, title: str, body: str) -> str:
    nav = [f'<a href="{href(summary_url())}">summary</a>', f'<a href="{href(refs_url())}">refs</a>']
    if ctx.revision is not None:
        rev = ctx.revision
        nav.append(f'<a href="{href(tree_url(rev.name))}">tree</a>')
        nav.append(f'<a href="{href(log_url(rev.name))}">log</a>')
        nav.append(f'<span class="muted">{esc(rev.name)}</span>')

    home = f'<a href="{esc(ctx.home_url)}">repos</a> / ' if ctx.home_url else ""
    clone = f'<div class="muted">git clone <code>{esc(ctx.clone_url)}</code></div>' if ctx.clone_url else ""
    desc = f'<div class="desc">{esc(ctx.desc)}</div>' if ctx.desc else ""

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width, initial-scale=1" />
<title>{esc(title)}</title>
<link rel="stylesheet" href="/main.css" />
<link rel="stylesheet" href="/syntax.css" />
</head>
<body>
<header>
  <h1>{home}{esc(ctx.repo_name)}</h1>
  {desc}
  {clone}
  <nav>{" ".join(nav)}</nav>
</header>
<main>
{body}
</main>
</body>
</html>
"""


def breadcrumbs(crumbs: List[Breadcrumb]) -> str:
    parts = []
    for crumb in crumbs:
        if crumb.is_last:
            parts.append(f"<strong>{esc(crumb.text)}</strong>")
        else:
            parts.append(f'<a href="{href(crumb.url)}">{esc(crumb.text)}</a>')
    return f'<div class="crumbs">{" / ".join(parts)}</div>'


def ref_badges(refs: List[RefInfo]) -> str:
    out = []
    for ref in refs:
        if ref.url:
            out.append(f'<a class="badge" href="{href(ref.url)}">{esc(ref.refspec)}</a>')
        else:
            out.append(f'<span class="badge">{esc(ref.refspec)}</span>')
    return " ".join(out)


def summary_page(ctx: PageContext, readme: str, last_commit: Optional[CommitRecord]) -> str:
    latest = ""
    if last_commit is not None:
        latest = (
            f'<p class="muted">latest: <a href="{href(last_commit.url)}"><code class="sha">'
            f"{esc(last_commit.short_id)}</code></a> {esc(last_commit.summary)} "
            f"&middot; {esc(last_commit.author_name)} &middot; {esc(last_commit.when)}</p>"
        )
    body = f'{latest}\n<section class="readme">{readme}</section>'
    return layout(ctx, ctx.repo_name, body)


def refs_page(ctx: PageContext, refs: List[RefInfo]) -> str:
    rows = []
    for ref in refs:
        name = f'<a href="{href(ref.url)}">{esc(ref.refspec)}</a>' if ref.url else esc(ref.refspec)
        rows.append(f'<tr><td>{name}</td><td><code class="sha">{esc(short_id(ref.id))}</code></td></tr>')
    body = f'<h2>refs</h2>\n<table class="listing">\n{chr(10).join(rows)}\n</table>'
    return layout(ctx, f"refs - {ctx.repo_name}", body)


def tree_page(ctx: PageContext, node: TreeNode) -> str:
    def row(item: TreeEntry) -> str:
        name = esc(item.name + "/" if item.is_dir else item.name)
        commit = ""
        if item.commit_url:
            commit = f'<a href="{href(item.commit_url)}">{esc(item.summary)}</a>'
        return (
            f'<tr><td><a href="{href(item.url)}">{name}</a></td>'
            f'<td class="muted">{commit}</td>'
            f'<td class="muted">{esc(item.when)}</td>'
            f'<td class="muted">{"" if item.is_dir else esc(item.size_str)}</td></tr>'
        )

    rows = "\n".join(row(item) for item in node.items)
    body = f'{breadcrumbs(node.crumbs)}\n<table class="listing">\n{rows}\n</table>'
    title = node.path or "/"
    return layout(ctx, f"{title} - {ctx.repo_name}", body)


def file_page(ctx: PageContext, entry: TreeEntry, contents: str) -> str:
    meta = f'<p class="muted">{esc(entry.size_str)}'
    if entry.is_text:
        meta += f" &middot; {entry.num_lines} lines"
    if entry.commit_url:
        meta += f' &middot; <a href="{href(entry.commit_url)}">{esc(entry.summary)}</a> {esc(entry.when)}'
    meta += "</p>"
    body = f"{breadcrumbs(entry.crumbs)}\n{meta}\n{contents}"
    return layout(ctx, f"{entry.path} - {ctx.repo_name}", body)


def log_page(ctx: PageContext, commits: List[CommitRecord]) -> str:
    def row(c: CommitRecord) -> str:
        return (
            f'<tr><td><a href="{href(c.url)}"><code class="sha">{esc(c.short_id)}</code></a></td>'
            f"<td>{esc(c.summary)} {ref_badges(c.refs)}</td>"
            f'<td class="muted">{esc(c.author_name)}</td>'
            f'<td class="muted">{esc(c.when)}</td></tr>'
        )

    rows = "\n".join(row(c) for c in commits)
    body = f'<h2>log</h2>\n<table class="listing">\n{rows}\n</table>'
    return layout(ctx, f"log - {ctx.repo_name}", body)


def commit_page(ctx: PageContext, commit: CommitRecord, diff: DiffRender) -> str:
    parent = f'<a href="{href(commit_url(commit.parent_id))}"><code class="sha">{esc(short_id(commit.parent_id))}</code></a>'
    header = (
        f'<h2><code class="sha">{esc(commit.short_id)}</code> {esc(commit.summary)}</h2>'
        f'<div class="muted"><strong>Author:</strong> {esc(commit.author_name)} &lt;{esc(commit.author_email)}&gt; '
        f"&middot; <strong>Date:</strong> {esc(commit.authored_at.isoformat())} "
        f"&middot; <strong>Parent:</strong> {parent}</div>"
        f"<pre>{esc(commit.message)}</pre>"
    )
    stats = (
        f'<div class="stats">'
        f'<span class="pill">{diff.num_files} files</span> '
        f'<span class="pill plus">+{diff.total_additions}</span> '
        f'<span class="pill minus">-{diff.total_deletions}</span>'
        f"</div>"
    )

    def file_section(f) -> str:
        name = esc(f.name)
        if f.old_name and f.old_name != f.name:
            name = f"{esc(f.old_name)} &rarr; {name}"
        modes = ""
        if f.old_mode != f.mode:
            modes = f' <span class="muted">{esc(f.old_mode)} &rarr; {esc(f.mode)}</span>'
        return (
            f'<section class="diff-file">'
            f'<h3><span class="badge">{esc(f.kind)}</span> <code>{name}</code>{modes} '
            f'<span class="pill plus">+{f.additions}</span> <span class="pill minus">-{f.deletions}</span></h3>'
            f"{f.content}"
            f"</section>"
        )

    files = "\n".join(file_section(f) for f in diff.files)
    if not diff.files:
        files = "<em>No file changes</em>"
    body = f"{header}\n{stats}\n{files}"
    return layout(ctx, f"{commit.short_id} - {ctx.repo_name}", body)
