"""Writes rendered pages into the output directory."""

from __future__ import annotations

import pathlib

import structlog

from rendergit_site.errors import OutputError
from rendergit_site.urls import url_to_output_path

logger = structlog.get_logger()


class SiteWriter:
    """Maps site URLs onto files under ``outdir`` and writes them."""

    def __init__(self, outdir: str | pathlib.Path) -> None:
        self.outdir = pathlib.Path(outdir)

    def path_for(self, url: str) -> pathlib.Path:
        return self.outdir.joinpath(*url_to_output_path(url).split("/"))

    def write(self, url: str, content: str) -> pathlib.Path:
        fp = self.path_for(url)
        logger.info("writing", path=str(fp))
        try:
            fp.parent.mkdir(parents=True, exist_ok=True)
            # surrogates stand for non-UTF-8 bytes of repository paths
            fp.write_text(content, encoding="utf-8", errors="surrogateescape")
        except OSError as e:
            raise OutputError(f"could not write {fp}: {e}") from e
        return fp

    def write_static(self, main_css: str, syntax_css: str) -> None:
        self.write("/main.css", main_css)
        self.write("/syntax.css", syntax_css)
