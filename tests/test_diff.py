"""Tests for diff pages and the shared render cache."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from rendergit_site.diff import DiffRenderer, RenderCache, diff_kind
from rendergit_site.gitcmd import Repository
from rendergit_site.highlight import Highlighter
from rendergit_site.history import build_log
from rendergit_site.models import Revision
from rendergit_site.pages import PageContext


class RecordingSite:
    def __init__(self):
        self._lock = threading.Lock()
        self.pages = {}
        self.writes = []

    def write(self, url, content):
        with self._lock:
            self.pages[url] = content
            self.writes.append(url)


@pytest.mark.parametrize(
    "status, code",
    [("A", "A"), ("M", "M"), ("D", "D"), ("R100", "R"), ("R087", "R"), ("T", "M"), ("C75", ""), ("U", ""), ("", "")],
)
def test_diff_kind(status, code):
    assert diff_kind(status) == code


class TestRenderCache:
    def test_claim_once(self):
        cache = RenderCache()
        assert cache.claim("abc") is True
        assert cache.claim("abc") is False
        assert "abc" in cache
        assert len(cache) == 1

    def test_racing_claims_have_one_winner(self):
        cache = RenderCache()
        barrier = threading.Barrier(16)
        results = []

        def claim():
            barrier.wait()
            results.append(cache.claim("same"))

        threads = [threading.Thread(target=claim) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert results.count(True) == 1
        assert len(cache) == 1


@pytest.fixture
def setup(sample_repo):
    repo = Repository(str(sample_repo.path))
    revision = Revision(id=sample_repo.c3, name="main")
    commits = {c.id: c for c in build_log(repo, revision, []).commits}
    site = RecordingSite()
    cache = RenderCache()
    renderer = DiffRenderer(repo, site, cache, Highlighter("default"), PageContext(repo_name="demo", revision=revision))
    return renderer, site, cache, commits


class TestDiffRenderer:
    def test_root_commit_has_empty_diff(self, setup, sample_repo):
        renderer, site, _, commits = setup
        diff = renderer.build_diff(commits[sample_repo.c1])
        assert (diff.num_files, diff.total_additions, diff.total_deletions, diff.files) == (0, 0, 0, [])

        assert renderer.render_commit(commits[sample_repo.c1]) is True
        page = site.pages[f"/commits/{sample_repo.c1}.html"]
        assert "0 files" in page
        assert "No file changes" in page

    def test_diff_against_first_parent(self, setup, sample_repo):
        renderer, _, _, commits = setup
        diff = renderer.build_diff(commits[sample_repo.c2])
        assert diff.num_files == 2
        assert (diff.total_additions, diff.total_deletions) == (3, 1)
        files = {f.name: f for f in diff.files}
        assert files["docs/guide.txt"].kind == "A"
        assert files["src/a.py"].kind == "M"
        assert files["src/a.py"].mode == "100644"
        assert 'class="gi"' in files["src/a.py"].content

    def test_render_is_idempotent(self, setup, sample_repo):
        renderer, site, cache, commits = setup
        commit = commits[sample_repo.c2]
        assert renderer.render_commit(commit) is True
        assert renderer.render_commit(commit) is False
        assert site.writes == [f"/commits/{sample_repo.c2}.html"]
        assert sample_repo.c2 in cache

    def test_render_log_on_pool(self, setup, sample_repo):
        renderer, site, cache, commits = setup
        log = list(commits.values())
        with ThreadPoolExecutor(max_workers=4) as pool:
            assert renderer.render_log(log, pool) == 3
            assert renderer.render_log(log, pool) == 0
        assert sorted(site.writes) == sorted(f"/commits/{c}.html" for c in commits)
        assert len(cache) == 3

    def test_already_cached_commit_is_not_queried(self, setup, sample_repo):
        renderer, site, cache, commits = setup
        cache.claim(sample_repo.c3)
        renderer.repo = None  # any repository access would fail
        assert renderer.render_commit(commits[sample_repo.c3]) is False
        assert site.writes == []
