import pytest

from rendergit_site.errors import ConfigError, RevisionError
from rendergit_site.gitcmd import Repository
from rendergit_site.models import GitRef, RefInfo, Revision
from rendergit_site.revisions import build_ref_catalog, refs_for_commit, resolve_revisions, sort_refs


@pytest.fixture
def repo(sample_repo):
    return Repository(str(sample_repo.path))


class TestResolveRevisions:
    def test_branch_and_tag_names(self, repo, sample_repo):
        revs = resolve_revisions(repo, ["main", "v1"], repo.list_refs())
        assert revs == [
            Revision(id=sample_repo.c3, name="main"),
            Revision(id=sample_repo.c2, name="v1"),
        ]

    def test_full_refspec_uses_short_name(self, repo, sample_repo):
        revs = resolve_revisions(repo, ["refs/heads/main"], repo.list_refs())
        assert revs == [Revision(id=sample_repo.c3, name="main")]

    def test_hash_and_head_get_short_id(self, repo, sample_repo):
        revs = resolve_revisions(repo, [sample_repo.c1, "HEAD"], repo.list_refs())
        assert revs == [
            Revision(id=sample_repo.c1, name=sample_repo.c1[:7]),
            Revision(id=sample_repo.c3, name=sample_repo.c3[:7]),
        ]

    def test_empty_list_is_fatal(self, repo):
        with pytest.raises(ConfigError):
            resolve_revisions(repo, [], repo.list_refs())

    def test_unknown_revision_is_fatal(self, repo):
        with pytest.raises(RevisionError, match="nope"):
            resolve_revisions(repo, ["main", "nope"], repo.list_refs())

    def test_duplicate_names_are_dropped(self, repo, sample_repo):
        revs = resolve_revisions(repo, ["main", "refs/heads/main"], repo.list_refs())
        assert [r.name for r in revs] == ["main"]


class TestRefCatalog:
    def test_requested_first_then_plain(self):
        revisions = [Revision(id="c3", name="main"), Revision(id="c2", name="v1")]
        refs = [
            GitRef(id="c1", refspec="refs/heads/feature"),
            GitRef(id="c3", refspec="refs/heads/main"),
            GitRef(id="c1", refspec="refs/tags/release"),
            GitRef(id="c2", refspec="refs/tags/v1"),
            GitRef(id="c0", refspec="refs/tags/alpha"),
        ]
        catalog = build_ref_catalog(revisions, refs)
        assert [(r.refspec, r.url) for r in catalog] == [
            ("v1", "/tree/v1/index.html"),
            ("main", "/tree/main/index.html"),
            ("alpha", ""),
            ("feature", ""),
            ("release", ""),
        ]

    def test_requested_entry_wins_over_repository_ref(self):
        catalog = build_ref_catalog([Revision(id="c3", name="main")], [GitRef(id="c3", refspec="refs/heads/main")])
        assert catalog == [RefInfo(id="c3", refspec="main", url="/tree/main/index.html")]

    def test_sort_is_independent_of_input_order(self):
        refs = [
            RefInfo(id="1", refspec="b"),
            RefInfo(id="2", refspec="a", url="/tree/a/index.html"),
            RefInfo(id="3", refspec="a2"),
        ]
        first = [r.refspec for r in sort_refs(refs)]
        second = [r.refspec for r in sort_refs(list(reversed(refs)))]
        assert first == second == ["a", "a2", "b"]

    def test_refs_for_commit(self):
        refs = [RefInfo(id="c1", refspec="x"), RefInfo(id="c2", refspec="y"), RefInfo(id="c1", refspec="z")]
        assert [r.refspec for r in refs_for_commit("c1", refs)] == ["x", "z"]
        assert refs_for_commit("c9", refs) == []
