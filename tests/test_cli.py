import pytest

from rendergit_site.cli import main
from rendergit_site.config import DEFAULT_README, SiteConfig, config_from_args, split_revs
from rendergit_site.errors import ConfigError


class TestConfig:
    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = config_from_args([])
        assert config.revs == ["HEAD"]
        assert config.outdir == str((tmp_path / "public").resolve())
        assert config.repo_path == str(tmp_path.resolve())
        assert config.repo_name == tmp_path.name
        assert config.max_commits == 0
        assert config.readme_name == DEFAULT_README
        assert config.hide_tree_last_commit is False
        assert config.workers >= 1

    def test_flags(self, tmp_path):
        config = config_from_args(
            [
                "--repo", str(tmp_path),
                "--out", str(tmp_path / "site"),
                "--revs", "main, v1,,",
                "--label", "pretty",
                "--readme", "README.rst",
                "--max-commits", "10",
                "--hide-tree-last-commit",
                "--theme", "default",
                "--workers", "2",
                "--clone-url", "https://example.com/demo.git",
            ]
        )
        assert config.revs == ["main", "v1"]
        assert config.repo_name == "pretty"
        assert config.readme_name == "readme.rst"
        assert config.max_commits == 10
        assert config.hide_tree_last_commit is True
        assert config.workers == 2
        assert config.clone_url == "https://example.com/demo.git"

    def test_split_revs(self):
        assert split_revs("") == []
        assert split_revs("a,b") == ["a", "b"]

    @pytest.mark.parametrize(
        "argv",
        [["--revs", ""], ["--revs", " , "], ["--theme", "no-such-theme"], ["--workers", "0"], ["--log-level", "LOUD"]],
    )
    def test_invalid(self, argv):
        with pytest.raises(ConfigError):
            config_from_args(argv)

    def test_readme_name_default(self):
        assert SiteConfig(outdir="o", repo_path="r", revs=["HEAD"], repo_name="n").readme_name == "readme.md"


class TestMain:
    def test_builds_site(self, sample_repo, tmp_path):
        out = tmp_path / "public"
        code = main(["--repo", str(sample_repo.path), "--out", str(out), "--revs", "main,v1", "--theme", "default"])
        assert code == 0
        assert (out / "index.html").is_file()
        assert (out / "logs" / "v1" / "index.html").is_file()

    def test_bad_revision_exits_non_zero(self, sample_repo, tmp_path, capsys):
        code = main(["--repo", str(sample_repo.path), "--out", str(tmp_path / "public"), "--revs", "nope"])
        assert code == 1
        assert "nope" in capsys.readouterr().err

    def test_not_a_repository(self, tmp_path, capsys):
        code = main(["--repo", str(tmp_path), "--out", str(tmp_path / "public")])
        assert code == 1
        assert "error:" in capsys.readouterr().err

    def test_config_error(self, capsys):
        assert main(["--revs", ""]) == 1
        assert "--revs" in capsys.readouterr().err
