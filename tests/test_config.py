import os

import pytest
import yaml

from gimme.config import Config, ConfigError


@pytest.fixture
def home(tmp_path, monkeypatch):
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


def _write_config(directory, data):
    path = directory / ".gimme.config.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_defaults_without_file(home):
    config = Config.load([str(home)])
    assert config.path is None
    assert config.search_folders() == [os.path.normpath(str(home))]
    assert config.global_pinned_branches() == ["main", "master"]
    assert config.pinned_repos() == []
    assert config.aliases() == {}
    assert config.repo_pinned_branches() == {}


def test_load_reads_file_and_keeps_nested_defaults(home):
    path = _write_config(home, {"pins": {"repositories": ["/srv/a"]}, "aliases": {"k": "/srv/k"}})
    config = Config.load([str(home)])
    assert config.path == str(path)
    assert config.pinned_repos() == ["/srv/a"]
    assert config.aliases() == {"k": "/srv/k"}
    assert config.global_pinned_branches() == ["main", "master"]


def test_load_searches_directories_in_order(home, tmp_path):
    other = tmp_path / "other"
    other.mkdir()
    _write_config(other, {"aliases": {"x": "/second"}})
    assert Config.load([str(home), str(other)]).aliases() == {"x": "/second"}


def test_string_search_folders_split_on_whitespace(home):
    _write_config(home, {"search-folders": "/a /b"})
    assert Config.load([str(home)]).search_folders() == ["/a", "/b"]


def test_malformed_file_logs_error(home, capsys):
    (home / ".gimme.config.yaml").write_text("a: [unclosed", encoding="utf-8")
    config = Config.load([str(home)])
    assert "Error reading gimme configuration" in capsys.readouterr().err
    assert config.global_pinned_branches() == ["main", "master"]


def test_add_group_replaces_default_and_saves_in_home(home, tmp_path):
    config = Config.load([str(home)])
    target = tmp_path / "code"
    config.add_group(str(target))
    assert config.path == str(home / ".gimme.config.yaml")
    reloaded = Config.load([str(home)])
    assert reloaded.search_folders() == [str(target)]


def test_add_group_appends_and_rejects_duplicates(home, tmp_path, capsys):
    config = Config.load([str(home)])
    first, second = str(tmp_path / "a"), str(tmp_path / "b")
    config.add_group(first)
    config.add_group(second)
    config.add_group(first + "/")
    assert config.search_folders() == [first, second]
    assert "Group already exists" in capsys.readouterr().err


def test_delete_group_by_path_and_index(home, tmp_path, capsys):
    config = Config.load([str(home)])
    folders = [str(tmp_path / name) for name in ("a", "b", "c")]
    for folder in folders:
        config.add_group(folder)
    config.delete_group(folders[1])
    assert config.search_folders() == [folders[0], folders[2]]
    config.delete_group_by_index(0)
    assert config.search_folders() == [folders[2]]
    config.delete_group_by_index(5)
    assert "Index out of range" in capsys.readouterr().err
    assert Config.load([str(home)]).search_folders() == [folders[2]]


def test_delete_missing_group_changes_nothing(home, capsys):
    config = Config.load([str(home)])
    config.delete_group("/nowhere")
    assert "Group not found" in capsys.readouterr().err
    assert config.path is None


def test_pinned_repos_round_trip(home, tmp_path, capsys):
    config = Config.load([str(home)])
    repo = str(tmp_path / "repo")
    config.add_pinned_repo(repo)
    config.add_pinned_repo(repo)
    assert "Pinned repo already exists" in capsys.readouterr().err
    assert Config.load([str(home)]).pinned_repos() == [repo]
    config.delete_pinned_repo(repo)
    assert Config.load([str(home)]).pinned_repos() == []


def test_delete_pinned_repo_by_index(home, tmp_path):
    config = Config.load([str(home)])
    repos = [str(tmp_path / "r1"), str(tmp_path / "r2")]
    for repo in repos:
        config.add_pinned_repo(repo)
    config.delete_pinned_repo_by_index(1)
    assert config.pinned_repos() == [repos[0]]
    config.delete_pinned_repo_by_index(-1)
    assert config.pinned_repos() == [repos[0]]


def test_global_branch_needs_config_file(home):
    config = Config.load([str(home)])
    with pytest.raises(ConfigError):
        config.add_global_pinned_branch("develop")


def test_global_branches_with_file(home):
    _write_config(home, {})
    config = Config.load([str(home)])
    config.add_global_pinned_branch("develop")
    assert config.is_branch_globally_pinned("develop")
    assert Config.load([str(home)]).global_pinned_branches() == ["main", "master", "develop"]
    config.delete_global_pinned_branch("main")
    assert Config.load([str(home)]).global_pinned_branches() == ["master", "develop"]
    assert not config.is_branch_globally_pinned("main")


def test_repo_pinned_branches_round_trip(home):
    config = Config.load([str(home)])
    repo_id = "github.com/user/repo"
    config.add_repo_pinned_branch(repo_id, "feature")
    config.add_repo_pinned_branch(repo_id, "release")
    assert config.is_branch_pinned_for_repo(repo_id, "feature")
    assert not config.is_branch_pinned_for_repo(repo_id, "main")
    assert config.pinned_branches_for_repo(repo_id) == ["main", "master", "feature", "release"]
    reloaded = Config.load([str(home)])
    assert reloaded.repo_pinned_branches() == {repo_id: ["feature", "release"]}
    reloaded.delete_repo_pinned_branch(repo_id, "feature")
    reloaded.delete_repo_pinned_branch(repo_id, "release")
    assert Config.load([str(home)]).repo_pinned_branches() == {}


def test_delete_repo_pinned_branch_messages(home, capsys):
    config = Config.load([str(home)])
    config.delete_repo_pinned_branch("github.com/user/repo", "feature")
    assert "No pinned branches found" in capsys.readouterr().err
    config.add_repo_pinned_branch("github.com/user/repo", "feature")
    config.delete_repo_pinned_branch("github.com/user/repo", "other")
    assert "not pinned for repo" in capsys.readouterr().err
    assert config.repo_pinned_branches() == {"github.com/user/repo": ["feature"]}


def test_repo_pinned_branches_skip_non_strings(home):
    _write_config(home, {"pins": {"branches": {"repositories": {"r": ["a", 3, "b"], "s": "x"}}}})
    assert Config.load([str(home)]).repo_pinned_branches() == {"r": ["a", "b"]}


def test_aliases_round_trip(home, capsys):
    config = Config.load([str(home)])
    config.add_alias("k", "/srv/kernel")
    config.add_alias("k", "/srv/other")
    assert Config.load([str(home)]).aliases() == {"k": "/srv/other"}
    config.delete_alias("k")
    assert Config.load([str(home)]).aliases() == {}
    config.delete_alias("k")
    assert "Alias not found" in capsys.readouterr().err


def test_save_writes_defaults(home):
    config = Config.load([str(home)])
    config.save()
    written = yaml.safe_load((home / ".gimme.config.yaml").read_text(encoding="utf-8"))
    assert written["pins"]["branches"]["global"] == ["main", "master"]
    assert written["search-folders"] == ["~/"]


def test_save_to_unwritable_path_raises(tmp_path):
    config = Config(path=str(tmp_path / "missing" / "config.yaml"))
    with pytest.raises(ConfigError):
        config.save()