"""Tests for the CLI commands."""

import json
from pathlib import Path

from typer.testing import CliRunner

from gitstate.cli import app

runner = CliRunner()


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "gitstate" in result.output


class TestInit:
    def test_creates_config(self, tmp_git_repo: Path, monkeypatch):
        monkeypatch.chdir(tmp_git_repo)
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        assert (tmp_git_repo / ".gitstate.toml").exists()

    def test_refuses_overwrite(self, tmp_git_repo: Path, monkeypatch):
        monkeypatch.chdir(tmp_git_repo)
        (tmp_git_repo / ".gitstate.toml").write_text("existing")
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1


class TestStatus:
    def test_clean_tree(self, tmp_git_repo: Path, monkeypatch):
        monkeypatch.chdir(tmp_git_repo)
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "clean" in result.output

    def test_table(self, tmp_git_repo: Path, monkeypatch, git):
        monkeypatch.chdir(tmp_git_repo)
        (tmp_git_repo / "new.txt").write_text("x = 1\n")
        git(tmp_git_repo, "add", "new.txt")
        (tmp_git_repo / "scratch.txt").write_text("notes\n")
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "new.txt" in result.output
        assert "scratch.txt" in result.output

    def test_json_format(self, tmp_git_repo: Path, monkeypatch, git):
        monkeypatch.chdir(tmp_git_repo)
        (tmp_git_repo / "README.md").write_text("# Changed\n")
        git(tmp_git_repo, "add", "README.md")
        (tmp_git_repo / "README.md").write_text("# Changed again\n")
        result = runner.invoke(app, ["status", "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        readme = [e for e in data["entries"] if e["path"] == "README.md"]
        assert sorted(e["staged"] for e in readme) == [False, True]
        assert data["summary"]["modified"] == 2

    def test_bad_base_revision(self, tmp_git_repo: Path, monkeypatch):
        monkeypatch.chdir(tmp_git_repo)
        result = runner.invoke(app, ["status", "--base", "no-such-branch"])
        assert result.exit_code == 2

    def test_bad_format(self, tmp_git_repo: Path, monkeypatch):
        monkeypatch.chdir(tmp_git_repo)
        result = runner.invoke(app, ["status", "--format", "invalid"])
        assert result.exit_code == 2

    def test_outside_repo(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 2


class TestDiff:
    def test_no_changes(self, tmp_git_repo: Path, monkeypatch):
        monkeypatch.chdir(tmp_git_repo)
        result = runner.invoke(app, ["diff"])
        assert result.exit_code == 0
        assert "No differences" in result.output

    def test_working_diff_json(self, tmp_git_repo: Path, monkeypatch):
        monkeypatch.chdir(tmp_git_repo)
        (tmp_git_repo / "README.md").write_text("# Test\nline two\n")
        result = runner.invoke(app, ["diff", "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        (entry,) = data["files"]
        assert entry["b_path"] == "README.md"
        assert entry["insertions"] == 1
        assert entry["deletions"] == 0
        assert data["summary"]["files_changed"] == 1

    def test_cached_stat(self, tmp_git_repo: Path, monkeypatch, git):
        monkeypatch.chdir(tmp_git_repo)
        (tmp_git_repo / "added.txt").write_text("a\nb\n")
        git(tmp_git_repo, "add", "added.txt")
        result = runner.invoke(app, ["diff", "--cached", "--stat"])
        assert result.exit_code == 0
        assert "added.txt" in result.output
        assert "1 file changed" in result.output

    def test_path_filter(self, tmp_git_repo: Path, monkeypatch, git):
        monkeypatch.chdir(tmp_git_repo)
        (tmp_git_repo / "one.txt").write_text("1\n")
        (tmp_git_repo / "two.txt").write_text("2\n")
        git(tmp_git_repo, "add", "one.txt", "two.txt")
        result = runner.invoke(app, ["diff", "--cached", "--format", "json", "two.txt"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [f["b_path"] for f in data["files"]] == ["two.txt"]

    def test_cached_against_base(self, tmp_git_repo: Path, monkeypatch, git):
        monkeypatch.chdir(tmp_git_repo)
        (tmp_git_repo / "README.md").write_text("# Test\nsecond\n")
        git(tmp_git_repo, "commit", "-am", "second")
        result = runner.invoke(app, ["diff", "--cached", "--base", "HEAD~1", "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [f["b_path"] for f in data["files"]] == ["README.md"]
        assert data["summary"]["insertions"] == 1
