"""Tests for the command line entrypoint and remote fetching."""

import json
from unittest.mock import Mock

import pytest

from lockgraph import cli
from lockgraph import fetch
from lockgraph.fetch import FetchError, fetch_lockfile, filename_from_url


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("LOCKGRAPH_CONFIG", raising=False)
    monkeypatch.delenv("LOCKGRAPH_LOG_LEVEL", raising=False)


@pytest.fixture
def project(tmp_path, package_lock_v3, yarn_lock):
    (tmp_path / "web").mkdir()
    (tmp_path / "legacy").mkdir()
    (tmp_path / "web" / "package-lock.json").write_text(package_lock_v3)
    (tmp_path / "legacy" / "yarn.lock").write_text(yarn_lock)
    return tmp_path


class TestMain:
    """Test argument handling, output and exit codes."""

    def test_single_file_json(self, project, capsys):
        path = project / "web" / "package-lock.json"
        assert cli.main([str(path)]) == cli.EXIT_OK
        report = json.loads(capsys.readouterr().out)
        assert report["format"] == "package-lock.json"
        assert report["root"] == "demo-app@2.0.0"

    def test_summary_output(self, project, capsys):
        path = project / "legacy" / "yarn.lock"
        assert cli.main([str(path), "--output", "summary"]) == cli.EXIT_OK
        assert "| chalk | 2.4.2, 4.1.2 |" in capsys.readouterr().out

    def test_directory_batch(self, project, capsys):
        assert cli.main([str(project)]) == cli.EXIT_OK
        batch = json.loads(capsys.readouterr().out)
        assert batch["totals"]["projects"] == 2
        assert batch["hasConflicts"] is True

    def test_fail_on_conflicts(self, project):
        path = project / "legacy" / "yarn.lock"
        assert cli.main([str(path), "--fail-on-conflicts"]) == cli.EXIT_CONFLICTS

    def test_fail_on_conflicts_from_config(self, project, tmp_path):
        config = tmp_path / "settings.json"
        config.write_text(json.dumps({"fail_on_conflicts": True}))
        path = project / "legacy" / "yarn.lock"
        assert cli.main([str(path), "--config", str(config)]) == cli.EXIT_CONFLICTS

    def test_conflict_between_nested_installs(self, project):
        path = project / "web" / "package-lock.json"
        # semver is installed at the top level and nested under @babel/core
        assert cli.main([str(path), "--fail-on-conflicts"]) == cli.EXIT_CONFLICTS

    def test_fail_on_conflicts_without_conflicts(self, tmp_path, pnpm_lock):
        path = tmp_path / "pnpm-lock.yaml"
        path.write_text(pnpm_lock)
        assert cli.main([str(path), "--fail-on-conflicts"]) == cli.EXIT_OK

    def test_parse_error(self, tmp_path, capsys):
        path = tmp_path / "package-lock.json"
        path.write_text("{not json")
        assert cli.main([str(path)]) == cli.EXIT_ERROR
        captured = capsys.readouterr()
        assert "Failed to parse lockfile" in captured.err
        assert captured.out == ""

    def test_missing_file(self, tmp_path, capsys):
        assert cli.main([str(tmp_path / "yarn.lock")]) == cli.EXIT_ERROR
        assert "Failed to read" in capsys.readouterr().err

    def test_unsupported_format(self, project, capsys):
        path = project / "legacy" / "yarn.lock"
        assert cli.main([str(path), "--format", "bun"]) == cli.EXIT_ERROR
        assert "not supported" in capsys.readouterr().err

    def test_partial_batch_failure(self, project, capsys):
        (project / "empty").mkdir()
        (project / "empty" / "yarn.lock").write_text("")
        assert cli.main([str(project)]) == cli.EXIT_ERROR
        captured = capsys.readouterr()
        batch = json.loads(captured.out)
        assert batch["totals"] == {"projects": 2, "errors": 1, "conflicts": 2}
        assert "No dependencies found" in captured.err

    def test_bad_config(self, project, tmp_path, capsys):
        config = tmp_path / "settings.json"
        config.write_text("[]")
        path = project / "web" / "package-lock.json"
        assert cli.main([str(path), "--config", str(config)]) == cli.EXIT_ERROR
        assert "ERROR" in capsys.readouterr().err

    def test_url_source(self, monkeypatch, yarn_lock, capsys):
        fetched = Mock(return_value=yarn_lock)
        monkeypatch.setattr(cli, "fetch_lockfile", fetched)
        url = "https://example.com/org/repo/raw/main/yarn.lock?token=abc"
        assert cli.main([url]) == cli.EXIT_OK
        fetched.assert_called_once_with(url)
        assert json.loads(capsys.readouterr().out)["format"] == "yarn.lock"

    def test_url_fetch_failure(self, monkeypatch, capsys):
        monkeypatch.setattr(cli, "fetch_lockfile", Mock(side_effect=FetchError("boom")))
        assert cli.main(["https://example.com/yarn.lock"]) == cli.EXIT_ERROR
        assert "boom" in capsys.readouterr().err


class TestFetch:
    """Test remote lockfile retrieval without touching the network."""

    def test_fetch_success(self, monkeypatch):
        response = Mock(status_code=200, content=b'{"lockfileVersion": 3}')
        monkeypatch.setattr(fetch, "_http_get", Mock(return_value=response))
        assert fetch_lockfile("https://example.com/package-lock.json") == '{"lockfileVersion": 3}'

    def test_fetch_bad_status(self, monkeypatch):
        monkeypatch.setattr(fetch, "_http_get", Mock(return_value=Mock(status_code=404)))
        with pytest.raises(FetchError, match="404"):
            fetch_lockfile("https://example.com/yarn.lock")

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://example.com/a/pnpm-lock.yaml", "pnpm-lock.yaml"),
            ("https://example.com/a/yarn.lock?raw=1#top", "yarn.lock"),
            ("https://example.com/", "example.com"),
        ],
    )
    def test_filename_from_url(self, url, expected):
        assert filename_from_url(url) == expected
