"""Tests for the parse_lockfile entrypoint and batch scanning."""

import json

import pytest

from lockgraph import (
    LockfileFormat,
    MalformedInput,
    NoDependenciesFound,
    UnsupportedFormat,
    parse_lockfile,
    parse_lockfile_path,
)
from lockgraph.core import scan_directory


@pytest.fixture
def documents(package_lock_v1, package_lock_v3, yarn_lock, pnpm_lock):
    return [
        (package_lock_v1, "package-lock.json"),
        (package_lock_v3, "package-lock.json"),
        (yarn_lock, "yarn.lock"),
        (pnpm_lock, "pnpm-lock.yaml"),
    ]


class TestGraphProperties:
    """Properties every successful parse must satisfy."""

    def test_root_present(self, documents):
        for content, filename in documents:
            graph = parse_lockfile(content, filename)
            assert graph.root_id in graph.node_by_id()

    def test_ids_are_canonical(self, documents):
        for content, filename in documents:
            for node in parse_lockfile(content, filename).nodes:
                assert node.id == f"{node.name}@{node.version}"

    def test_ids_are_unique(self, documents):
        for content, filename in documents:
            ids = [n.id for n in parse_lockfile(content, filename).nodes]
            assert len(ids) == len(set(ids))

    def test_no_dangling_edges(self, documents):
        for content, filename in documents:
            graph = parse_lockfile(content, filename)
            ids = set(graph.node_by_id())
            for edge in graph.edges:
                assert edge.source_id in ids
                assert edge.target_id in ids

    def test_parsing_is_idempotent(self, documents):
        for content, filename in documents:
            first = parse_lockfile(content, filename)
            second = parse_lockfile(content, filename)
            assert set(first.nodes) == set(second.nodes)
            assert sorted(first.edges, key=repr) == sorted(second.edges, key=repr)

    def test_conflict_flags(self, documents):
        for content, filename in documents:
            graph = parse_lockfile(content, filename)
            versions = {}
            for node in graph.nodes:
                versions.setdefault(node.name, set()).add(node.version)
            for node in graph.nodes:
                assert node.has_version_conflict == (len(versions[node.name]) > 1)

    def test_distance_only_for_pnpm(self, documents):
        for content, filename in documents:
            graph = parse_lockfile(content, filename)
            has_distance = all(n.graph_distance is not None for n in graph.nodes)
            assert has_distance == (graph.lockfile_format == LockfileFormat.PNPM.value)


class TestParseLockfile:
    """Test dispatch, hints and error propagation."""

    def test_detects_from_content(self, package_lock_v3, pnpm_lock, yarn_lock):
        assert parse_lockfile(package_lock_v3).lockfile_format == "package-lock.json"
        assert parse_lockfile(pnpm_lock).lockfile_format == "pnpm-lock.yaml"
        assert parse_lockfile(yarn_lock).lockfile_format == "yarn.lock"

    def test_unrecognised_filename_falls_back_to_content(self, package_lock_v3):
        graph = parse_lockfile(package_lock_v3, "upload.txt")
        assert graph.lockfile_format == "package-lock.json"

    def test_legacy_selector(self, yarn_lock):
        graph = parse_lockfile(yarn_lock, lockfile_type="yarn")
        assert graph.root_id == "root@1.0.0"

    def test_unsupported_selector(self, yarn_lock):
        with pytest.raises(UnsupportedFormat):
            parse_lockfile(yarn_lock, lockfile_type="bun")

    def test_filename_forces_grammar(self):
        with pytest.raises(MalformedInput):
            parse_lockfile("foo@^1.0.0:\n  version \"1.0.0\"\n", "package-lock.json")

    def test_empty_json_raises(self):
        with pytest.raises(NoDependenciesFound):
            parse_lockfile(json.dumps({"lockfileVersion": 3, "packages": {}}))

    def test_empty_pnpm_does_not_raise(self):
        graph = parse_lockfile("lockfileVersion: '6.0'\n", "pnpm-lock.yaml")
        assert len(graph.nodes) == 1

    def test_graph_to_dict(self):
        content = json.dumps({"packages": {"": {}, "node_modules/lodash": {"version": "4.17.21"}}})
        data = parse_lockfile(content, "package-lock.json").to_dict()
        assert data["edges"] == [
            {
                "sourceId": "root@0.0.0",
                "targetId": "lodash@4.17.21",
                "dependencyKind": "production",
            }
        ]
        assert {n["id"] for n in data["nodes"]} == {"root@0.0.0", "lodash@4.17.21"}


class TestFiles:
    """Test reading lockfiles from disk."""

    def test_parse_lockfile_path_with_bom(self, tmp_path, yarn_lock):
        path = tmp_path / "yarn.lock"
        path.write_text("\ufeff" + yarn_lock, encoding="utf-8")
        graph = parse_lockfile_path(path)
        assert "chalk@2.4.2" in graph.node_by_id()

    def test_scan_directory(self, tmp_path, package_lock_v3, pnpm_lock):
        (tmp_path / "web").mkdir()
        (tmp_path / "api").mkdir()
        (tmp_path / "broken").mkdir()
        (tmp_path / "node_modules" / "dep").mkdir(parents=True)
        (tmp_path / "web" / "package-lock.json").write_text(package_lock_v3)
        (tmp_path / "api" / "pnpm-lock.yaml").write_text(pnpm_lock)
        (tmp_path / "broken" / "yarn.lock").write_text("")
        (tmp_path / "node_modules" / "dep" / "yarn.lock").write_text("ignored")

        results = dict(scan_directory(tmp_path))
        names = {path.relative_to(tmp_path.resolve()).as_posix() for path in results}
        assert names == {"web/package-lock.json", "api/pnpm-lock.yaml", "broken/yarn.lock"}
        broken = next(r for p, r in results.items() if p.parent.name == "broken")
        assert isinstance(broken, NoDependenciesFound)
