"""Parse npm package-lock.json into a dependency graph.

Supports npm v1 ("dependencies" tree) and v2+ ("packages" map). A v2 file
carries both shapes; both are read into the same graph.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from collections.abc import Mapping
from typing import Any, TypeAlias

from ..builder import GraphBuilder
from ..detection import LockfileFormat
from ..errors import MalformedInput
from ..models import DependencyGraph, DependencyKind, make_node_id

logger = logging.getLogger(__name__)

UNKNOWN_VERSION = "unknown"
DEFAULT_ROOT_NAME = "root"
DEFAULT_ROOT_VERSION = "0.0.0"

_NODE_MODULES = "node_modules/"


@dataclass(slots=True, frozen=True)
class LegacyTree:
    """npm v1 nested ``dependencies`` object."""

    dependencies: Mapping[str, Any]


@dataclass(slots=True, frozen=True)
class PackageTable:
    """npm v2+ flat ``packages`` object keyed by install path."""

    packages: Mapping[str, Any]


LockShape: TypeAlias = LegacyTree | PackageTable


def _load(content: str) -> dict[str, Any]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise MalformedInput(f"Failed to parse lockfile: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedInput("Failed to parse lockfile: package-lock.json must be a JSON object")
    return data


def _shapes(data: Mapping[str, Any]) -> list[LockShape]:
    shapes: list[LockShape] = []
    dependencies = data.get("dependencies")
    if isinstance(dependencies, dict) and dependencies:
        shapes.append(LegacyTree(dependencies))
    packages = data.get("packages")
    if isinstance(packages, dict) and packages:
        shapes.append(PackageTable(packages))
    return shapes


def _root_identity(data: Mapping[str, Any]) -> tuple[str, str]:
    packages = data.get("packages")
    root_meta = packages.get("") if isinstance(packages, dict) else None
    if not isinstance(root_meta, dict):
        root_meta = {}
    name = data.get("name") or root_meta.get("name") or DEFAULT_ROOT_NAME
    version = data.get("version") or root_meta.get("version") or DEFAULT_ROOT_VERSION
    return str(name), str(version)


def _kind(meta: Mapping[str, Any], *, dev: bool = False) -> DependencyKind:
    return DependencyKind.from_flags(
        dev=dev or meta.get("dev") or meta.get("devOptional"),
        peer=meta.get("peer"),
        optional=meta.get("optional"),
    )


# ---- v1 nested tree ----------------------------------------------------------------


def _lookup_required(
    name: str, scopes: tuple[Mapping[str, Any], ...]
) -> Mapping[str, Any] | None:
    # Innermost scope first, the way npm resolves nested installs.
    for scope in reversed(scopes):
        meta = scope.get(name)
        if isinstance(meta, dict):
            return meta
    return None


def _walk_legacy(
    builder: GraphBuilder,
    entries: Mapping[str, Any],
    parent_id: str,
    scopes: tuple[Mapping[str, Any], ...],
    inherited_dev: bool,
) -> None:
    for name, meta in entries.items():
        if not isinstance(meta, dict) or not name:
            continue
        version = str(meta.get("version") or UNKNOWN_VERSION)
        dev = inherited_dev or bool(meta.get("dev"))
        kind = _kind(meta, dev=dev)
        node = builder.add_node(name, version, kind)
        builder.add_edge(parent_id, node.id, kind)

        children = meta.get("dependencies")
        if not isinstance(children, dict):
            children = {}
        inner_scopes = scopes + (children,) if children else scopes

        requires = meta.get("requires")
        if isinstance(requires, dict):
            for required in requires:
                if required in children:
                    continue
                target = _lookup_required(required, inner_scopes)
                if target is None:
                    logger.debug("Unresolved requirement %s of %s", required, node.id)
                    continue
                target_version = str(target.get("version") or UNKNOWN_VERSION)
                builder.add_edge(
                    node.id,
                    make_node_id(required, target_version),
                    _kind(target),
                )

        if children:
            _walk_legacy(builder, children, node.id, inner_scopes, dev)


# ---- v2+ flat table ----------------------------------------------------------------


def _package_name(path: str, meta: Mapping[str, Any]) -> str:
    if _NODE_MODULES in path:
        return path.rsplit(_NODE_MODULES, 1)[-1]
    declared = meta.get("name")
    if isinstance(declared, str) and declared:
        return declared
    return path.rsplit("/", 1)[-1]


def _is_direct(path: str) -> bool:
    return path.startswith(_NODE_MODULES) and path.split("/").count("node_modules") == 1


def _resolve_install_path(
    packages: Mapping[str, Any], from_path: str, dep_name: str
) -> str | None:
    base = from_path
    while True:
        candidate = f"{base}/{_NODE_MODULES}{dep_name}" if base else f"{_NODE_MODULES}{dep_name}"
        if candidate in packages:
            return candidate
        if not base:
            return None
        idx = base.rfind("/" + _NODE_MODULES)
        base = base[:idx] if idx != -1 else ""


def _read_table(builder: GraphBuilder, packages: Mapping[str, Any], root_id: str) -> None:
    resolved: dict[str, tuple[str, DependencyKind]] = {}
    links: dict[str, str] = {}

    for path, meta in packages.items():
        if path == "" or not isinstance(meta, dict):
            continue
        if meta.get("link") and isinstance(meta.get("resolved"), str):
            links[path] = meta["resolved"]
            continue
        name = _package_name(path, meta)
        if not name:
            continue
        version = str(meta.get("version") or UNKNOWN_VERSION)
        kind = _kind(meta)
        node = builder.add_node(name, version, kind)
        resolved[path] = (node.id, kind)

    for path, target in links.items():
        if target in resolved:
            resolved[path] = resolved[target]

    for path, meta in packages.items():
        if path not in resolved or not isinstance(meta, dict):
            continue
        node_id, kind = resolved[path]
        for section in ("dependencies", "optionalDependencies", "peerDependencies"):
            declared = meta.get(section)
            if not isinstance(declared, dict):
                continue
            for dep_name, dep_range in declared.items():
                install_path = _resolve_install_path(packages, path, dep_name)
                if install_path is not None and install_path in resolved:
                    target_id, target_kind = resolved[install_path]
                else:
                    target_id = make_node_id(dep_name, str(dep_range))
                    target_kind = DependencyKind.PRODUCTION
                if section == "peerDependencies":
                    target_kind = DependencyKind.PEER
                elif section == "optionalDependencies" and target_kind is DependencyKind.PRODUCTION:
                    target_kind = DependencyKind.OPTIONAL
                builder.add_edge(node_id, target_id, target_kind)

        if _is_direct(path):
            builder.add_edge(root_id, node_id, kind)


def parse(content: str) -> DependencyGraph:
    """Return the dependency graph described by a package-lock.json document.

    Raises:
        MalformedInput: if the document is not a JSON object.
        NoDependenciesFound: if nothing besides the root project was found.
    """
    data = _load(content)
    builder = GraphBuilder(LockfileFormat.PACKAGE_LOCK.value)
    root_name, root_version = _root_identity(data)
    root = builder.add_root(root_name, root_version)

    for shape in _shapes(data):
        if isinstance(shape, LegacyTree):
            _walk_legacy(builder, shape.dependencies, root.id, (shape.dependencies,), False)
        elif isinstance(shape, PackageTable):
            _read_table(builder, shape.packages, root.id)
        else:  # pragma: no cover - exhaustive over LockShape
            raise TypeError(f"Unhandled lockfile shape: {shape!r}")

    logger.debug(
        "package-lock.json: %d nodes, %d edges before assembly",
        len(builder.nodes),
        len(builder.edges),
    )
    return builder.build(require_dependencies=True)
