"""Parse pnpm-lock.yaml into a dependency graph.

Besides nodes and edges this parser records, for every package, the fewest
hops needed to reach it from the project root (``graph_distance``). Packages
that nothing links to from the root keep ``UNREACHABLE_DISTANCE``.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from collections.abc import Iterable, Mapping
from typing import Any

from ..builder import GraphBuilder
from ..detection import LockfileFormat
from ..errors import MalformedInput
from ..models import DependencyGraph, DependencyKind, make_node_id

logger = logging.getLogger(__name__)

UNREACHABLE_DISTANCE = 999
DEFAULT_ROOT_NAME = "root"
DEFAULT_ROOT_VERSION = "0.0.0"

# "/name@1.2.3", "/@scope/name@1.2.3(peer@1.0.0)" (v6) and "name@1.2.3" (v9)
_AT_KEY = re.compile(r"^/?(?P<name>(?:@[^/@]+/)?[^/@]+)@(?P<version>[^(]+)")
# "/name/1.2.3" and "/@scope/name/1.2.3_peer@1.0.0" (v5)
_SLASH_KEY = re.compile(r"^/(?P<name>(?:@[^/]+/)?[^/]+)/(?P<version>[^/_(]+)")

_LOCAL_PREFIXES = ("link:", "file:", "workspace:")

_ROOT_SECTIONS = (
    ("dependencies", DependencyKind.PRODUCTION),
    ("devDependencies", DependencyKind.DEVELOPMENT),
    ("optionalDependencies", DependencyKind.OPTIONAL),
)
_ENTRY_SECTIONS = (
    ("dependencies", None),
    ("optionalDependencies", DependencyKind.OPTIONAL),
    ("peerDependencies", DependencyKind.PEER),
)


def _load(content: str) -> dict[str, Any]:
    import yaml

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise MalformedInput(f"Failed to parse lockfile: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedInput("Failed to parse lockfile: pnpm-lock.yaml must be a mapping")
    return data


def split_package_key(key: Any) -> tuple[str, str] | None:
    """Return (name, version) for a packages/snapshots key, or None for the root."""
    if not isinstance(key, str):
        return None
    ref = key.strip()
    match = _AT_KEY.match(ref) or _SLASH_KEY.match(ref)
    if match is None:
        return None
    version = match.group("version").strip()
    if not version:
        return None
    return match.group("name"), version


def concrete_version(value: Any) -> str | None:
    """Strip range prefixes and peer suffixes from a declared dependency version."""
    if isinstance(value, dict):
        value = value.get("version")
    if value is None:
        return None
    text = str(value).strip()
    if text.startswith(_LOCAL_PREFIXES + ("/",)):
        return None
    text = text.split("(", 1)[0].split("_", 1)[0]
    text = text.lstrip("^~").strip()
    return text or None


def dependency_ref(name: str, value: Any) -> tuple[str, str] | None:
    """Return the (name, version) a declared dependency resolves to.

    Aliases resolve to the real package: ``alias: real@1.0.0`` (v9) as well
    as ``/real@1.0.0`` (v6) and ``/real/1.0.0`` (v5). Local links yield None.
    """
    if isinstance(value, dict):
        value = value.get("version")
    if value is None:
        return None
    text = str(value).strip()
    if text.startswith(_LOCAL_PREFIXES):
        return None
    if text.startswith("npm:"):
        text = text[len("npm:"):]
    # "18.2.0(react@18.2.0)" and "18.2.0_react@18.2.0" are versions, not aliases
    head = text.split("(", 1)[0]
    if head.startswith("/") or ("@" in head[1:] and not head[:1].isdigit()):
        parsed = split_package_key(text)
        if parsed is None:
            return None
        name, text = parsed
    version = concrete_version(text)
    if version is None:
        return None
    return name, version


def _root_names(data: Mapping[str, Any]) -> dict[str, DependencyKind]:
    sources: list[Mapping[str, Any]] = [data]
    importers = data.get("importers")
    if isinstance(importers, dict) and isinstance(importers.get("."), dict):
        sources.append(importers["."])

    names: dict[str, DependencyKind] = {}
    for source in sources:
        for section, kind in _ROOT_SECTIONS:
            declared = source.get(section)
            if isinstance(declared, dict):
                for name, value in declared.items():
                    ref = dependency_ref(str(name), value)
                    names.setdefault(ref[0] if ref else str(name), kind)
    return names


def _entries(table: Any) -> Iterable[tuple[str, str, Mapping[str, Any]]]:
    if not isinstance(table, dict):
        return
    for key, meta in table.items():
        parsed = split_package_key(key)
        if parsed is None:
            continue
        name, version = parsed
        yield name, version, meta if isinstance(meta, dict) else {}


def _assign_distances(builder: GraphBuilder, root_id: str) -> None:
    # Runs once every edge is known; a peer edge may point at a node that
    # a later entry created.
    adjacency: dict[str, list[str]] = {}
    for edge in builder.edges:
        if builder.has_node(edge.target_id):
            adjacency.setdefault(edge.source_id, []).append(edge.target_id)

    distances = {root_id: 0}
    queue = deque([root_id])
    while queue:
        current = queue.popleft()
        for child in adjacency.get(current, ()):
            if child not in distances:
                distances[child] = distances[current] + 1
                queue.append(child)
    for node_id, distance in distances.items():
        builder.set_distance(node_id, distance)


def parse(content: str) -> DependencyGraph:
    """Return the dependency graph described by a pnpm-lock.yaml document.

    An empty document yields a graph holding only the root node.

    Raises:
        MalformedInput: if the document is not valid YAML or not a mapping.
    """
    data = _load(content)
    builder = GraphBuilder(LockfileFormat.PNPM.value)
    root = builder.add_root(
        str(data.get("name") or DEFAULT_ROOT_NAME),
        str(data.get("version") or DEFAULT_ROOT_VERSION),
        graph_distance=0,
    )
    root_names = _root_names(data)

    packages = list(_entries(data.get("packages")))
    snapshots = list(_entries(data.get("snapshots")))

    for name, version, meta in packages + snapshots:
        kind = DependencyKind.from_flags(dev=meta.get("dev"), optional=meta.get("optional"))
        builder.add_node(name, version, kind, UNREACHABLE_DISTANCE)

    for name, version, meta in packages + snapshots:
        node = builder.add_node(name, version)
        for section, section_kind in _ENTRY_SECTIONS:
            declared = meta.get(section)
            if not isinstance(declared, dict):
                continue
            for dep_name, dep_value in declared.items():
                ref = dependency_ref(str(dep_name), dep_value)
                if ref is None:
                    continue
                dep_name, dep_version = ref
                if section_kind is DependencyKind.PEER:
                    # Peers resolve elsewhere; unmatched ones are dropped on assembly.
                    builder.add_edge(node.id, make_node_id(dep_name, dep_version), section_kind)
                    continue
                target = builder.add_node(dep_name, dep_version, None, UNREACHABLE_DISTANCE)
                builder.add_edge(node.id, target.id, section_kind or target.dependency_kind)

    seen_roots: set[str] = set()
    for name, version, _meta in packages + snapshots:
        kind = root_names.get(name)
        if kind is None:
            continue
        node = builder.add_node(name, version)
        if node.id in seen_roots:
            continue
        seen_roots.add(node.id)
        builder.add_edge(root.id, node.id, kind)

    _assign_distances(builder, root.id)
    logger.debug(
        "pnpm-lock.yaml: %d nodes, %d edges, %d reachable from root",
        len(builder.nodes),
        len(builder.edges),
        sum(1 for node in builder.nodes if node.graph_distance != UNREACHABLE_DISTANCE),
    )
    return builder.build(require_dependencies=False)
