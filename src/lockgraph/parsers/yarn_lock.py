"""Parse yarn.lock into a dependency graph.

yarn.lock does not say which packages the project depends on directly, so
every package is linked from a synthetic root. Dependency entries only carry a
range, not the resolved version; they are linked to the first package in the
file with the same name. With several versions of one package installed this
may pick the wrong one.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from collections.abc import Iterator

from ..builder import GraphBuilder
from ..detection import LockfileFormat
from ..models import DependencyGraph, DependencyKind

logger = logging.getLogger(__name__)

ROOT_NAME = "root"
ROOT_VERSION = "1.0.0"

_SECTIONS = {
    "dependencies:": DependencyKind.PRODUCTION,
    "optionalDependencies:": DependencyKind.OPTIONAL,
}
_DEP_LINE = re.compile(r'^"?(?P<name>[^"\s]+?)"?:?\s+"?(?P<range>[^"]*)"?$')


@dataclass(slots=True)
class _Block:
    header: str
    lines: list[str] = field(default_factory=list)


@dataclass(slots=True)
class _Package:
    name: str
    version: str
    dependencies: list[tuple[str, DependencyKind]]


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def _iter_blocks(content: str) -> Iterator[_Block]:
    block: _Block | None = None
    for raw in content.splitlines():
        line = raw.rstrip()
        if not line.strip():
            if block is not None:
                yield block
            block = None
            continue
        if line.lstrip().startswith("#"):
            continue
        if _indent(line) == 0:
            if block is not None:
                yield block
            block = _Block(header=line)
            continue
        if block is not None:
            block.lines.append(line)
    if block is not None:
        yield block


def _package_name(header: str) -> str | None:
    """Return the package name from a block header such as ``"@a/b@^1.0.0, @a/b@^1.1.0":``."""
    if not header.endswith(":"):
        return None
    first = header[:-1].split(",", 1)[0].strip().strip('"').strip("'")
    if first.startswith("@"):
        idx = first.find("@", 1)
        name = first[:idx] if idx != -1 else first
    else:
        name = first.split("@", 1)[0]
    return name or None


def _version(line: str) -> str | None:
    stripped = line.strip()
    if stripped.startswith("version "):
        part = stripped.split(" ", 1)[1]
    elif stripped.startswith("version:"):
        part = stripped.split(":", 1)[1]
    else:
        return None
    version = part.strip().strip('"').strip("'")
    return version or None


def _read_block(block: _Block) -> _Package | None:
    name = _package_name(block.header)
    if name is None or name == "__metadata":
        return None

    version: str | None = None
    dependencies: list[tuple[str, DependencyKind]] = []
    section: DependencyKind | None = None
    section_indent = 0

    for line in block.lines:
        stripped = line.strip()
        indent = _indent(line)
        if section is not None and indent <= section_indent:
            section = None
        if section is not None:
            match = _DEP_LINE.match(stripped)
            if match:
                dependencies.append((match.group("name"), section))
            continue
        if stripped in _SECTIONS:
            section = _SECTIONS[stripped]
            section_indent = indent
            continue
        if version is None:
            version = _version(line)

    if version is None:
        return None
    return _Package(name=name, version=version, dependencies=dependencies)


def parse(content: str) -> DependencyGraph:
    """Return the dependency graph described by a yarn.lock document.

    Raises:
        NoDependenciesFound: if no package block could be read.
    """
    builder = GraphBuilder(LockfileFormat.YARN.value)
    root = builder.add_root(ROOT_NAME, ROOT_VERSION)

    packages: list[tuple[str, _Package]] = []
    for block in _iter_blocks(content):
        package = _read_block(block)
        if package is None:
            continue
        node = builder.add_node(package.name, package.version)
        builder.add_edge(root.id, node.id)
        packages.append((node.id, package))

    # Links are resolved once every block is known, so a dependency declared
    # above its own block still finds it.
    for node_id, package in packages:
        for dep_name, kind in package.dependencies:
            target = builder.first_node_named(dep_name)
            if target is None:
                logger.debug("No package block for %s (required by %s)", dep_name, node_id)
                continue
            builder.add_edge(node_id, target.id, kind)

    return builder.build(require_dependencies=True)
