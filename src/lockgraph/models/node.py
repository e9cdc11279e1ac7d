"""Package node model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class DependencyKind(str, Enum):
    """How a package is pulled into the project."""

    PRODUCTION = "production"
    DEVELOPMENT = "development"
    PEER = "peer"
    OPTIONAL = "optional"

    @classmethod
    def from_flags(
        cls, *, dev: Any = False, peer: Any = False, optional: Any = False
    ) -> DependencyKind:
        """Classify an entry from its lockfile flags (dev > peer > optional)."""
        if dev:
            return cls.DEVELOPMENT
        if peer:
            return cls.PEER
        if optional:
            return cls.OPTIONAL
        return cls.PRODUCTION

    @classmethod
    def coerce(cls, value: DependencyKind | str | None) -> DependencyKind:
        if value is None:
            return cls.PRODUCTION
        return cls(value)


def make_node_id(name: str, version: str) -> str:
    return f"{name}@{version}"


@dataclass(slots=True, frozen=True)
class Node:
    """A resolved package instance (name + version) in the dependency graph."""

    id: str
    name: str
    version: str
    dependency_kind: DependencyKind = DependencyKind.PRODUCTION
    has_version_conflict: bool = False
    graph_distance: int | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Node name must be non-empty")
        if not self.version:
            raise ValueError("Node version must be non-empty")
        if self.id != make_node_id(self.name, self.version):
            raise ValueError(f"Node id {self.id!r} does not match {self.name}@{self.version}")
        if self.graph_distance is not None and self.graph_distance < 0:
            raise ValueError("graph_distance must be non-negative")

    @classmethod
    def make(
        cls,
        name: str,
        version: str,
        dependency_kind: DependencyKind | str | None = None,
        graph_distance: int | None = None,
    ) -> Node:
        return cls(
            id=make_node_id(name, version),
            name=name,
            version=version,
            dependency_kind=DependencyKind.coerce(dependency_kind),
            graph_distance=graph_distance,
        )

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "dependencyKind": self.dependency_kind.value,
            "hasVersionConflict": self.has_version_conflict,
        }
        if self.graph_distance is not None:
            data["graphDistance"] = self.graph_distance
        return data
