"""Depends-on edge model."""

from __future__ import annotations

from dataclasses import dataclass

from .node import DependencyKind


@dataclass(slots=True, frozen=True)
class Edge:
    """Directed parent -> dependency relationship.

    Parallel edges between the same pair are allowed, so edges carry no
    identity beyond their fields.
    """

    source_id: str
    target_id: str
    dependency_kind: DependencyKind = DependencyKind.PRODUCTION

    def __post_init__(self) -> None:
        if not self.source_id or not self.target_id:
            raise ValueError("Edge endpoints must be non-empty node ids")

    def to_dict(self) -> dict[str, str]:
        return {
            "sourceId": self.source_id,
            "targetId": self.target_id,
            "dependencyKind": self.dependency_kind.value,
        }
