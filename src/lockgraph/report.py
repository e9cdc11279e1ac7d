"""Report building and schema-friendly output."""

from __future__ import annotations

from collections import Counter
from typing import Any

from .conflicts import sorted_versions
from .models import DependencyGraph, DependencyKind

REPORT_VERSION = "1"


def conflicts_by_name(graph: DependencyGraph) -> dict[str, list[str]]:
    """Map every conflicting package name to its versions in release order."""
    versions: dict[str, list[str]] = {}
    for node in graph.nodes:
        if node.has_version_conflict:
            versions.setdefault(node.name, []).append(node.version)
    return {name: sorted_versions(found) for name, found in sorted(versions.items())}


def graph_report(graph: DependencyGraph, source: str | None = None) -> dict[str, Any]:
    """Return a JSON-ready report for a single parsed lockfile.

    The ``nodes``/``edges`` lists are the graph itself; ``totals`` and
    ``conflicts`` are derived from it for quick inspection.
    """
    kinds = Counter(node.dependency_kind for node in graph.nodes if node.id != graph.root_id)
    conflicts = conflicts_by_name(graph)

    report: dict[str, Any] = {
        "version": REPORT_VERSION,
        "format": graph.lockfile_format,
        "root": graph.root_id,
        **graph.to_dict(),
        "conflicts": [
            {"package": name, "versions": versions} for name, versions in conflicts.items()
        ],
        "totals": {
            "nodes": len(graph.nodes),
            "edges": len(graph.edges),
            "conflicts": len(conflicts),
            "byKind": {kind.value: kinds.get(kind, 0) for kind in DependencyKind},
        },
    }
    if source is not None:
        report["source"] = source
    return report


def aggregate(
    reports: list[dict[str, Any]], errors: list[dict[str, str]] | None = None
) -> dict[str, Any]:
    """Aggregate per-lockfile reports into a single batch report.

    ``errors`` lists lockfiles that failed to parse as ``{"source", "error"}``
    objects; they are counted but carry no graph.
    """
    errors = errors or []
    total_conflicts = sum(len(r.get("conflicts", [])) for r in reports)

    return {
        "version": REPORT_VERSION,
        "hasConflicts": total_conflicts > 0,
        "projects": reports,
        "errors": errors,
        "totals": {
            "projects": len(reports),
            "errors": len(errors),
            "conflicts": total_conflicts,
        },
    }
