"""Human-readable Markdown summary of a parsed lockfile."""

from __future__ import annotations

from .models import DependencyGraph, DependencyKind
from .report import conflicts_by_name


def render_summary(graph: DependencyGraph, title: str | None = None) -> str:
    """Return a Markdown string with totals and a table of version conflicts."""
    conflicts = conflicts_by_name(graph)
    dependencies = [node for node in graph.nodes if node.id != graph.root_id]

    lines = []
    lines.append(f"# {title or graph.lockfile_format} Dependency Summary")
    lines.append("")
    lines.append(f"Root: {graph.root_id}")
    lines.append(
        f"Packages: {len(dependencies)} | Edges: {len(graph.edges)} | Conflicts: {len(conflicts)}"
    )
    lines.append("")
    lines.append("| Kind | Packages |")
    lines.append("| --- | --- |")
    for kind in DependencyKind:
        count = sum(1 for node in dependencies if node.dependency_kind is kind)
        lines.append(f"| {kind.value} | {count} |")
    lines.append("")
    lines.append("| Package | Versions |")
    lines.append("| --- | --- |")

    if not conflicts:
        lines.append("| (none) | No version conflicts |")
    for name, versions in conflicts.items():
        lines.append(f"| {name} | {', '.join(versions)} |")

    return "\n".join(lines) + "\n"
