"""CLI entrypoint for validating a lockgraph JSON report."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from collections.abc import Iterable
from typing import Any

from jsonschema import Draft202012Validator

DEFAULT_SCHEMA = Path(__file__).resolve().parent / "graph.schema.json"


def _load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _format_errors(errors: Iterable) -> str:
    messages = []
    for error in errors:
        pointer = "/".join(str(p) for p in error.path)
        messages.append(f"- {pointer or '<root>'}: {error.message}")
    return "\n".join(messages)


def _dangling_edges(report: dict[str, Any]) -> list[str]:
    node_ids = {node.get("id") for node in report.get("nodes", []) if isinstance(node, dict)}
    problems = []
    for index, edge in enumerate(report.get("edges", [])):
        if not isinstance(edge, dict):
            continue
        for key in ("sourceId", "targetId"):
            if edge.get(key) not in node_ids:
                problems.append(f"- edges/{index}/{key}: unknown node {edge.get(key)!r}")
    return problems


def validate_report(report: dict[str, Any], schema_path: Path = DEFAULT_SCHEMA) -> None:
    """Raise ValueError listing every schema violation or dangling edge in ``report``."""
    validator = Draft202012Validator(_load_json(schema_path))
    errors = sorted(validator.iter_errors(report), key=lambda e: [str(p) for p in e.path])
    messages = []
    if errors:
        messages.append(_format_errors(errors))
    messages.extend(_dangling_edges(report))
    if messages:
        raise ValueError("\n" + "\n".join(messages))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("input", type=Path, help="Path to the JSON report to validate")
    parser.add_argument(
        "--schema",
        type=Path,
        default=DEFAULT_SCHEMA,
        help="Path to the JSON schema used for validation",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        validate_report(_load_json(args.input), args.schema)
    except FileNotFoundError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as exc:
        print(f"ERROR: Failed to read JSON: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"ERROR: Report failed validation:{exc}", file=sys.stderr)
        return 1

    print(f"Report {args.input} is valid against {args.schema}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
