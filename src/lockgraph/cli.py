"""Command line entrypoint: parse lockfiles and print their dependency graphs.

Usage:
  lockgraph path/to/package-lock.json [--output summary]
  lockgraph . --fail-on-conflicts
  lockgraph https://example.com/yarn.lock --format yarn
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, TypeAlias

from .config import OUTPUT_FORMATS, ConfigError, load_settings
from .core import parse_lockfile, parse_lockfile_path, scan_directory
from .errors import LockfileError
from .fetch import FetchError, fetch_lockfile, filename_from_url, is_url
from .models import DependencyGraph
from .report import aggregate, graph_report
from .summary import render_summary

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFLICTS = 10

Result: TypeAlias = tuple[str, DependencyGraph | LockfileError | FetchError]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="lockgraph", description=__doc__.splitlines()[0])
    parser.add_argument(
        "sources",
        nargs="+",
        help="Lockfile path, directory to scan, or http(s) URL",
    )
    parser.add_argument(
        "--format",
        dest="lockfile_type",
        default=None,
        help="Force a lockfile format (package-lock, yarn, pnpm) instead of detecting it",
    )
    parser.add_argument("--output", choices=OUTPUT_FORMATS, default=None)
    parser.add_argument("--config", type=Path, default=None, help="Path to a JSON settings file")
    parser.add_argument("--fail-on-conflicts", action="store_true", default=None)
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser.parse_args(argv)


def _collect(source: str, lockfile_type: str | None) -> list[Result]:
    if is_url(source):
        try:
            content = fetch_lockfile(source)
            graph = parse_lockfile(
                content, filename_from_url(source), lockfile_type=lockfile_type
            )
            return [(source, graph)]
        except (FetchError, LockfileError) as exc:
            return [(source, exc)]

    path = Path(source)
    if path.is_dir():
        return [(str(found), outcome) for found, outcome in scan_directory(path)]
    try:
        return [(source, parse_lockfile_path(path, lockfile_type))]
    except OSError as exc:
        return [(source, LockfileError(f"Failed to read {source}: {exc}"))]
    except LockfileError as exc:
        return [(source, exc)]


def _render(results: list[Result], output: str) -> str:
    graphs = [(source, r) for source, r in results if isinstance(r, DependencyGraph)]
    if output == "summary":
        return "\n".join(render_summary(graph, title=source) for source, graph in graphs)

    reports = [graph_report(graph, source=source) for source, graph in graphs]
    errors = [
        {"source": source, "error": str(r)}
        for source, r in results
        if not isinstance(r, DependencyGraph)
    ]
    if len(results) == 1 and reports:
        payload: dict[str, Any] = reports[0]
    else:
        payload = aggregate(reports, errors)
    return json.dumps(payload, indent=2)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_ERROR

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    results: list[Result] = []
    for source in args.sources:
        results.extend(_collect(source, args.lockfile_type))

    failed = [(source, r) for source, r in results if not isinstance(r, DependencyGraph)]
    for source, exc in failed:
        print(f"ERROR: {source}: {exc}", file=sys.stderr)

    if len(failed) < len(results):
        print(_render(results, args.output or settings.output))

    if failed:
        return EXIT_ERROR

    fail_on_conflicts = args.fail_on_conflicts or settings.fail_on_conflicts
    has_conflicts = any(
        r.conflicting_names() for _, r in results if isinstance(r, DependencyGraph)
    )
    if has_conflicts and fail_on_conflicts:
        logger.info("Version conflicts found; exiting with %d", EXIT_CONFLICTS)
        return EXIT_CONFLICTS

    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
