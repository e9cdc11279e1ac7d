"""lockgraph core package.

This package turns npm, yarn and pnpm lockfiles into one normalized
dependency graph that is callable from the command line, batch scans and any
consumer that only needs ``parse_lockfile``.
"""

from .core import parse_lockfile, parse_lockfile_path
from .detection import LockfileFormat, detect_format
from .errors import LockfileError, MalformedInput, NoDependenciesFound, UnsupportedFormat
from .models import DependencyGraph, DependencyKind, Edge, Node

__all__ = [
    "DependencyGraph",
    "DependencyKind",
    "Edge",
    "LockfileError",
    "LockfileFormat",
    "MalformedInput",
    "Node",
    "NoDependenciesFound",
    "UnsupportedFormat",
    "detect_format",
    "parse_lockfile",
    "parse_lockfile_path",
]
