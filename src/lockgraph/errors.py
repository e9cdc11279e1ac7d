"""Failures raised while turning a lockfile into a dependency graph."""

from __future__ import annotations


class LockfileError(RuntimeError):
    """Base error for failures while parsing a lockfile."""


class UnsupportedFormat(LockfileError, ValueError):
    """Raised when a caller asks for a lockfile format that is not implemented."""


class MalformedInput(LockfileError):
    """Raised when the document cannot be decoded in its detected grammar."""


class NoDependenciesFound(LockfileError):
    """Raised when a lockfile parses cleanly but yields no dependency nodes."""
