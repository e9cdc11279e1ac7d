"""Decide which lockfile grammar a document uses."""

from __future__ import annotations

import re
from enum import Enum

from .errors import UnsupportedFormat


class LockfileFormat(str, Enum):
    PACKAGE_LOCK = "package-lock.json"
    YARN = "yarn.lock"
    PNPM = "pnpm-lock.yaml"


# Older callers pass a short selector instead of a filename.
_SELECTORS: dict[str, LockfileFormat] = {
    "package-lock": LockfileFormat.PACKAGE_LOCK,
    "npm": LockfileFormat.PACKAGE_LOCK,
    "yarn": LockfileFormat.YARN,
    "pnpm": LockfileFormat.PNPM,
    **{fmt.value: fmt for fmt in LockfileFormat},
}

_JSON_LOCKFILE_VERSION = re.compile(r'"lockfileVersion"\s*:')
_YAML_LOCKFILE_VERSION = re.compile(r"\A\ufeff?(?:[ \t]*(?:#[^\n]*)?\r?\n)*lockfileVersion[ \t]*:")


def _from_filename(filename: str) -> LockfileFormat | None:
    name = filename.strip().replace("\\", "/").lower()
    for fmt in LockfileFormat:
        if name.endswith(fmt.value):
            return fmt
    for fmt in LockfileFormat:
        if fmt.value in name:
            return fmt
    return None


def _from_content(content: str) -> LockfileFormat:
    if _JSON_LOCKFILE_VERSION.search(content):
        return LockfileFormat.PACKAGE_LOCK
    if _YAML_LOCKFILE_VERSION.match(content):
        return LockfileFormat.PNPM
    return LockfileFormat.YARN


def detect_format(content: str, filename: str | None = None) -> LockfileFormat:
    """Return the lockfile format for ``content``.

    A recognised filename wins; otherwise the content is sniffed. This never
    fails: anything that looks like neither JSON nor YAML is treated as a
    yarn.lock block file.
    """
    if filename:
        fmt = _from_filename(filename)
        if fmt is not None:
            return fmt
    return _from_content(content)


def resolve_format(selector: str) -> LockfileFormat:
    """Map an explicit format selector onto a format, or raise UnsupportedFormat."""
    fmt = _SELECTORS.get(selector.strip().lower())
    if fmt is None:
        known = ", ".join(sorted(_SELECTORS))
        raise UnsupportedFormat(f"Lockfile type '{selector}' not supported. Known types: {known}")
    return fmt
