"""Confinement of caller-supplied paths to a set of allowed root directories.

The check is purely lexical: paths are normalised as strings and never
resolved against the filesystem. A symlink inside an allowed root that points
elsewhere is therefore *not* detected; confinement only guarantees that the
requested path string stays below a root.
"""

from __future__ import annotations

import logging
import ntpath
import os
from typing import Iterable, Sequence, Tuple

from pdfinspect.errors import AccessDenied, InvalidInput

LOGGER = logging.getLogger(__name__)


def _looks_absolute(path: str) -> bool:
    """Return True for rooted paths on any platform (``/x``, ``\\x``, ``C:\\x``, ``C:x``)."""
    if os.path.isabs(path) or path.startswith(("/", "\\")):
        return True
    drive, _ = ntpath.splitdrive(path)
    return bool(drive)


def _is_within(candidate: str, root: str) -> bool:
    if candidate == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return candidate.startswith(prefix)


class PathConfinement:
    """Resolve relative paths against an ordered root set.

    An empty root set falls back to the current working directory, evaluated
    on every call so it follows ``os.chdir``.
    """

    def __init__(self, roots: Iterable[str | os.PathLike[str]] = ()) -> None:
        self._roots: Tuple[str, ...] = ()
        self.configure(roots)

    def configure(self, roots: Iterable[str | os.PathLike[str]]) -> None:
        """Replace the root set. Each entry is made absolute and normalised."""
        self._roots = tuple(os.path.abspath(os.fspath(root)) for root in roots)
        if self._roots:
            LOGGER.info("Allowed root directories set to: %s", ", ".join(self._roots))
        else:
            LOGGER.info("No root directories configured, using the working directory")

    @property
    def roots(self) -> Sequence[str]:
        return self._roots or (os.getcwd(),)

    def resolve(self, raw_path: object) -> str:
        """Return the absolute path for ``raw_path`` inside the first admitting root.

        Raises:
            InvalidInput: ``raw_path`` is not a string, contains a null byte,
                or is absolute.
            AccessDenied: the path escapes every configured root.
        """
        if not isinstance(raw_path, str):
            raise InvalidInput("Path must be a string.")
        if "\0" in raw_path:
            raise InvalidInput("Invalid path: contains null byte.")

        normalized = os.path.normpath(raw_path) if raw_path else ""
        if _looks_absolute(raw_path) or _looks_absolute(normalized):
            raise InvalidInput("Absolute paths are not allowed.")

        # Snapshot so a concurrent configure() cannot change roots mid-loop
        roots = tuple(self.roots)
        for root in roots:
            candidate = os.path.normpath(os.path.join(root, normalized))
            if _is_within(candidate, root):
                return candidate

        LOGGER.debug("Rejected path %r outside roots %s", raw_path, roots)
        raise AccessDenied(raw_path, list(roots))
