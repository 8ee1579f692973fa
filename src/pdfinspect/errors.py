"""Exceptions raised by pdfinspect."""

from __future__ import annotations


class PdfInspectError(Exception):
    """Base exception for pdfinspect failures."""

    code = "internal_error"


class InvalidInput(PdfInspectError):
    """Raised when caller-supplied arguments are malformed (e.g. absolute paths)."""

    code = "invalid_params"


class AccessDenied(PdfInspectError):
    """Raised when a path resolves outside every configured root directory."""

    code = "invalid_request"

    def __init__(self, path: str, roots: list[str]) -> None:
        self.path = path
        self.roots = list(roots)
        super().__init__(
            f"Path '{path}' is not within any allowed directory. "
            f"Allowed directories: {', '.join(self.roots)}"
        )


class LoadFailure(PdfInspectError):
    """Raised when a document cannot be read, fetched, or parsed."""

    code = "load_failure"

    def __init__(self, message: str, *, source: str | None = None) -> None:
        self.source = source
        super().__init__(message)
