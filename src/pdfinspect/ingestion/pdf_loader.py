"""PDF loading utilities.

Uses PyMuPDF (fitz) for page text and outline extraction. Local files are
confined to the configured roots before being read; remote documents are
fetched with httpx.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import fitz  # PyMuPDF
import httpx

from pdfinspect.errors import InvalidInput, LoadFailure
from pdfinspect.models import TextFragment
from pdfinspect.utils.paths import PathConfinement

LOGGER = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_MAX_FETCH_BYTES = 100 * 1024 * 1024


class PdfDocument:
    """Thin handle over an open ``fitz.Document`` with 1-based page access."""

    def __init__(self, doc: Any, source: str) -> None:
        self._doc = doc
        self.source = source

    def __enter__(self) -> "PdfDocument":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._doc.close()

    @property
    def page_count(self) -> int:
        return len(self._doc)

    def _page(self, page_number: int) -> Any:
        if not 1 <= page_number <= self.page_count:
            raise IndexError(f"Page {page_number} out of range 1..{self.page_count}")
        return self._doc[page_number - 1]

    def get_fragments(self, page_number: int) -> List[TextFragment]:
        """Return one fragment per text span, in reading order."""
        page = self._page(page_number)
        layout = page.get_text("dict") or {}
        fragments: List[TextFragment] = []
        for block in layout.get("blocks", []):
            if block.get("type", 0) != 0:
                continue
            for line in block.get("lines", []):
                spans = line.get("spans", [])
                for position, span in enumerate(spans):
                    fragments.append(
                        TextFragment(
                            text=span.get("text", ""),
                            bbox=tuple(span.get("bbox", (0.0, 0.0, 0.0, 0.0))),
                            font=span.get("font", ""),
                            size=float(span.get("size", 0.0)),
                            has_eol=position == len(spans) - 1,
                        )
                    )
        return fragments

    def get_page_text(self, page_number: int) -> str:
        return self._page(page_number).get_text() or ""

    def get_metadata(self) -> Dict[str, Any]:
        metadata = self._doc.metadata or {}
        return {key: value for key, value in metadata.items() if value}

    def get_outline(self) -> List[Dict[str, Any]]:
        """Return the outline as nested ``{"title", "dest", "items"}`` mappings.

        ``dest`` starts with the 0-based target page when the entry points
        inside the document.
        """
        return _nest_toc(self._doc.get_toc(simple=False) or [])


def _toc_destination(page: int, details: Any) -> Any:
    if page >= 1:
        dest: List[Any] = [page - 1]
        point = details.get("to") if isinstance(details, dict) else None
        if point is not None:
            dest.extend([float(point.x), float(point.y)])
        return dest
    if isinstance(details, dict):
        name = details.get("nameddest")
        if isinstance(name, str) and name:
            return name
    return None


def _nest_toc(toc: List[List[Any]]) -> List[Dict[str, Any]]:
    """Nest PyMuPDF's flat ``[level, title, page, dest]`` rows by level."""
    root: List[Dict[str, Any]] = []
    stack: List[tuple[int, List[Dict[str, Any]]]] = [(0, root)]
    for entry in toc:
        level, title, page = entry[0], entry[1], entry[2]
        details = entry[3] if len(entry) > 3 else None
        item: Dict[str, Any] = {"title": title, "dest": _toc_destination(page, details), "items": []}
        while len(stack) > 1 and stack[-1][0] >= level:
            stack.pop()
        stack[-1][1].append(item)
        stack.append((level, item["items"]))
    return root


def _read_local(path: str, confinement: PathConfinement) -> bytes:
    # InvalidInput/AccessDenied from resolve() propagate to the caller
    safe_path = Path(confinement.resolve(path))
    try:
        return safe_path.read_bytes()
    except FileNotFoundError as exc:
        raise LoadFailure(f"File not found at '{path}'.", source=path) from exc
    except OSError as exc:
        raise LoadFailure(
            f"Failed to prepare PDF source {path}. Reason: {exc}", source=path
        ) from exc


def _too_large(url: str, max_bytes: int) -> LoadFailure:
    LOGGER.error("Refusing to fetch PDF %s: larger than %d bytes", url, max_bytes)
    return LoadFailure(
        f"Failed to prepare PDF source {url}. Reason: document exceeds {max_bytes} bytes.",
        source=url,
    )


def _fetch_remote(url: str, timeout: float, max_bytes: int) -> bytes:
    """Download ``url``, aborting once more than ``max_bytes`` have arrived."""
    try:
        with httpx.stream("GET", url, timeout=timeout, follow_redirects=True) as response:
            response.raise_for_status()
            declared = response.headers.get("Content-Length", "")
            if declared.isdigit() and int(declared) > max_bytes:
                raise _too_large(url, max_bytes)
            chunks: List[bytes] = []
            received = 0
            for chunk in response.iter_bytes():
                received += len(chunk)
                if received > max_bytes:
                    raise _too_large(url, max_bytes)
                chunks.append(chunk)
    except httpx.HTTPError as exc:
        LOGGER.error("Failed to fetch PDF %s: %s", url, exc)
        raise LoadFailure(
            f"Failed to prepare PDF source {url}. Reason: {exc}", source=url
        ) from exc
    return b"".join(chunks)


def load_document(
    *,
    path: Optional[str] = None,
    url: Optional[str] = None,
    confinement: PathConfinement,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    max_bytes: int = DEFAULT_MAX_FETCH_BYTES,
) -> PdfDocument:
    """Open a PDF from a confined relative ``path`` or a remote ``url``."""
    if path:
        description = path
        data = _read_local(path, confinement)
    elif url:
        description = url
        data = _fetch_remote(url, timeout, max_bytes)
    else:
        raise InvalidInput("Source missing 'path' or 'url'.")

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:
        LOGGER.error("Failed to open PDF %s: %s", description, exc)
        raise LoadFailure(
            f"Failed to load PDF document from {description}. Reason: {exc}",
            source=description,
        ) from exc
    return PdfDocument(doc, description)
