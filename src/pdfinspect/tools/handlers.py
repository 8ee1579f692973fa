"""Tool handlers: validate arguments, load documents, wrap results in envelopes.

Structural errors (``InvalidInput``, ``AccessDenied``) propagate to the caller.
Anything that goes wrong while loading or reading a document is reported in
the returned envelope as ``{"success": False, "error": ...}``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Type

from pydantic import BaseModel

from pdfinspect.errors import AccessDenied, InvalidInput, LoadFailure
from pdfinspect.ingestion.outline import extract_outline
from pdfinspect.ingestion.pdf_loader import (
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_MAX_FETCH_BYTES,
    PdfDocument,
    load_document,
)
from pdfinspect.models import SearchOptions
from pdfinspect.search.engine import search_document
from pdfinspect.tools.schemas import (
    GetPdfTocArgs,
    PdfSource,
    ReadPdfArgs,
    ReadSource,
    SearchPdfTextArgs,
    parse_args,
)
from pdfinspect.utils.paths import PathConfinement
from pdfinspect.utils.text import join_page_texts, parse_page_spec

LOGGER = logging.getLogger(__name__)

Envelope = Dict[str, Any]


@dataclass(slots=True)
class ToolContext:
    """Collaborators shared by every handler invocation."""

    confinement: PathConfinement = field(default_factory=PathConfinement)
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    max_fetch_bytes: int = DEFAULT_MAX_FETCH_BYTES
    logger: logging.Logger = LOGGER


def _open(source: PdfSource, context: ToolContext) -> PdfDocument:
    return load_document(
        path=source.path,
        url=source.url,
        confinement=context.confinement,
        timeout=context.fetch_timeout,
        max_bytes=context.max_fetch_bytes,
    )


def _failure(action: str, source: PdfSource, exc: Exception) -> str:
    if isinstance(exc, LoadFailure):
        return str(exc)
    return f"Failed to {action} {source.description}. Reason: {exc}"


def _read_one(source: ReadSource, args: ReadPdfArgs, context: ToolContext) -> Envelope:
    requested = parse_page_spec(source.pages) if source.pages is not None else None
    entry: Envelope = {"source": source.description, "success": False}
    try:
        with _open(source, context) as document:
            page_count = document.page_count
            data: Dict[str, Any] = {}
            warnings: List[str] = []
            if args.include_metadata:
                data["metadata"] = document.get_metadata()
            if args.include_page_count:
                data["num_pages"] = page_count
            if requested is not None:
                missing = [page for page in requested if page > page_count]
                if missing:
                    warnings.append(
                        f"Requested page numbers {missing} exceed total pages ({page_count})."
                    )
                data["page_texts"] = [
                    {"page": page, "text": document.get_page_text(page)}
                    for page in requested
                    if page <= page_count
                ]
            elif args.include_full_text:
                data["full_text"] = join_page_texts(
                    document.get_page_text(page) for page in range(1, page_count + 1)
                )
            if warnings:
                data["warnings"] = warnings
    except (InvalidInput, AccessDenied):
        raise
    except Exception as exc:
        context.logger.error("Failed to read %s: %s", source.description, exc)
        entry["error"] = _failure("read PDF", source, exc)
        return entry

    entry["success"] = True
    entry["data"] = data
    return entry


def read_pdf(args: object, context: ToolContext) -> Envelope:
    """Read text, metadata and page counts from one or more PDFs."""
    parsed = parse_args(ReadPdfArgs, args)
    results = [_read_one(source, parsed, context) for source in parsed.sources]
    return {"success": True, "data": {"results": results}}


def get_pdf_toc(args: object, context: ToolContext) -> Envelope:
    """Extract the table of contents of a PDF."""
    parsed = parse_args(GetPdfTocArgs, args)
    try:
        with _open(parsed.source, context) as document:
            data = extract_outline(document.get_outline(), parsed.max_depth)
    except (InvalidInput, AccessDenied):
        raise
    except Exception as exc:
        context.logger.error("Failed to extract outline from %s: %s", parsed.source.description, exc)
        return {
            "success": False,
            "error": _failure("extract table of contents from", parsed.source, exc),
        }
    return {"success": True, "data": data.to_dict()}


def search_pdf_text(args: object, context: ToolContext) -> Envelope:
    """Search a PDF for a literal string."""
    parsed = parse_args(SearchPdfTextArgs, args)
    options = SearchOptions(
        case_sensitive=parsed.case_sensitive,
        depth=parsed.depth,
        context_words=parsed.context_words,
    )
    try:
        with _open(parsed.source, context) as document:
            data = search_document(
                document,
                parsed.query,
                options,
                page=parsed.page,
                max_results=parsed.max_results,
                logger=context.logger,
            )
    except (InvalidInput, AccessDenied):
        raise
    except Exception as exc:
        context.logger.error("Failed to search %s: %s", parsed.source.description, exc)
        return {"success": False, "error": _failure("search text in", parsed.source, exc)}
    return {"success": True, "data": data.to_dict()}


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    name: str
    description: str
    args_model: Type[BaseModel]
    handler: Callable[[object, ToolContext], Envelope]

    def input_schema(self) -> Dict[str, Any]:
        return self.args_model.model_json_schema()


TOOLS: Dict[str, ToolDefinition] = {
    tool.name: tool
    for tool in (
        ToolDefinition(
            "read_pdf",
            "Reads content, metadata, or page counts from one or more PDF files.",
            ReadPdfArgs,
            read_pdf,
        ),
        ToolDefinition(
            "get_pdf_toc",
            "Extracts the table of contents/outline from a PDF file.",
            GetPdfTocArgs,
            get_pdf_toc,
        ),
        ToolDefinition(
            "search_pdf_text",
            "Search for text within a PDF file with configurable context depth.",
            SearchPdfTextArgs,
            search_pdf_text,
        ),
    )
}
