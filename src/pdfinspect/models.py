"""Core pdfinspect data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(slots=True, frozen=True)
class TextFragment:
    """One span of extracted page text plus layout metadata."""

    text: str
    bbox: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    font: str = ""
    size: float = 0.0
    has_eol: bool = False


@dataclass(slots=True, frozen=True)
class SearchOptions:
    case_sensitive: bool = False
    depth: int = 0
    context_words: int = 5


@dataclass(slots=True)
class SearchMatch:
    """A single query occurrence within a page."""

    page: int
    text: str
    match_start: int
    match_end: int
    context: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "page": self.page,
            "text": self.text,
            "match_start": self.match_start,
            "match_end": self.match_end,
        }
        if self.context is not None:
            data["context"] = self.context
        return data


@dataclass(slots=True)
class PageScan:
    """Outcome of scanning one page: either matches or the reason it was skipped."""

    page: int
    matches: List[SearchMatch] = field(default_factory=list)
    skipped: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.skipped is None


@dataclass(slots=True)
class SearchResultData:
    results: List[SearchMatch]
    total_matches: int
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "results": [match.to_dict() for match in self.results],
            "total_matches": self.total_matches,
        }
        if self.warnings:
            data["warnings"] = list(self.warnings)
        return data


@dataclass(slots=True)
class OutlineNode:
    """Table of contents entry. ``page`` is 1-based when known."""

    title: str
    page: Optional[int] = None
    destination: Any = None
    items: Optional[List["OutlineNode"]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"title": self.title}
        if self.page is not None:
            data["page"] = self.page
        if self.destination is not None:
            data["destination"] = self.destination
        if self.items is not None:
            data["items"] = [item.to_dict() for item in self.items]
        return data


@dataclass(slots=True)
class OutlineResultData:
    outline: Optional[List[OutlineNode]] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.outline is not None:
            data["outline"] = [node.to_dict() for node in self.outline]
        if self.warnings:
            data["warnings"] = list(self.warnings)
        return data
