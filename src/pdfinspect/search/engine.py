"""Positional text search over per-page text fragments.

Each page's fragments are joined with a single space into a flat string.
Matches are located in that string and mapped back to the fragment that owns
the match start, which anchors the context window.
"""

from __future__ import annotations

import bisect
import logging
from typing import List, Optional, Protocol, Sequence

from pdfinspect.models import PageScan, SearchMatch, SearchOptions, SearchResultData, TextFragment
from pdfinspect.utils.text import fold_case

LOGGER = logging.getLogger(__name__)

FRAGMENT_SEPARATOR = " "
MAX_DEPTH = 5
MAX_CONTEXT_WORDS = 50


class FragmentSource(Protocol):
    """Anything exposing a page count and 1-based per-page fragments."""

    @property
    def page_count(self) -> int: ...

    def get_fragments(self, page_number: int) -> Sequence[TextFragment]: ...


def _fragment_offsets(fragments: Sequence[TextFragment]) -> List[int]:
    offsets: List[int] = []
    position = 0
    for fragment in fragments:
        offsets.append(position)
        position += len(fragment.text) + len(FRAGMENT_SEPARATOR)
    return offsets


def _owning_fragment(offsets: List[int], fragments: Sequence[TextFragment], position: int) -> int:
    """Index of the fragment covering ``position``, or -1 if it falls on a separator."""
    index = bisect.bisect_right(offsets, position) - 1
    if index < 0:
        return -1
    if position < offsets[index] + len(fragments[index].text):
        return index
    return -1


def build_context(
    fragments: Sequence[TextFragment], index: int, depth: int, context_words: int
) -> str:
    """Context for a match anchored at fragment ``index``.

    Depth 0 joins the ``context_words`` fragments on either side with spaces.
    Depths 1-5 return the whole page; fragments carry no block or section
    boundaries to narrow it further.
    """
    if depth == 0:
        start = max(0, index - context_words)
        end = min(len(fragments), index + context_words + 1)
        return " ".join(fragment.text for fragment in fragments[start:end])
    return "".join(fragment.text for fragment in fragments)


def search_page(
    fragments: Sequence[TextFragment],
    query: str,
    options: SearchOptions,
    *,
    page_number: int = 1,
) -> List[SearchMatch]:
    """Find every occurrence of ``query`` in one page, overlapping matches included."""
    if not query:
        raise ValueError("query must not be empty")

    full_text = FRAGMENT_SEPARATOR.join(fragment.text for fragment in fragments)
    if options.case_sensitive:
        needle, haystack = query, full_text
    else:
        needle, haystack = fold_case(query), fold_case(full_text)

    offsets = _fragment_offsets(fragments)
    matches: List[SearchMatch] = []
    position = haystack.find(needle)
    while position != -1:
        index = _owning_fragment(offsets, fragments, position)
        context = (
            build_context(fragments, index, options.depth, options.context_words)
            if index >= 0
            else ""
        )
        matches.append(
            SearchMatch(
                page=page_number,
                text=query,
                match_start=position,
                match_end=position + len(needle),
                context=context,
            )
        )
        position = haystack.find(needle, position + 1)
    return matches


def _scan_page(
    document: FragmentSource,
    page_number: int,
    query: str,
    options: SearchOptions,
    logger: logging.Logger,
) -> PageScan:
    try:
        fragments = document.get_fragments(page_number)
        return PageScan(page_number, search_page(fragments, query, options, page_number=page_number))
    except Exception as exc:
        logger.warning("Error searching page %s: %s", page_number, exc)
        return PageScan(page_number, skipped=str(exc))


def search_document(
    document: FragmentSource,
    query: str,
    options: SearchOptions,
    *,
    page: Optional[int] = None,
    max_results: int = 20,
    logger: Optional[logging.Logger] = None,
) -> SearchResultData:
    """Search pages in ascending order, stopping once ``max_results`` matches are collected.

    ``total_matches`` counts every match gathered before the cut-off, so it can
    exceed ``max_results`` when the last scanned page held several matches.
    Pages whose text cannot be extracted contribute nothing and are only logged.
    """
    if not query:
        raise ValueError("query must not be empty")
    log = logger or LOGGER
    page_count = document.page_count
    if page_count < 1:
        return SearchResultData(results=[], total_matches=0)

    if page is not None:
        first = max(1, min(page, page_count))
        last = first
    else:
        first, last = 1, page_count

    collected: List[SearchMatch] = []
    skipped: List[int] = []
    for page_number in range(first, last + 1):
        scan = _scan_page(document, page_number, query, options, log)
        if not scan.ok:
            skipped.append(scan.page)
            continue
        collected.extend(scan.matches)
        if len(collected) >= max_results:
            break

    if skipped:
        log.debug("Skipped %d unreadable page(s) during search: %s", len(skipped), skipped)
    collected.sort(key=lambda match: (match.page, match.match_start))
    warnings: List[str] = []
    if len(collected) > max_results:
        warnings.append(
            f"Found {len(collected)} matches, but only returning first {max_results} results."
        )
    return SearchResultData(
        results=collected[:max_results],
        total_matches=len(collected),
        warnings=warnings,
    )
