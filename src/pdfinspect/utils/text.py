"""Text helpers shared by the search engine and the read tool."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Union

from pdfinspect.errors import InvalidInput


def fold_case(text: str) -> str:
    """Lower-case ``text`` one character at a time without changing its length.

    Characters whose lower-case form expands (e.g. ``"İ"``) are kept as-is so
    offsets found in the folded string stay valid in the original one.
    Folding never looks at neighbouring characters, so a query folds the same
    way on its own as it does inside a page.
    """
    return "".join(ch.lower() if len(ch.lower()) == 1 else ch for ch in text)


def parse_page_spec(spec: Union[str, Sequence[int]]) -> List[int]:
    """Turn ``"1-3,5"`` or ``[1, 2, 3]`` into a sorted list of unique 1-based pages."""
    if isinstance(spec, str):
        pages: set[int] = set()
        for part in (chunk.strip() for chunk in spec.split(",")):
            if not part:
                continue
            if "-" in part:
                start_text, _, end_text = part.partition("-")
                try:
                    start = int(start_text)
                    end = int(end_text)
                except ValueError as exc:
                    raise InvalidInput(f"Invalid page range: '{part}'.") from exc
                if start < 1 or end < start:
                    raise InvalidInput(f"Invalid page range: '{part}'.")
                pages.update(range(start, end + 1))
            else:
                try:
                    page = int(part)
                except ValueError as exc:
                    raise InvalidInput(f"Invalid page number: '{part}'.") from exc
                if page < 1:
                    raise InvalidInput(f"Invalid page number: '{part}'.")
                pages.add(page)
        if not pages:
            raise InvalidInput("Page specification is empty.")
        return sorted(pages)

    result = sorted(set(spec))
    if any(page < 1 for page in result):
        raise InvalidInput("Page numbers must be positive.")
    return result


def join_page_texts(texts: Iterable[str]) -> str:
    return "\n\n".join(texts)
