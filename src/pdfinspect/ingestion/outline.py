"""Convert a raw nested outline into ``OutlineNode`` trees."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, List, Optional, Sequence

from pdfinspect.models import OutlineNode, OutlineResultData

NO_OUTLINE_WARNING = "No table of contents found in this PDF."


def destination_page(dest: Any) -> Optional[int]:
    """1-based page for a destination whose first element is a 0-based page index."""
    if isinstance(dest, (list, tuple)) and dest:
        first = dest[0]
        if isinstance(first, (int, float)) and not isinstance(first, bool):
            return int(first) + 1
    return None


def _to_node(item: Mapping[str, Any], depth: int, max_depth: int) -> OutlineNode:
    dest = item.get("dest")
    node = OutlineNode(title=item.get("title") or "")
    if isinstance(dest, (str, list)):
        node.destination = dest
    node.page = destination_page(dest)

    children = item.get("items")
    if isinstance(children, list) and children and depth < max_depth:
        node.items = extract_outline_items(children, depth + 1, max_depth)
    return node


def extract_outline_items(
    items: Sequence[Any], depth: int, max_depth: int
) -> List[OutlineNode]:
    """Build nodes for ``items`` sitting at ``depth`` (1 for top level).

    Entries that are not mappings with a ``title`` key are dropped. Nothing
    deeper than ``max_depth`` is returned.
    """
    if depth > max_depth:
        return []
    return [
        _to_node(item, depth, max_depth)
        for item in items
        if isinstance(item, Mapping) and "title" in item
    ]


def extract_outline(raw_outline: Optional[Sequence[Any]], max_depth: int = 5) -> OutlineResultData:
    if not raw_outline:
        return OutlineResultData(warnings=[NO_OUTLINE_WARNING])
    return OutlineResultData(outline=extract_outline_items(raw_outline, 1, max_depth))
