"""Layout heuristics for multi-column resumes."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List

from .types import TextFragment

LOGGER = logging.getLogger(__name__)


def assign_columns(
    fragments: List[TextFragment],
    max_columns: int = 3,
    column_gap: float = 72.0,
) -> List[int]:
    """Return a column id per fragment based on left-edge clustering per page."""

    column_ids = [0] * len(fragments)
    by_page: Dict[int, List[int]] = defaultdict(list)
    for index, fragment in enumerate(fragments):
        if not fragment.is_blank:
            by_page[fragment.page].append(index)

    for page, indices in by_page.items():
        columns: List[Dict[str, float]] = []
        for index in sorted(indices, key=lambda i: fragments[i].x):
            left = fragments[index].x
            assigned = False
            for column_id, column in enumerate(columns):
                if abs(left - column["left"]) <= column_gap:
                    count = column["count"] + 1
                    column["left"] = (column["left"] * column["count"] + left) / count
                    column["count"] = count
                    column_ids[index] = column_id
                    assigned = True
                    break
            if assigned:
                continue
            if len(columns) < max_columns:
                columns.append({"left": left, "count": 1})
                column_ids[index] = len(columns) - 1
            else:
                nearest = min(range(len(columns)), key=lambda i: abs(left - columns[i]["left"]))
                column = columns[nearest]
                count = column["count"] + 1
                column["left"] = (column["left"] * column["count"] + left) / count
                column["count"] = count
                column_ids[index] = nearest
        LOGGER.debug("Assigned %s columns on page %s", len(columns), page + 1)

    # Blank line-end markers follow the fragment they close.
    for index, fragment in enumerate(fragments):
        if fragment.is_blank and index > 0:
            column_ids[index] = column_ids[index - 1]
    return column_ids


def sort_reading_order(fragments: List[TextFragment], **column_options: float) -> List[TextFragment]:
    """Return fragments sorted by reading order (page → column → y → x)."""

    column_ids = assign_columns(fragments, **column_options)  # type: ignore[arg-type]
    order = sorted(
        range(len(fragments)),
        key=lambda i: (fragments[i].page, column_ids[i], fragments[i].y, fragments[i].x, i),
    )
    return [fragments[i] for i in order]


__all__ = ["assign_columns", "sort_reading_order"]
