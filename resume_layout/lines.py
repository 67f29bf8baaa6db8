"""Group positioned text fragments into visual lines."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .types import Line, TextFragment, lines_to_text

LOGGER = logging.getLogger(__name__)

DEFAULT_CHAR_WIDTH = 6.0


@dataclass
class GroupingConfig:
    """Tolerances used while grouping fragments into lines."""

    # Baselines of mixed fonts on one row differ by a point or two.
    y_tolerance: float = 3.0


def typical_char_width(fragments: Sequence[TextFragment]) -> float:
    """Average character width over the body font.

    The body font is the most common font name (by characters) together with
    the most common rounded height; fragments without a measured width are
    ignored.
    """

    measured = [fragment for fragment in fragments if not fragment.is_blank and fragment.width > 0]
    if not measured:
        return DEFAULT_CHAR_WIDTH
    heights: Counter = Counter()
    fonts: Counter = Counter()
    for fragment in measured:
        heights[round(fragment.height)] += 1
        fonts[fragment.font_name] += len(fragment.text)
    common_height = heights.most_common(1)[0][0]
    common_font = fonts.most_common(1)[0][0]

    width = chars = 0.0
    for fragment in measured:
        if fragment.font_name == common_font and round(fragment.height) == common_height:
            width += fragment.width
            chars += len(fragment.text)
    return width / chars if chars else DEFAULT_CHAR_WIDTH


def _close(current: List[TextFragment], lines: List[Line], char_width: float) -> None:
    if current:
        ordered = tuple(sorted(current, key=lambda fragment: fragment.x))
        lines.append(Line(fragments=ordered, reference_y=current[0].y, char_width=char_width))


def group_lines(fragments: Iterable[TextFragment], config: Optional[GroupingConfig] = None) -> List[Line]:
    """Cluster fragments into lines in document order.

    A fragment joins the open line when it sits on the same page within
    ``y_tolerance`` of the line's first fragment; an ``end_of_line`` fragment
    closes the line right after itself. Neighbouring fragments closer than
    the typical character width render without a space between them.
    """

    config = config or GroupingConfig()
    fragments = list(fragments)
    char_width = typical_char_width(fragments)
    lines: List[Line] = []
    current: List[TextFragment] = []
    reference: Optional[TextFragment] = None

    for fragment in fragments:
        if reference is not None and (
            fragment.page != reference.page or abs(fragment.y - reference.y) > config.y_tolerance
        ):
            _close(current, lines, char_width)
            current, reference = [], None
        if reference is None:
            reference = fragment
        current.append(fragment)
        if fragment.end_of_line:
            _close(current, lines, char_width)
            current, reference = [], None

    _close(current, lines, char_width)
    LOGGER.debug("Grouped fragments into %s lines (char width %.2f)", len(lines), char_width)
    return lines


__all__ = ["DEFAULT_CHAR_WIDTH", "GroupingConfig", "group_lines", "lines_to_text", "typical_char_width"]
