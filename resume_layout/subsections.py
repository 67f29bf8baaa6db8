"""Split a section's lines into per-entry blocks."""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Callable, List, Pattern, Sequence

from .text_utils import is_bullet
from .types import Line

LOGGER = logging.getLogger(__name__)

Block = List[Line]
Splitter = Callable[[List[Line]], List[Block]]

GAP_FACTOR = 1.4
DEFAULT_GAP_THRESHOLD = 20.0


def visible_lines(lines: Sequence[Line]) -> List[Line]:
    return [line for line in lines if not line.is_blank]


def _split_before(lines: List[Line], starts_block: Callable[[int, Line], bool]) -> List[Block]:
    blocks: List[Block] = []
    block: Block = []
    for index, line in enumerate(lines):
        if index > 0 and block and starts_block(index, line):
            blocks.append(block)
            block = []
        block.append(line)
    if block:
        blocks.append(block)
    return blocks


def split_on_blank_lines(lines: List[Line]) -> List[Block]:
    """Blank lines (paragraph breaks) separate entries."""

    blocks: List[Block] = []
    block: Block = []
    for line in lines:
        if line.is_blank:
            if block:
                blocks.append(block)
                block = []
            continue
        block.append(line)
    if block:
        blocks.append(block)
    return blocks


def split_on_line_gaps(lines: List[Line]) -> List[Block]:
    """Split where the vertical gap is well above the most common line gap."""

    lines = visible_lines(lines)

    def gap(index: int) -> float:
        previous, current = lines[index - 1], lines[index]
        if previous.page != current.page:
            return 0.0
        return abs(round(current.y - previous.y))

    gaps = Counter(gap(index) for index in range(1, len(lines)) if lines[index - 1].page == lines[index].page)
    common = gaps.most_common(1)[0][0] if gaps else 0
    threshold = common * GAP_FACTOR if common > 0 else DEFAULT_GAP_THRESHOLD
    return _split_before(lines, lambda index, line: gap(index) > threshold)


def split_on_bold_transitions(lines: List[Line]) -> List[Block]:
    """A bold line after a non-bold line starts a new entry."""

    lines = visible_lines(lines)

    def starts_bold(line: Line) -> bool:
        first = line.first
        return first is not None and first.is_bold

    return _split_before(
        lines,
        lambda index, line: starts_bold(line) and not starts_bold(lines[index - 1]) and not is_bullet(line.text),
    )


def split_on_pattern(pattern: Pattern[str], max_length: int = 80) -> Splitter:
    """Build a splitter that starts a block at each short line matching *pattern*."""

    def splitter(lines: List[Line]) -> List[Block]:
        lines = visible_lines(lines)
        return _split_before(
            lines,
            lambda index, line: len(line.text) < max_length
            and not is_bullet(line.text)
            and bool(pattern.search(line.text)),
        )

    return splitter


def merge_bullet_only_blocks(blocks: List[Block]) -> List[Block]:
    """Attach blocks made only of bullet lines to the preceding block."""

    merged: List[Block] = []
    for block in blocks:
        if merged and all(is_bullet(line.text) for line in block):
            merged[-1] = merged[-1] + block
        else:
            merged.append(block)
    return merged


def divide_into_subsections(lines: Sequence[Line], strategies: Sequence[Splitter]) -> List[Block]:
    """Try *strategies* in order; the first giving more than one block wins."""

    lines = list(lines)
    visible = visible_lines(lines)
    if len(visible) <= 1:
        return [visible] if visible else []
    for strategy in strategies:
        blocks = merge_bullet_only_blocks([block for block in strategy(lines) if block])
        if len(blocks) > 1:
            LOGGER.debug("%s split %s lines into %s blocks", strategy.__name__, len(visible), len(blocks))
            return blocks
    return [visible]


def keyword_pattern(words: Sequence[str]) -> Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(re.escape(word) for word in words) + r")\b", re.I)


__all__ = [
    "Block",
    "divide_into_subsections",
    "keyword_pattern",
    "merge_bullet_only_blocks",
    "split_on_blank_lines",
    "split_on_bold_transitions",
    "split_on_line_gaps",
    "split_on_pattern",
    "visible_lines",
]
