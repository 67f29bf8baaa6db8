"""Common data structures used across the resume parsing pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

SECTION_NAMES = ("profile", "work", "education", "skills", "other")
BULLET_POINTS = ("⋅", "∙", "🞄", "•", "⦁", "⚫", "●", "⬤", "⚬", "○", "▪", "■", "►", "▸")

# Adjacent runs get a space after these endings or before these openings.
SPACE_AFTER = (":", ",", "|", ".") + BULLET_POINTS
SPACE_BEFORE = ("|",) + BULLET_POINTS


@dataclass(frozen=True)
class TextFragment:
    """A positioned run of text as reported by the extraction engine.

    Coordinates are in points with ``y`` growing downwards from the top of
    the page; ``y`` is the baseline of the run.
    """

    text: str
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0
    font_name: str = ""
    end_of_line: bool = False
    page: int = 0

    @property
    def is_bold(self) -> bool:
        return "bold" in self.font_name.lower()

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class Line:
    """Fragments sharing a visual row, ordered left to right."""

    fragments: Tuple[TextFragment, ...]
    reference_y: Optional[float] = None
    # Typical character width of the document; ``None`` spaces every fragment.
    char_width: Optional[float] = None

    @property
    def text(self) -> str:
        pieces: List[str] = []
        previous: Optional[TextFragment] = None
        for fragment in self.fragments:
            if fragment.is_blank:
                continue
            if previous is not None and needs_space(previous, fragment, self.char_width):
                pieces.append(" ")
            pieces.append(fragment.text)
            previous = fragment
        return " ".join("".join(pieces).split())

    @property
    def y(self) -> float:
        if self.reference_y is not None:
            return self.reference_y
        return self.fragments[0].y if self.fragments else 0.0

    @property
    def page(self) -> int:
        return self.fragments[0].page if self.fragments else 0

    @property
    def is_blank(self) -> bool:
        return not self.text

    @property
    def is_bold(self) -> bool:
        visible = [fragment for fragment in self.fragments if not fragment.is_blank]
        return bool(visible) and all(fragment.is_bold for fragment in visible)

    @property
    def first(self) -> Optional[TextFragment]:
        for fragment in self.fragments:
            if not fragment.is_blank:
                return fragment
        return None


@dataclass
class Section:
    """A named group of lines; ``headings`` hold the lines that opened it."""

    name: str
    headings: List[Line] = field(default_factory=list)
    lines: List[Line] = field(default_factory=list)
    all_lines: List[Line] = field(default_factory=list, repr=False)

    def add_heading(self, line: Line) -> None:
        self.headings.append(line)
        self.all_lines.append(line)

    def add_line(self, line: Line) -> None:
        self.lines.append(line)
        self.all_lines.append(line)

    @property
    def text(self) -> str:
        return lines_to_text(self.lines)

    def fragments(self) -> Iterator[TextFragment]:
        for line in self.lines:
            yield from line.fragments


def needs_space(left: TextFragment, right: TextFragment, char_width: Optional[float]) -> bool:
    """Whether a space separates two neighbouring fragments of a line.

    Fragments further apart than ``char_width`` are separate words. Closer
    ones are pieces of one word (a font change mid-word, a split run) and
    only get a space where punctuation or a bullet calls for one.
    """

    if char_width is None or left.width <= 0:
        return True
    if right.x - (left.x + left.width) > char_width:
        return True
    left_end, right_start = left.text[-1:], right.text[:1]
    if left_end in SPACE_AFTER and right_start != " ":
        return True
    return left_end != " " and right_start in SPACE_BEFORE


def lines_to_text(lines: List[Line]) -> str:
    """Join line texts with newlines, skipping blank lines."""

    return "\n".join(line.text for line in lines if not line.is_blank)


__all__ = ["SECTION_NAMES", "BULLET_POINTS", "TextFragment", "Line", "Section", "needs_space", "lines_to_text"]
