"""Group visual lines into named resume sections."""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Pattern

from .text_utils import is_all_caps, is_bullet
from .types import SECTION_NAMES, Line, Section

LOGGER = logging.getLogger(__name__)

MAX_HEADING_LENGTH = 40
MAX_HEADING_WORDS = 5
# Unstyled labels longer than this read as job titles or degree names.
MAX_PLAIN_HEADING_WORDS = 2
CONNECTORS = {"&", "and", "of", "the", "in", "for", "to", "with", "/"}
HEADING_TEXT = re.compile(r"^[A-Za-z&/'\s-]+:?$")


def _keywords(*patterns: str) -> Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(patterns) + r")\b", re.I)


# Insertion order is the tie-break priority.
SECTION_KEYWORDS: Dict[str, Pattern[str]] = {
    "work": _keywords(
        r"experiences?",
        r"employment",
        r"work",
        r"work\s+history",
        r"careers?",
        r"professional\s+background",
        r"internships?",
    ),
    "education": _keywords(
        r"education(?:al)?",
        r"academics?",
        r"academic\s+background",
        r"qualifications?",
        r"schooling",
    ),
    "skills": _keywords(
        r"skills?",
        r"skill\s*set",
        r"competenc(?:y|ies|e|es)",
        r"expertise",
        r"technologies",
        r"tech\s+stack",
        r"proficienc(?:y|ies)",
        r"programming",
        r"toolkit",
    ),
    "other": _keywords(
        r"projects?",
        r"certifications?",
        r"certificates?",
        r"licen[cs]es?",
        r"awards?",
        r"achievements?",
        r"honou?rs",
        r"summary",
        r"objective",
        r"profile",
        r"about\s+me",
        r"publications?",
        r"languages",
        r"interests",
        r"hobbies",
        r"volunteer(?:ing)?",
        r"activities",
        r"references",
        r"course\s*work",
        r"courses",
        r"affiliations",
        r"memberships?",
    ),
}


def _heading_words(text: str) -> List[str]:
    return [word for word in text.split() if word.lower() not in CONNECTORS]


def _is_title_case(words: List[str]) -> bool:
    letters = [next((char for char in word if char.isalpha()), "") for word in words]
    return all(letter.isupper() for letter in letters if letter)


def is_heading_like(line: Line) -> bool:
    """Short line rendered bold or all caps, or a title-cased label of at most two words."""

    text = line.text
    if not text or len(text) > MAX_HEADING_LENGTH or is_bullet(text):
        return False
    words = _heading_words(text)
    if not words or len(words) > MAX_HEADING_WORDS:
        return False
    if not any(char.isalpha() for char in text):
        return False
    if line.is_bold or is_all_caps(text):
        return True
    if len(words) > MAX_PLAIN_HEADING_WORDS:
        return False
    return bool(HEADING_TEXT.match(text)) and _is_title_case(words)


def heading_section(line: Line) -> Optional[str]:
    """Return the section a heading line opens, or None for body lines."""

    if not is_heading_like(line) or not HEADING_TEXT.match(line.text):
        return None
    for name, pattern in SECTION_KEYWORDS.items():
        if pattern.search(line.text):
            return name
    return None


def group_sections(lines: Iterable[Line]) -> Dict[str, Section]:
    """Assign every line to exactly one section.

    Lines before the first recognized heading belong to ``profile``. A
    recognized heading makes its section active (again, if it was seen
    before); heading-like lines without a known keyword stay in the active
    section as ordinary lines.
    """

    sections: Dict[str, Section] = {name: Section(name=name) for name in SECTION_NAMES}
    active = sections["profile"]
    for line in lines:
        name = heading_section(line)
        if name is None:
            active.add_line(line)
            continue
        LOGGER.debug("Heading %r opens section %s", line.text, name)
        active = sections[name]
        active.add_heading(line)
    LOGGER.debug(
        "Section sizes: %s",
        {name: len(section.lines) for name, section in sections.items()},
    )
    return sections


__all__ = ["SECTION_KEYWORDS", "group_sections", "heading_section", "is_heading_like"]
