"""Text heuristics shared by the section grouper and the field extractors."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from .types import BULLET_POINTS, Line, TextFragment

BULLET_PATTERN = re.compile(r"^[•⋅∙🞄⦁⚫●⬤⚬○▪■►▸\-\*]+\s*")
DASH_BULLET_PATTERN = re.compile(r"^[-*](?!\s*(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec|\d{4}))", re.I)

MONTH_PATTERN = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?|"
    r"Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)
PRESENT_PATTERN = re.compile(r"\b(?:Present|Current|Now|Ongoing|Expected)\b", re.I)
YEAR_PATTERN = re.compile(r"\b(?:19|20)\d{2}\b")
DATE_PATTERNS = [
    re.compile(rf"(?P<month>{MONTH_PATTERN})[.,]?\s*(?P<year>(?:19|20)\d{{2}})\b", re.I),
    re.compile(rf"(?P<month>{MONTH_PATTERN})[.,]?\s*['’](?P<short>\d{{2}})\b", re.I),
    re.compile(r"\b(?P<numeric>\d{1,2})[/.-](?P<year>(?:19|20)\d{2})\b"),
    re.compile(r"\b(?P<year>(?:19|20)\d{2})\b"),
]
DATE_TOKEN = (
    rf"(?:{MONTH_PATTERN}[.,]?\s*['’]?\d{{2,4}}|\d{{1,2}}/(?:19|20)\d{{2}}|(?:19|20)\d{{2}}"
    r"|Present|Current|Now|Ongoing|Expected)"
)
DATE_RANGE_PATTERN = re.compile(
    rf"(?P<start>{DATE_TOKEN})\s*(?:[-–—]+|\bto\b|\buntil\b)\s*(?P<end>{DATE_TOKEN})",
    re.I,
)


def is_all_caps(text: str) -> bool:
    """Return True when *text* has letters and none of them are lower case."""

    return any(char.isalpha() for char in text) and text == text.upper()


def has_year(text: str) -> bool:
    return bool(YEAR_PATTERN.search(text))


def has_present(text: str) -> bool:
    return bool(PRESENT_PATTERN.search(text))


def is_bullet(text: str) -> bool:
    stripped = text.strip()
    if not stripped:
        return False
    if any(stripped.startswith(bullet) for bullet in BULLET_POINTS):
        return True
    return bool(DASH_BULLET_PATTERN.match(stripped))


def clean_bullet(text: str) -> str:
    return BULLET_PATTERN.sub("", text.strip()).strip()


def fragment_texts(lines: Iterable[Line]) -> List[TextFragment]:
    """Flatten the non-blank fragments of *lines*."""

    return [fragment for line in lines for fragment in line.fragments if not fragment.is_blank]


def normalize_date(text: str) -> str:
    """Normalize a date string to ISO (YYYY or YYYY-MM), ``present`` or ``""``."""

    text = text.strip()
    if not text:
        return ""
    if PRESENT_PATTERN.fullmatch(text):
        return "present"
    for pattern in DATE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        groups = match.groupdict()
        year = groups.get("year")
        if groups.get("short"):
            year = f"20{groups['short']}"
        month_number: Optional[int] = None
        if groups.get("month"):
            month_number = datetime.strptime(groups["month"][:3].title(), "%b").month
        elif groups.get("numeric"):
            month_number = int(groups["numeric"])
            if not 1 <= month_number <= 12:
                month_number = None
        if month_number:
            return f"{year}-{month_number:02d}"
        return year or ""
    if has_present(text):
        return "present"
    return ""


def find_date_range(text: str) -> str:
    """Return the first date range (or lone date) in *text*, or ``""``."""

    match = DATE_RANGE_PATTERN.search(text)
    if match:
        return match.group(0).strip()
    for pattern in DATE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0).strip()
    return ""


def normalize_date_range(text: str) -> Tuple[str, str]:
    """Split a date range into normalized ``(start, end)`` values."""

    match = DATE_RANGE_PATTERN.search(text)
    if match:
        return normalize_date(match.group("start")), normalize_date(match.group("end"))
    dates = [normalize_date(token) for token in re.findall(DATE_TOKEN, text, re.I)]
    dates = [date for date in dates if date]
    if not dates:
        return "", ""
    if len(dates) == 1:
        return dates[0], ""
    return dates[0], dates[1]


__all__ = [
    "BULLET_POINTS",
    "clean_bullet",
    "find_date_range",
    "fragment_texts",
    "has_present",
    "has_year",
    "is_all_caps",
    "is_bullet",
    "normalize_date",
    "normalize_date_range",
]
