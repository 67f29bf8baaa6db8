"""Extract education entries from the education section."""

from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional, Sequence, Tuple

from .schema import EducationEntry
from .subsections import (
    Block,
    divide_into_subsections,
    split_on_blank_lines,
    split_on_bold_transitions,
    split_on_line_gaps,
    split_on_pattern,
)
from .text_utils import YEAR_PATTERN, is_bullet, normalize_date
from .types import Section

LOGGER = logging.getLogger(__name__)

SCHOOL_KEYWORDS = re.compile(
    r"\b(?:University|College|Institute|School|Academy|Polytechnic|IIT|IIM|NIT|BITS|IIIT|MIT|"
    r"Stanford|Harvard|Berkeley|UCLA|NYU|Columbia|Princeton|Yale|Oxford|Cambridge)\b",
    re.I,
)
DEGREE_PATTERN = re.compile(
    r"\b(?:Bachelor(?:'s)?(?:\s+of\s+\w+)?|Master(?:'s)?(?:\s+of\s+\w+)?|Doctor(?:ate)?(?:\s+of\s+\w+)?"
    r"|Ph\.?\s?D\.?|M\.?B\.?A\.?|B\.?\s?Tech|M\.?\s?Tech|B\.?\s?Sc\.?|M\.?\s?Sc\.?|B\.?\s?Com|M\.?\s?Com|B\.?\s?Eng|M\.?\s?Eng"
    r"|B\.?S\.?|M\.?S\.?|B\.?A\.?|M\.?A\.?|B\.?E\.?|M\.?E\.?|BCA|MCA|LLB|LLM|MBBS|J\.?D\.?|M\.?D\.?"
    r"|Associate(?:'s)?(?:\s+of\s+\w+)?|Diploma|Certificate)(?![\w])",
)
FIELDS_OF_STUDY = [
    "Computer Science", "Computer Engineering", "Software Engineering", "Information Technology",
    "Electrical Engineering", "Electronics", "Mechanical Engineering", "Civil Engineering",
    "Chemical Engineering", "Data Science", "Machine Learning", "Artificial Intelligence",
    "Cybersecurity", "Information Systems", "Business Administration", "Finance", "Accounting",
    "Economics", "Marketing", "Management", "Mathematics", "Statistics", "Physics", "Chemistry",
    "Biology", "Biotechnology", "Psychology", "Sociology", "Political Science", "History",
    "English", "Communications", "Graphic Design", "Industrial Design", "Architecture",
    "Fine Arts", "Music", "Nursing", "Medicine", "Public Health", "Pharmacy", "Law",
]
FIELD_PATTERNS = [
    (name, re.compile(r"\b" + r"\s+".join(name.split()) + r"\b", re.I)) for name in FIELDS_OF_STUDY
]
FIELD_MARKER_PATTERN = re.compile(r"\b(?:in|of)\s+([A-Z][a-zA-Z&\s]+?)(?=\s*[,|]|\s*\d{4}|\s*$)")
EDUCATION_RANGE_PATTERN = re.compile(
    r"(?:(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?\s*)?((?:19|20)\d{2})\s*(?:[-–—]+|\bto\b)\s*"
    r"(?:(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?\s*)?((?:19|20)\d{2}|Present|Expected)",
    re.I,
)
GPA_PATTERNS = [
    re.compile(r"(?:GPA|CGPA|Grade)[:\s]*(\d+(?:\.\d+)?)(?:\s*/\s*\d+(?:\.\d+)?)?", re.I),
    re.compile(r"(\d+\.\d+)\s*(?:/\s*\d+(?:\.\d+)?)?\s*(?:GPA|CGPA)", re.I),
]
HONORS_PATTERN = re.compile(
    r"\b(?:Summa Cum Laude|Magna Cum Laude|Cum Laude|With Honou?rs|With Distinction|Dean's List|"
    r"First Class|Second Class|Distinction|Merit|Honou?rs?)\b",
    re.I,
)

SUBSECTION_STRATEGIES = (
    split_on_blank_lines,
    split_on_line_gaps,
    split_on_bold_transitions,
    split_on_pattern(SCHOOL_KEYWORDS),
)


def _clean_school(text: str) -> str:
    text = re.sub(r"\s*(?:\||–|—|-)?\s*(?:(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?\s*)?(?:19|20)\d{2}.*$", "", text, flags=re.I)
    text = re.sub(r"\s*(?:GPA|CGPA).*$", "", text, flags=re.I)
    text = re.sub(r"\s*,\s*[A-Z][a-z]+.*$", "", text)
    return text.strip(" ,|–—-")


def school_from_keyword_line(lines: Sequence[str], bold: Sequence[bool]) -> str:
    for text in lines:
        if SCHOOL_KEYWORDS.search(text):
            segments = [segment for segment in re.split(r"\s*\|\s*|\s+[–—]\s+", text) if SCHOOL_KEYWORDS.search(segment)]
            return _clean_school(segments[0] if segments else text)
    return ""


def school_from_bold_line(lines: Sequence[str], bold: Sequence[bool]) -> str:
    for text, is_bold in zip(lines, bold):
        if is_bold and not DEGREE_PATTERN.search(text):
            return re.sub(r"\s*\d{4}.*$", "", text).strip(" ,|–—-")
    return ""


def field_from_known_list(text: str) -> str:
    for name, pattern in FIELD_PATTERNS:
        if pattern.search(text):
            return name
    return ""


def field_from_marker(text: str) -> str:
    match = FIELD_MARKER_PATTERN.search(text)
    if match and len(match.group(1).strip()) < 50:
        return match.group(1).strip()
    return ""


# Each field tries its strategies in order until one returns a value.
SCHOOL_STRATEGIES: Tuple[Callable[[Sequence[str], Sequence[bool]], str], ...] = (
    school_from_keyword_line,
    school_from_bold_line,
)
FIELD_STRATEGIES: Tuple[Callable[[str], str], ...] = (field_from_known_list, field_from_marker)


def find_degree(lines: Sequence[str]) -> str:
    for text in lines:
        match = DEGREE_PATTERN.search(text)
        if match:
            return match.group(0).strip()
    return ""


def find_dates(text: str) -> Tuple[str, str, str]:
    """Return ``(date, start_date, end_date)``; ``date`` is the graduation year."""

    match = EDUCATION_RANGE_PATTERN.search(text)
    if match:
        start, end = match.group(1), match.group(2)
        date = "" if end.lower() in ("present", "expected") else end
        return date, normalize_date(start), normalize_date(end)
    years = YEAR_PATTERN.findall(text)
    if years:
        return years[-1], "", years[-1]
    return "", "", ""


def find_gpa(text: str) -> str:
    for pattern in GPA_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return ""


def find_honors(text: str) -> str:
    match = HONORS_PATTERN.search(text)
    return match.group(0).strip() if match else ""


def extract_entry(block: Block) -> EducationEntry:
    texts = [line.text for line in block]
    bold = [line.is_bold for line in block]
    full_text = " ".join(texts)
    school = ""
    for strategy in SCHOOL_STRATEGIES:
        school = strategy(texts, bold)
        if school:
            break
    field = ""
    for strategy in FIELD_STRATEGIES:
        field = strategy(full_text)
        if field:
            break
    date, start_date, end_date = find_dates(full_text)
    return EducationEntry(
        school=school,
        degree=find_degree(texts),
        field=field,
        date=date,
        start_date=start_date,
        end_date=end_date,
        gpa=find_gpa(full_text),
        honors=find_honors(full_text),
    )


def extract_education(section: Optional[Section]) -> List[EducationEntry]:
    """Extract education entries in the order the section presents them."""

    if section is None or not section.lines:
        return []
    entries: List[EducationEntry] = []
    for block in divide_into_subsections(section.lines, SUBSECTION_STRATEGIES):
        header = [line for line in block if not is_bullet(line.text)] or block
        entry = extract_entry(header)
        if entry.is_blank():
            LOGGER.debug("Dropping education block without school or degree: %r", block[0].text)
            continue
        entries.append(entry)
    LOGGER.debug("Extracted %s education entries", len(entries))
    return entries


__all__ = [
    "FIELD_STRATEGIES",
    "SCHOOL_STRATEGIES",
    "SUBSECTION_STRATEGIES",
    "extract_education",
    "extract_entry",
    "find_dates",
    "find_degree",
    "find_gpa",
    "find_honors",
]
