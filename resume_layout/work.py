"""Extract work experience entries from the work section."""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, List, Optional, Tuple

from .schema import WorkEntry
from .subsections import (
    Block,
    divide_into_subsections,
    keyword_pattern,
    split_on_blank_lines,
    split_on_bold_transitions,
    split_on_line_gaps,
    split_on_pattern,
)
from .text_utils import (
    BULLET_POINTS,
    clean_bullet,
    find_date_range,
    has_present,
    has_year,
    is_bullet,
    normalize_date_range,
)
from .types import Line, Section

LOGGER = logging.getLogger(__name__)

JOB_TITLES = [
    "Accountant", "Administrator", "Advisor", "Agent", "Analyst", "Apprentice", "Architect",
    "Assistant", "Associate", "Auditor", "Bartender", "Bookkeeper", "Buyer", "Cashier", "CEO",
    "CFO", "CIO", "CISO", "CMO", "COO", "CTO", "Clerk", "Consultant", "Coordinator", "Creator",
    "Curator", "Developer", "Designer", "Director", "Driver", "Editor", "Engineer", "Executive",
    "Expert", "Founder", "Freelancer", "Head", "Intern", "Lead", "Manager", "Member", "Officer",
    "Operator", "Owner", "Partner", "President", "Producer", "Programmer", "Recruiter",
    "Representative", "Researcher", "Sales", "Scientist", "Scrum", "Specialist", "Strategist",
    "Supervisor", "Teacher", "Technician", "Trainee", "VP", "Volunteer", "Worker", "Writer",
]
JOB_TITLE_WORDS = {title.lower() for title in JOB_TITLES}

COMPANY_INDICATORS = re.compile(
    r"\b(?:Inc\.?|LLC|LLP|Ltd\.?|Corp\.?|Corporation|Company|Co\.|Technologies|Technology|Tech|"
    r"Solutions|Services|Service|Group|Partners|Partnership|Consulting|Consultancy|Media|"
    r"Entertainment|Studios?|Labs?|Laboratory|Global|International|Pvt\.?|Private|Limited|PLC|"
    r"GmbH|AG|S\.A\.|N\.V\.|B\.V\.)(?!\w)",
    re.I,
)
KNOWN_COMPANIES = keyword_pattern([
    "Google", "Microsoft", "Amazon", "Apple", "Meta", "Facebook", "Netflix", "Spotify", "Adobe",
    "Salesforce", "Oracle", "IBM", "Intel", "Cisco", "VMware", "SAP", "Uber", "Lyft", "Airbnb",
    "Twitter", "LinkedIn", "Snap", "Pinterest", "TikTok", "ByteDance", "Stripe", "PayPal",
    "Shopify", "Zoom", "Slack", "Dropbox", "Atlassian", "GitHub", "GitLab", "MongoDB",
    "Snowflake", "Twilio", "Infosys", "TCS", "Wipro", "HCL", "Cognizant", "Accenture",
    "Deloitte", "PwC", "KPMG", "McKinsey", "BCG", "Bain", "JPMorgan", "Goldman Sachs",
    "Morgan Stanley", "Citibank", "Bank of America", "Wells Fargo", "HSBC", "Barclays", "Tesla",
    "SpaceX", "OpenAI", "Nvidia", "AMD", "Qualcomm", "Samsung", "Sony", "Nintendo",
])
TITLE_LINE_PATTERN = keyword_pattern([
    "Engineer", "Developer", "Designer", "Manager", "Director", "Analyst", "Specialist",
    "Consultant", "Coordinator", "Lead", "Senior", "Junior", "Intern", "Editor", "Writer",
    "Producer", "Architect", "Administrator", "Executive", "Associate",
])
ROLE_WITH_YEAR_PATTERN = re.compile(
    r"\b(?:" + "|".join(JOB_TITLES) + r")\b.*\b(?:19|20)\d{2}\b",
    re.I,
)
LOCATION_PATTERN = re.compile(r"\b[A-Z][a-zA-Z]+(?: [A-Z][a-zA-Z]+)*, ?[A-Z]{2}\b")
EMPLOYMENT_TYPES = re.compile(
    r"\b(?:Full[- ]?time|Part[- ]?time|Contract(?:or)?|Freelance|Temporary|Internship|Co-op|"
    r"Remote|Hybrid|On[- ]?site)\b",
    re.I,
)
SEGMENT_SPLIT = re.compile(r"\s+[|–—·-]\s+|\s*\|\s*|\s{2,}|,\s+|\s+at\s+|\s+@\s+")
INLINE_BULLETS = re.compile("\\s*[" + "".join(BULLET_POINTS) + "]\\s*")
MIN_DESCRIPTION_LENGTH = 6


def has_job_title(text: str) -> bool:
    return any(word.strip(",.;:()|").lower() in JOB_TITLE_WORDS for word in text.split())


def _has_company_marker(text: str) -> bool:
    return bool(COMPANY_INDICATORS.search(text) or KNOWN_COMPANIES.search(text))


def _segments(block: Block) -> List[Tuple[str, bool]]:
    """Break each fragment of the block's header lines into ``(text, bold)`` pieces."""

    pieces: List[Tuple[str, bool]] = []
    for line in block:
        if is_bullet(line.text):
            continue
        for fragment in line.fragments:
            for piece in SEGMENT_SPLIT.split(fragment.text):
                piece = piece.strip(" ,|–—-")
                if piece:
                    pieces.append((piece, fragment.is_bold))
    return pieces


def _is_date_piece(text: str) -> bool:
    return (has_year(text) and len(text) < 25) or bool(re.fullmatch(r"(?i)present|current|now|ongoing", text))


def title_from_segments(block: Block, **_: str) -> str:
    for text, _bold in _segments(block):
        if _is_date_piece(text) or len(text) >= 80:
            continue
        if has_job_title(text) and len(text.split()) <= 5:
            return text
    return ""


def company_from_bold_segment(block: Block, job_title: str = "") -> str:
    for text, bold in _segments(block):
        if bold and text != job_title and not has_job_title(text) and not has_year(text) and len(text) < 80:
            return text
    return ""


def company_from_indicator(block: Block, job_title: str = "") -> str:
    for text, _bold in _segments(block):
        if text != job_title and _has_company_marker(text) and not has_year(text) and len(text) < 80:
            return text
    return ""


def company_from_first_line(block: Block, job_title: str = "") -> str:
    text = block[0].text if block else ""
    if has_job_title(text) or has_year(text) or has_present(text) or is_bullet(text):
        return ""
    return text if 2 < len(text) < 80 else ""


# Each field tries its strategies in order until one returns a value.
TITLE_STRATEGIES: Tuple[Callable[..., str], ...] = (title_from_segments,)
COMPANY_STRATEGIES: Tuple[Callable[..., str], ...] = (
    company_from_bold_segment,
    company_from_indicator,
    company_from_first_line,
)


def _first_result(strategies: Iterable[Callable[..., str]], block: Block, **context: str) -> str:
    for strategy in strategies:
        result = strategy(block, **context)
        if result:
            return result
    return ""


def find_block_date(block: Block) -> str:
    for line in block:
        if is_bullet(line.text):
            continue
        date = find_date_range(line.text)
        if date:
            return date
    return ""


def split_on_role_lines(lines: List[Line]) -> List[Block]:
    """Split on lines carrying a job title and a year (several roles at one company)."""

    visible = [line for line in lines if not line.is_blank]
    role_indices = [
        index
        for index, line in enumerate(visible)
        if len(line.text) < 100 and ROLE_WITH_YEAR_PATTERN.search(line.text)
    ]
    if not role_indices:
        return [visible]
    blocks: List[Block] = []
    for position, start in enumerate(role_indices):
        end = role_indices[position + 1] if position + 1 < len(role_indices) else len(visible)
        blocks.append(visible[start:end])
    # Lines before the first role (usually the company) head the first role.
    blocks[0] = visible[: role_indices[0]] + blocks[0]
    return blocks


SUBSECTION_STRATEGIES = (
    split_on_blank_lines,
    split_on_line_gaps,
    split_on_bold_transitions,
    split_on_pattern(TITLE_LINE_PATTERN),
    split_on_role_lines,
)


def descriptions_start(block: Block) -> int:
    """Index of the first description line in *block*."""

    for index, line in enumerate(block):
        if is_bullet(line.text) or any(bullet in line.text for bullet in BULLET_POINTS):
            return index
    last_info = -1
    for index, line in enumerate(block):
        text = line.text
        if has_job_title(text) or has_year(text) or has_present(text):
            last_info = index
            continue
        words = [word for word in text.split() if not any(char.isdigit() for char in word)]
        if len(words) >= 8 and last_info >= 0:
            return index
    if last_info >= 0:
        return last_info + 1
    return min(2, len(block))


def bullet_points(block: Block) -> List[str]:
    """Collect description bullets; wrapped lines continue the previous bullet."""

    points: List[str] = []
    bulleted = any(is_bullet(line.text) for line in block)
    for line in block:
        text = line.text
        starts_new = is_bullet(text) or not points or not bulleted
        pieces = [piece.strip() for piece in INLINE_BULLETS.split(clean_bullet(text))]
        pieces = [piece for piece in pieces if piece]
        if not pieces:
            continue
        if starts_new:
            points.append(pieces[0])
        else:
            points[-1] = f"{points[-1]} {pieces[0]}"
        points.extend(pieces[1:])
    return [point for point in points if len(point) >= MIN_DESCRIPTION_LENGTH]


def _find(pattern: re.Pattern, text: str) -> str:
    match = pattern.search(text)
    return match.group(0).strip() if match else ""


def extract_entry(block: Block) -> WorkEntry:
    """Build a work entry from one block of lines."""

    header = [line for line in block if not is_bullet(line.text)]
    header_text = "\n".join(line.text for line in header)
    job_title = _first_result(TITLE_STRATEGIES, block)
    company = _first_result(COMPANY_STRATEGIES, block, job_title=job_title)
    date = find_block_date(block)
    start_date, end_date = normalize_date_range(date)
    location = _find(LOCATION_PATTERN, header_text)
    employment_type = _find(EMPLOYMENT_TYPES, header_text)
    descriptions = bullet_points(block[descriptions_start(block):])
    return WorkEntry(
        job_title=job_title,
        company=company,
        location=location,
        employment_type=employment_type,
        date=date,
        start_date=start_date,
        end_date=end_date,
        current=has_present(date),
        descriptions=descriptions,
    )


def extract_work(section: Optional[Section]) -> List[WorkEntry]:
    """Extract work entries in the order the section presents them."""

    if section is None or not section.lines:
        return []
    blocks = divide_into_subsections(section.lines, SUBSECTION_STRATEGIES)
    entries: List[WorkEntry] = []
    last_company = ""
    for index, block in enumerate(blocks):
        entry = extract_entry(block)
        if entry.is_blank():
            LOGGER.debug("Dropping work block without title or company: %r", block[0].text)
            continue
        if entry.company and not (entry.job_title or entry.date) and index + 1 < len(blocks):
            LOGGER.debug("Treating %r as the company of the following roles", entry.company)
            last_company = entry.company
            continue
        if entry.company:
            last_company = entry.company
        elif last_company and entry.job_title:
            block_text = " ".join(line.text for line in block)
            if not _has_company_marker(block_text):
                entry.company = last_company
        entries.append(entry)
    LOGGER.debug("Extracted %s work entries from %s blocks", len(entries), len(blocks))
    return entries


__all__ = [
    "COMPANY_STRATEGIES",
    "SUBSECTION_STRATEGIES",
    "TITLE_STRATEGIES",
    "bullet_points",
    "descriptions_start",
    "extract_entry",
    "extract_work",
    "has_job_title",
]
