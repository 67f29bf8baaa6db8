"""Extract identity and contact fields from the profile section."""

from __future__ import annotations

import logging
import os
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

try:  # pragma: no cover - optional dependency
    import phonenumbers  # type: ignore
except Exception:  # pragma: no cover
    phonenumbers = None

from .schema import ProfileFields
from .text_utils import fragment_texts, is_all_caps
from .types import Line, Section, TextFragment, lines_to_text

LOGGER = logging.getLogger(__name__)

DEFAULT_PHONE_REGION = os.getenv("RESUME_PHONE_REGION", "US")
NAME_LINES = 3

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_PATTERN = re.compile(r"(?:\+?\d{1,3}[-.\s]?)?\(?\d{2,4}\)?[-.\s]?\d{3,4}[-.\s]?\d{4,6}")
LINKEDIN_PATTERN = re.compile(r"(?:https?://)?(?:www\.)?linkedin\.com/in/[\w-]+", re.I)
GITHUB_PATTERN = re.compile(r"(?:https?://)?(?:www\.)?github\.com/[\w-]+", re.I)
URL_PATTERN = re.compile(r"https?://[^\s<>\"{}|\\^`\[\]]+", re.I)
LOCATION_PATTERN = re.compile(r"[A-Z][a-zA-Z ]+,[ \t]*[A-Z]{2}\b")
NAME_WORD = re.compile(r"^[A-Za-z'’.-]+$")
LONG_DIGITS = re.compile(r"\d{3,}")
PROFILE_SITES = re.compile(r"linkedin|github", re.I)


def _with_scheme(url: str) -> str:
    return url if url.lower().startswith("http") else f"https://{url}"


def find_email(text: str) -> str:
    match = EMAIL_PATTERN.search(text)
    return match.group(0).lower() if match else ""


def find_phone(text: str) -> str:
    """Return the first phone-shaped substring, unformatted."""

    match = PHONE_PATTERN.search(text)
    return match.group(0) if match else ""


def find_linkedin(text: str) -> str:
    match = LINKEDIN_PATTERN.search(text)
    return _with_scheme(match.group(0)) if match else ""


def find_github(text: str) -> str:
    match = GITHUB_PATTERN.search(text)
    return _with_scheme(match.group(0)) if match else ""


def find_other_url(text: str) -> str:
    for match in URL_PATTERN.finditer(text):
        url = match.group(0).rstrip(".,;)")
        if "linkedin.com" not in url.lower():
            return url
    return ""


def find_location(text: str) -> str:
    match = LOCATION_PATTERN.search(text)
    return match.group(0).strip() if match else ""


# Each field tries its strategies in order until one returns a value.
TEXT_STRATEGIES: Dict[str, Tuple[Callable[[str], str], ...]] = {
    "email": (find_email,),
    "phone": (find_phone,),
    "linkedin": (find_linkedin,),
    "url": (find_github, find_other_url),
    "location": (find_location,),
}


def _is_contact_text(text: str) -> bool:
    return "@" in text or bool(LONG_DIGITS.search(text))


def name_from_styled_fragment(fragments: Sequence[TextFragment]) -> str:
    """Strict pass: a 2-4 word name that is bold, all caps or exactly two words."""

    for fragment in fragments:
        text = fragment.text.strip()
        if _is_contact_text(text) or PROFILE_SITES.search(text):
            continue
        if not 3 <= len(text) <= 40:
            continue
        words = text.split()
        if not 2 <= len(words) <= 4 or not all(NAME_WORD.match(word) for word in words):
            continue
        if fragment.is_bold or is_all_caps(text) or len(words) == 2:
            return text
    return ""


def name_from_plain_fragment(fragments: Sequence[TextFragment]) -> str:
    """Relaxed pass: any fragment holding 2-4 name-like words."""

    for fragment in fragments:
        text = fragment.text.strip()
        if _is_contact_text(text):
            continue
        words = [word for word in text.split() if NAME_WORD.match(word)]
        if 2 <= len(words) <= 4:
            return " ".join(words)
    return ""


NAME_STRATEGIES: Tuple[Callable[[Sequence[TextFragment]], str], ...] = (
    name_from_styled_fragment,
    name_from_plain_fragment,
)


def format_phone(raw: str, region: Optional[str] = None) -> str:
    """Format *raw* internationally with phonenumbers; otherwise just trim it."""

    if not raw:
        return ""
    if phonenumbers is None:
        return raw.strip()
    try:
        number = phonenumbers.parse(raw, region or DEFAULT_PHONE_REGION)
    except phonenumbers.NumberParseException:
        LOGGER.debug("phonenumbers could not parse %r", raw)
        return raw.strip()
    if not phonenumbers.is_possible_number(number):
        return raw.strip()
    return phonenumbers.format_number(number, phonenumbers.PhoneNumberFormat.INTERNATIONAL)


def split_name(name: str) -> Tuple[str, str]:
    return ProfileFields(name=name).name_parts()


def _first_result(strategies: Sequence[Callable], value) -> str:
    for strategy in strategies:
        result = strategy(value)
        if result:
            return result
    return ""


def _leading_lines(lines: List[Line], count: int = NAME_LINES) -> List[Line]:
    return [line for line in lines if not line.is_blank][:count]


def extract_profile(section: Optional[Section], phone_region: Optional[str] = None) -> ProfileFields:
    """Extract contact fields from the profile *section*."""

    if section is None:
        return ProfileFields()
    text = lines_to_text(section.lines)
    values = {field_name: _first_result(strategies, text) for field_name, strategies in TEXT_STRATEGIES.items()}
    values["phone"] = format_phone(values["phone"], phone_region)
    name_fragments = fragment_texts(_leading_lines(section.lines))
    values["name"] = _first_result(NAME_STRATEGIES, name_fragments)
    profile = ProfileFields(**values)
    LOGGER.debug("Extracted profile fields: %s", [key for key, value in values.items() if value])
    return profile


__all__ = [
    "NAME_STRATEGIES",
    "TEXT_STRATEGIES",
    "extract_profile",
    "find_email",
    "find_github",
    "find_linkedin",
    "find_location",
    "find_other_url",
    "find_phone",
    "format_phone",
    "name_from_plain_fragment",
    "name_from_styled_fragment",
    "split_name",
]
