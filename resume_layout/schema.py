"""Output schema definitions for the resume parsing pipeline."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Tuple

from .types import SECTION_NAMES, Section


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_text_list(values: Any) -> List[str]:
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    return [str(item).strip() for item in values if item is not None and str(item).strip()]


@dataclass
class ProfileFields:
    """Identity and contact details found before the first section heading."""

    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    url: str = ""
    linkedin: str = ""

    def __post_init__(self) -> None:
        for key in ("name", "email", "phone", "location", "url", "linkedin"):
            setattr(self, key, _as_text(getattr(self, key)))

    def name_parts(self) -> Tuple[str, str]:
        """Split the name into ``(first, last)``; the last part may be empty."""

        parts = self.name.split()
        if not parts:
            return "", ""
        return parts[0], " ".join(parts[1:])


@dataclass
class WorkEntry:
    """Professional experience item."""

    job_title: str = ""
    company: str = ""
    location: str = ""
    employment_type: str = ""
    date: str = ""
    start_date: str = ""
    end_date: str = ""
    current: bool = False
    descriptions: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        for key in ("job_title", "company", "location", "employment_type", "date", "start_date", "end_date"):
            setattr(self, key, _as_text(getattr(self, key)))
        self.current = bool(self.current)
        self.descriptions = _as_text_list(self.descriptions)

    def is_blank(self) -> bool:
        return not (self.job_title or self.company)


@dataclass
class EducationEntry:
    """Education entry with school and degree information."""

    school: str = ""
    degree: str = ""
    field: str = ""
    date: str = ""
    start_date: str = ""
    end_date: str = ""
    gpa: str = ""
    honors: str = ""

    def __post_init__(self) -> None:
        for key in ("school", "degree", "field", "date", "start_date", "end_date", "gpa", "honors"):
            setattr(self, key, _as_text(getattr(self, key)))

    def is_blank(self) -> bool:
        return not (self.school or self.degree)


@dataclass
class ParsedResume:
    """Top-level structured resume representation."""

    profile: ProfileFields = field(default_factory=ProfileFields)
    work_experiences: List[WorkEntry] = field(default_factory=list)
    education: List[EducationEntry] = field(default_factory=list)
    skills: List[str] = field(default_factory=list)
    skills_categorized: Dict[str, List[str]] = field(default_factory=dict)
    sections: Dict[str, Section] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.profile, ProfileFields):
            self.profile = ProfileFields(**(self.profile or {}))
        self.work_experiences = [item if isinstance(item, WorkEntry) else WorkEntry(**item) for item in self.work_experiences]
        self.education = [item if isinstance(item, EducationEntry) else EducationEntry(**item) for item in self.education]
        self.skills = _as_text_list(self.skills)
        self.skills_categorized = {
            str(category): _as_text_list(values) for category, values in (self.skills_categorized or {}).items()
        }

    def section_lines(self) -> Dict[str, List[str]]:
        """Render each section as its line texts, headings included."""

        rendered: Dict[str, List[str]] = {name: [] for name in SECTION_NAMES}
        for name, section in self.sections.items():
            if isinstance(section, Section):
                rendered[name] = [line.text for line in section.all_lines if not line.is_blank]
            else:
                rendered[name] = _as_text_list(section)
        return rendered

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": asdict(self.profile),
            "work_experiences": [asdict(item) for item in self.work_experiences],
            "education": [asdict(item) for item in self.education],
            "skills": list(self.skills),
            "skills_categorized": {key: list(values) for key, values in self.skills_categorized.items()},
            "sections": self.section_lines(),
        }

    def json(self, indent: int = 2, ensure_ascii: bool = False) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=ensure_ascii)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ParsedResume":
        """Rebuild a resume from :meth:`to_dict` output.

        Sections come back as plain line lists since fragment geometry is not
        part of the serialized payload.
        """

        payload = dict(payload)
        return cls(
            profile=ProfileFields(**payload.get("profile", {})),
            work_experiences=payload.get("work_experiences", []),
            education=payload.get("education", []),
            skills=payload.get("skills", []),
            skills_categorized=payload.get("skills_categorized", {}),
            sections=dict(payload.get("sections", {})),
        )


__all__ = [
    "EducationEntry",
    "ParsedResume",
    "ProfileFields",
    "WorkEntry",
]
