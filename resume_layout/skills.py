"""Collect raw and categorized skills."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Pattern, Sequence, Tuple

from .types import Section

LOGGER = logging.getLogger(__name__)

SKILL_DELIMITERS = re.compile(r"[•·|,;\n]")
MIN_SKILL_LENGTH = 2
MAX_SKILL_LENGTH = 49

# Names that are ordinary words (or letters) in other casings.
CASE_SENSITIVE = {"C", "R", "Go", "Less", "Shell", "Swift", "Rust", "Express", "Sketch", "Notion", "Parcel", "Rollup", "Apache"}

# category -> [(canonical name, pattern)]; a bare pattern of None means the
# canonical name itself, escaped.
TAXONOMY: Dict[str, List[Tuple[str, Optional[str]]]] = {
    "languages": [
        ("JavaScript", None), ("TypeScript", None), ("Python", None), ("Java", None),
        ("C++", None), ("C#", None), ("C", None), ("Ruby", None), ("Go", r"Go(?:lang)?"),
        ("Rust", None), ("PHP", None), ("Swift", None), ("Kotlin", None), ("Scala", None),
        ("R", None), ("MATLAB", None), ("Perl", None), ("Shell", None), ("Bash", None),
        ("PowerShell", None), ("SQL", None), ("HTML", None), ("CSS", None), ("SASS", None),
        ("SCSS", None), ("Less", None),
    ],
    "frameworks": [
        ("React", r"React(?:\.?js)?"), ("Angular", r"Angular(?:\.?js)?"), ("Vue.js", r"Vue(?:\.?js)?"),
        ("Next.js", r"Next\.?js"), ("Nuxt.js", r"Nuxt(?:\.?js)?"), ("Svelte", None),
        ("Node.js", r"Node(?:\.?js)?"), ("Express.js", r"Express(?:\.?js)?"), ("NestJS", None),
        ("Django", None), ("Flask", None), ("FastAPI", None), ("Spring Boot", r"Spring\s*Boot"),
        ("Spring", r"Spring(?!\s*Boot)"), ("ASP.NET", None), (".NET", r"(?<!ASP)\.NET"),
        ("Ruby on Rails", r"(?:Ruby\s+on\s+)?Rails"), ("Laravel", None), ("Symfony", None),
        ("TensorFlow", None), ("PyTorch", None), ("Keras", None), ("Pandas", None), ("NumPy", None),
        ("Scikit-learn", r"Scikit[\s-]?learn"), ("jQuery", None), ("Bootstrap", None),
        ("Tailwind CSS", r"Tailwind(?:\s*CSS)?"), ("Material UI", r"Material[\s-]?UI"),
        ("Chakra UI", r"Chakra[\s-]?UI"),
    ],
    "tools": [
        ("Git", None), ("GitHub", None), ("GitLab", None), ("Bitbucket", None), ("Jira", None),
        ("Confluence", None), ("Slack", None), ("Trello", None), ("Asana", None), ("Notion", None),
        ("Figma", None), ("Sketch", None), ("Adobe XD", r"Adobe\s*XD"), ("Photoshop", None),
        ("Illustrator", None), ("VS Code", r"VS\s*Code|VSCode"), ("Visual Studio", r"Visual\s*Studio(?!\s*Code)"),
        ("IntelliJ", None), ("Eclipse", None), ("PyCharm", None), ("WebStorm", None), ("Postman", None),
        ("Insomnia", None), ("Docker", None), ("Kubernetes", r"Kubernetes|K8s"), ("Jenkins", None),
        ("CircleCI", None), ("Travis CI", r"Travis\s*CI"), ("GitHub Actions", r"GitHub\s*Actions"),
        ("AWS", None), ("Azure", None), ("GCP", r"GCP|Google\s*Cloud"), ("Heroku", None),
        ("Vercel", None), ("Netlify", None), ("Firebase", None), ("MongoDB", None),
        ("PostgreSQL", r"PostgreSQL|Postgres"), ("MySQL", None), ("Redis", None),
        ("Elasticsearch", None), ("RabbitMQ", None), ("Kafka", None), ("Nginx", None),
        ("Apache", None), ("Linux", None), ("Unix", None), ("Windows Server", r"Windows\s*Server"),
        ("Webpack", None), ("Vite", None), ("Rollup", None), ("Parcel", None), ("npm", None),
        ("yarn", None), ("pnpm", None),
    ],
    "soft": [
        ("Leadership", None), ("Communication", None), ("Teamwork", None),
        ("Team Player", r"Team\s*Player"), ("Problem Solving", r"Problem[\s-]?Solving"),
        ("Critical Thinking", r"Critical\s+Thinking"), ("Time Management", r"Time\s+Management"),
        ("Project Management", r"Project\s+Management"), ("Agile", None), ("Scrum", None),
        ("Kanban", None), ("Collaboration", None), ("Adaptability", None), ("Creativity", None),
        ("Attention to Detail", r"Attention\s+to\s+Detail"), ("Analytical", None),
        ("Strategic Thinking", r"Strategic\s+Thinking"), ("Strategic Planning", r"Strategic\s+Planning"),
        ("Decision Making", r"Decision[\s-]?Making"), ("Mentoring", None), ("Coaching", None),
        ("Presentation", None), ("Public Speaking", r"Public\s+Speaking"), ("Negotiation", None),
        ("Conflict Resolution", r"Conflict\s+Resolution"),
    ],
}


def _compile(name: str, pattern: Optional[str]) -> Pattern[str]:
    body = pattern or re.escape(name)
    flags = 0 if name in CASE_SENSITIVE else re.I
    return re.compile(r"(?<![\w.#+])(?:" + body + r")(?![\w#+])", flags)


CATEGORY_PATTERNS: Dict[str, List[Tuple[str, Pattern[str]]]] = {
    category: [(name, _compile(name, pattern)) for name, pattern in entries]
    for category, entries in TAXONOMY.items()
}


@dataclass
class SkillsResult:
    raw: List[str] = field(default_factory=list)
    categorized: Dict[str, List[str]] = field(default_factory=dict)


def split_raw_skills(text: str) -> List[str]:
    """Split skills text on list delimiters, keeping plausible unique items."""

    skills: List[str] = []
    seen = set()
    for piece in SKILL_DELIMITERS.split(text or ""):
        piece = " ".join(piece.split())
        if not MIN_SKILL_LENGTH <= len(piece) <= MAX_SKILL_LENGTH or piece.isdigit():
            continue
        key = piece.casefold()
        if key in seen:
            continue
        seen.add(key)
        skills.append(piece)
    return skills


def find_category(text: str, patterns: Sequence[Tuple[str, Pattern[str]]]) -> List[str]:
    """Canonical names found in *text*, ordered by first occurrence."""

    found: List[Tuple[int, str]] = []
    for name, pattern in patterns:
        match = pattern.search(text)
        if match:
            found.append((match.start(), name))
    found.sort(key=lambda item: item[0])
    names: List[str] = []
    for _position, name in found:
        if name not in names:
            names.append(name)
    return names


def categorize_skills(text: str) -> Dict[str, List[str]]:
    categorized = {}
    for category, patterns in CATEGORY_PATTERNS.items():
        names = find_category(text, patterns)
        if names:
            categorized[category] = names
    return categorized


def extract_skills(section: Optional[Section], full_text: str = "") -> SkillsResult:
    skills_text = section.text if section is not None else ""
    result = SkillsResult(
        raw=split_raw_skills(skills_text),
        categorized=categorize_skills(skills_text + "\n" + (full_text or "")),
    )
    LOGGER.debug(
        "Extracted %s raw skills; categories: %s",
        len(result.raw),
        {category: len(names) for category, names in result.categorized.items()},
    )
    return result


__all__ = [
    "CATEGORY_PATTERNS",
    "SkillsResult",
    "TAXONOMY",
    "categorize_skills",
    "extract_skills",
    "find_category",
    "split_raw_skills",
]
