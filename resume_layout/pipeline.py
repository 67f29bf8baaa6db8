"""End-to-end resume layout parsing pipeline."""

from __future__ import annotations

import importlib.util
import logging
from typing import Dict, List, Optional

from . import education, ingestion, layout_utils, lines, profile, sections, skills, work
from .ingestion import DocumentSource
from .schema import ParsedResume
from .types import Line, Section, TextFragment, lines_to_text

LOGGER = logging.getLogger(__name__)

# Stage name -> (module, entry point the orchestrator calls).
STAGE_ENTRY_POINTS = {
    "text_reader": (ingestion, "read_document"),
    "line_grouper": (lines, "group_lines"),
    "section_grouper": (sections, "group_sections"),
    "profile_extractor": (profile, "extract_profile"),
    "work_extractor": (work, "extract_work"),
    "education_extractor": (education, "extract_education"),
    "skills_extractor": (skills, "extract_skills"),
}
ENGINE_MODULES = ("pdfplumber", "docx", "phonenumbers", "easyocr", "pdf2image")


class ResumeParser:
    """High-level orchestrator for the resume parsing pipeline."""

    def __init__(
        self,
        reader_config: Optional[ingestion.ReaderConfig] = None,
        grouping_config: Optional[lines.GroupingConfig] = None,
        phone_region: Optional[str] = None,
    ) -> None:
        self.reader_config = reader_config or ingestion.ReaderConfig()
        self.grouping_config = grouping_config or lines.GroupingConfig()
        self.phone_region = phone_region

    def read(self, source: DocumentSource, filename: Optional[str] = None) -> List[TextFragment]:
        LOGGER.info("Reading document %s", filename or getattr(source, "name", None) or type(source).__name__)
        fragments = ingestion.read_document(source, self.reader_config, filename=filename)
        LOGGER.debug("Read %s text fragments", len(fragments))
        return fragments

    def group_lines(self, fragments: List[TextFragment]) -> List[Line]:
        LOGGER.info("Grouping fragments into lines")
        if self.reader_config.column_aware:
            fragments = layout_utils.sort_reading_order(fragments)
        grouped = lines.group_lines(fragments, self.grouping_config)
        LOGGER.debug("Grouped into %s lines", len(grouped))
        return grouped

    def group_sections(self, grouped: List[Line]) -> Dict[str, Section]:
        LOGGER.info("Grouping lines into sections")
        return sections.group_sections(grouped)

    def extract(self, grouped_sections: Dict[str, Section], full_text: str = "") -> ParsedResume:
        LOGGER.info("Extracting resume fields")
        fields = profile.extract_profile(grouped_sections.get("profile"), self.phone_region)
        work_experiences = work.extract_work(grouped_sections.get("work"))
        education_entries = education.extract_education(grouped_sections.get("education"))
        found_skills = skills.extract_skills(grouped_sections.get("skills"), full_text)
        LOGGER.debug(
            "Extracted %s work entries, %s education entries, %s skills",
            len(work_experiences),
            len(education_entries),
            len(found_skills.raw),
        )
        return ParsedResume(
            profile=fields,
            work_experiences=work_experiences,
            education=education_entries,
            skills=found_skills.raw,
            skills_categorized=found_skills.categorized,
            sections=grouped_sections,
        )

    def parse(self, source: DocumentSource, filename: Optional[str] = None) -> ParsedResume:
        fragments = self.read(source, filename)
        grouped = self.group_lines(fragments)
        grouped_sections = self.group_sections(grouped)
        return self.extract(grouped_sections, lines_to_text(grouped))


def parse_resume(source: DocumentSource, filename: Optional[str] = None) -> ParsedResume:
    """Convenience function to parse a resume into a :class:`ParsedResume`."""

    parser = ResumeParser()
    return parser.parse(source, filename)


def check_modules() -> Dict[str, bool]:
    """Report which pipeline stages and document engines are available.

    A stage is available when its entry point resolves to a callable; an
    engine when its module can be found on the import path.
    """

    status = {
        name: callable(getattr(module, entry_point, None))
        for name, (module, entry_point) in STAGE_ENTRY_POINTS.items()
    }
    for name in ENGINE_MODULES:
        status[name] = importlib.util.find_spec(name) is not None
    return status


def ensure_engine() -> None:
    """Fail fast when the PDF extraction engine is not installed."""

    if ingestion.pdfplumber is None:
        raise ImportError("pdfplumber is required to parse PDF resumes; install it with `pip install pdfplumber`")


__all__ = ["ResumeParser", "check_modules", "ensure_engine", "parse_resume"]
