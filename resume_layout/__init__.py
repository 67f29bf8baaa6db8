"""Top-level package for the resume layout parsing pipeline."""

from .pipeline import ResumeParser, check_modules, ensure_engine, parse_resume
from .schema import ParsedResume

__all__ = ["parse_resume", "ResumeParser", "ParsedResume", "check_modules", "ensure_engine"]
