"""Command-line helper to run the resume layout parsing pipeline."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from resume_layout import ResumeParser, check_modules
from resume_layout.ingestion import ReaderConfig


def main() -> None:
    parser = argparse.ArgumentParser(description="Parse a resume into structured JSON")
    parser.add_argument("file", type=Path, nargs="?", help="Path to the resume file (PDF/DOCX/TXT)")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to save the JSON output")
    parser.add_argument("--check", action="store_true", help="Print which pipeline modules are available and exit")
    parser.add_argument("--columns", action="store_true", help="Read multi-column pages column by column")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.check:
        print(json.dumps(check_modules(), indent=2))
        return
    if args.file is None:
        parser.error("a resume file is required unless --check is given")

    resume_pipeline = ResumeParser(reader_config=ReaderConfig(column_aware=args.columns))
    resume = resume_pipeline.parse(args.file.expanduser())
    json_payload = resume.json()
    print(json_payload)

    if args.output:
        args.output.write_text(json_payload, encoding="utf-8")
        logging.info("Saved output to %s", args.output)
    logging.info(
        "Parsed %s work entries and %s education entries",
        len(resume.work_experiences),
        len(resume.education),
    )


if __name__ == "__main__":
    main()
