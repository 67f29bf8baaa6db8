import pytest

import resume_layout.ingestion as ingestion
import resume_layout.lines as lines
from resume_layout import ResumeParser, check_modules, ensure_engine, parse_resume
from resume_layout.ingestion import ReaderConfig

RESUME_TEXT = """JANE DOE
jane.doe@example.com | Austin, TX
github.com/janedoe

EXPERIENCE
Backend Engineer | Initech LLC | Mar 2019 - Present
• Built payment APIs in Python and Go
• Ran Docker deployments on AWS

Software Developer, Globex Corporation
2016 - 2019
• Maintained Django services

EDUCATION
University of Texas at Austin | 2012 - 2016
Bachelor of Science in Computer Science

SKILLS
Python, Go, Django, Docker, AWS, Leadership
"""


def test_parse_text_resume_end_to_end():
    resume = parse_resume(RESUME_TEXT.encode("utf-8"), filename="resume.txt")

    assert resume.profile.name == "JANE DOE"
    assert resume.profile.email == "jane.doe@example.com"
    assert resume.profile.location == "Austin, TX"
    assert resume.profile.url == "https://github.com/janedoe"

    assert [(entry.job_title, entry.company) for entry in resume.work_experiences] == [
        ("Backend Engineer", "Initech LLC"),
        ("Software Developer", "Globex Corporation"),
    ]
    assert resume.work_experiences[0].current is True
    assert resume.work_experiences[0].descriptions == [
        "Built payment APIs in Python and Go",
        "Ran Docker deployments on AWS",
    ]

    assert len(resume.education) == 1
    assert resume.education[0].school == "University of Texas at Austin"
    assert resume.education[0].field == "Computer Science"

    assert resume.skills == ["Python", "Go", "Django", "Docker", "AWS", "Leadership"]
    assert resume.skills_categorized["frameworks"] == ["Django"]
    assert set(resume.to_dict()["sections"]) == {"profile", "work", "education", "skills", "other"}


def test_parsing_is_idempotent():
    parser = ResumeParser()
    data = RESUME_TEXT.encode("utf-8")

    assert parser.parse(data).to_dict() == parser.parse(data).to_dict()


def test_document_without_headings_keeps_everything_in_profile():
    resume = parse_resume(b"Jane Doe\nSome free text about a career\nMore free text")

    assert resume.work_experiences == []
    assert resume.education == []
    assert resume.skills == []
    sections = resume.to_dict()["sections"]
    assert sections["profile"] == ["Jane Doe", "Some free text about a career", "More free text"]
    assert sections["work"] == sections["education"] == sections["skills"] == []


def test_stages_can_run_separately():
    parser = ResumeParser(reader_config=ReaderConfig(column_aware=True))

    fragments = parser.read(RESUME_TEXT.encode("utf-8"))
    lines = parser.group_lines(fragments)
    sections = parser.group_sections(lines)

    assert sections["skills"].text == "Python, Go, Django, Docker, AWS, Leadership"
    assert parser.extract(sections).profile.name == "JANE DOE"


def test_check_modules_reports_stages_and_engines():
    status = check_modules()

    for name in ("text_reader", "line_grouper", "section_grouper", "skills_extractor"):
        assert status[name] is True
    for name in ("pdfplumber", "docx", "phonenumbers", "easyocr", "pdf2image"):
        assert isinstance(status[name], bool)


def test_check_modules_flags_a_stage_without_its_entry_point(monkeypatch):
    monkeypatch.setattr(lines, "group_lines", None)

    status = check_modules()

    assert status["line_grouper"] is False
    assert status["text_reader"] is True


def test_ensure_engine_fails_fast_without_pdfplumber(monkeypatch):
    monkeypatch.setattr(ingestion, "pdfplumber", None)
    with pytest.raises(ImportError):
        ensure_engine()


def _build_pdf(rows):
    content = "".join(
        f"BT /{font} {size} Tf 72 {y} Td ({text}) Tj ET\n" for font, size, y, text in rows
    ).encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R "
        b"/Resources << /Font << /F1 5 0 R /F2 6 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"endstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica-Bold >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref)
    return bytes(out)


def test_parse_generated_pdf():
    pytest.importorskip("pdfplumber")
    data = _build_pdf(
        [
            ("F2", 14, 720, "JOHN SMITH"),
            ("F1", 11, 700, "john.smith@example.com"),
            ("F2", 12, 670, "EXPERIENCE"),
            ("F1", 11, 650, "Software Engineer | Acme Inc. | 2019 - 2021"),
        ]
    )

    resume = parse_resume(data)

    assert resume.profile.name == "JOHN SMITH"
    assert resume.profile.email == "john.smith@example.com"
    assert resume.sections["work"].headings[0].is_bold
    assert [(entry.job_title, entry.company) for entry in resume.work_experiences] == [
        ("Software Engineer", "Acme Inc.")
    ]
    assert (resume.work_experiences[0].start_date, resume.work_experiences[0].end_date) == ("2019", "2021")
