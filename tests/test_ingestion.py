import io
import threading
import zipfile

import pytest

import resume_layout.ingestion as ingestion
from resume_layout import parse_resume
from resume_layout.ingestion import (
    EngineSetup,
    ReaderConfig,
    detect_document_type,
    read_document,
    read_text_fragments,
    resolve_font_name,
)


class _FakePage:
    width = 612

    def __init__(self, words):
        self._words = words
        self.calls = []

    def extract_words(self, **kwargs):
        self.calls.append(kwargs)
        return list(self._words)


class _FakePdf:
    def __init__(self, pages):
        self.pages = pages

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class _FakePdfplumber:
    def __init__(self, pages=None, error=None):
        self.pages = pages or []
        self.error = error

    def open(self, stream):
        if self.error is not None:
            raise self.error
        return _FakePdf(self.pages)


def _run(text, x0, x1, top, bottom, fontname="ABCDEF+Helvetica"):
    return {"text": text, "x0": x0, "x1": x1, "top": top, "bottom": bottom, "fontname": fontname}


def _build_docx(paragraphs):
    docx = pytest.importorskip("docx")
    document = docx.Document()
    for text, bold in paragraphs:
        paragraph = document.add_paragraph()
        if text:
            run = paragraph.add_run(text)
            run.bold = bold
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def test_detect_document_type_from_magic_bytes():
    assert detect_document_type(b"%PDF-1.7\n...", "resume.txt") == ".pdf"
    assert detect_document_type("Jane Doe\nEngineer".encode("utf-8")) == ".txt"

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("word/document.xml", "<w:document/>")
    assert detect_document_type(buffer.getvalue()) == ".docx"


def test_detect_document_type_rejects_binary_noise():
    with pytest.raises(ValueError):
        detect_document_type(b"\xff\xfe\x00\x81\x92", "resume.doc")


def test_resolve_font_name_strips_subset_tag_and_caches():
    table = {}
    assert resolve_font_name("ABCDEF+Calibri-Bold", table) == "Calibri-Bold"
    assert table == {"ABCDEF+Calibri-Bold": "Calibri-Bold"}
    assert resolve_font_name("g_d0_f1", table) == "g_d0_f1"


def test_read_text_fragments_marks_every_line_end():
    fragments = read_text_fragments("JOHN SMITH\n\njohn@example.com\n".encode("utf-8"))

    assert [fragment.text for fragment in fragments] == ["JOHN SMITH", "", "john@example.com"]
    assert all(fragment.end_of_line for fragment in fragments)
    assert fragments[0].y < fragments[2].y


def test_read_document_accepts_bytes_file_objects_and_paths(tmp_path):
    payload = "Jane Doe\njane@example.com".encode("utf-8")
    path = tmp_path / "resume.txt"
    path.write_bytes(payload)

    from_bytes = read_document(payload)
    from_stream = read_document(io.BytesIO(payload))
    from_path = read_document(str(path))

    assert from_bytes == from_stream == from_path


def test_read_pdf_fragments_with_fake_engine(monkeypatch):
    page = _FakePage(
        [
            _run("JOHN SMITH", 72, 150, 60, 72, "ABCDEF+Calibri-Bold"),
            _run("   ", 150, 160, 60, 72),
            _run("Engineer", 200, 260, 61, 72),
            _run("Self-\u00ad\u2010taught", 72, 140, 80, 92),
            _run("Last", 72, 100, 100, 112),
        ]
    )
    monkeypatch.setattr(ingestion, "pdfplumber", _FakePdfplumber([page]))

    fragments = ingestion.read_pdf_fragments(b"%PDF-1.4", ReaderConfig())

    assert [fragment.text for fragment in fragments] == ["JOHN SMITH", "Engineer", "Self-taught", "Last"]
    assert fragments[0].font_name == "Calibri-Bold" and fragments[0].is_bold
    assert not fragments[0].end_of_line
    assert fragments[1].end_of_line
    assert fragments[-1].end_of_line
    assert fragments[0].y == 72 and fragments[0].width == 78
    assert page.calls[0]["keep_blank_chars"] is True
    assert page.calls[0]["extra_attrs"] == ["fontname", "size"]


def test_read_pdf_respects_max_pages_and_skips_empty_pages(monkeypatch):
    pages = [_FakePage([]), _FakePage([_run("Second", 72, 120, 60, 72)]), _FakePage([_run("Third", 72, 120, 60, 72)])]
    monkeypatch.setattr(ingestion, "pdfplumber", _FakePdfplumber(pages))

    fragments = ingestion.read_pdf_fragments(b"%PDF-1.4", ReaderConfig(max_pages=2, ocr_fallback=False))

    assert [(fragment.text, fragment.page) for fragment in fragments] == [("Second", 1)]


def test_pdf_decode_failure_raises_value_error(monkeypatch):
    monkeypatch.setattr(ingestion, "pdfplumber", _FakePdfplumber(error=RuntimeError("broken xref")))

    with pytest.raises(ValueError, match="Unable to decode") as excinfo:
        read_document(b"%PDF-1.7\n garbage")
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_real_engine_rejects_corrupt_pdf():
    pytest.importorskip("pdfplumber")
    with pytest.raises(ValueError):
        read_document(b"%PDF-1.7\n garbage")


def test_missing_engine_raises_import_error(monkeypatch):
    monkeypatch.setattr(ingestion, "pdfplumber", None)
    with pytest.raises(ImportError):
        read_document(b"%PDF-1.4")


def test_read_docx_fragments_marks_bold_runs_and_paragraph_breaks():
    data = _build_docx([("JANE DOE", True), ("", False), ("Software Engineer", False)])

    fragments = read_document(data)

    texts = [fragment.text for fragment in fragments]
    assert texts == ["JANE DOE", "", "Software Engineer"]
    assert fragments[0].is_bold
    assert not fragments[2].is_bold
    assert all(fragment.end_of_line for fragment in fragments)
    assert fragments[0].y < fragments[1].y < fragments[2].y


def test_read_docx_fragments_reads_tables_in_document_order():
    docx = pytest.importorskip("docx")
    document = docx.Document()
    document.add_paragraph("JANE DOE")
    table = document.add_table(rows=1, cols=2)
    table.cell(0, 0).text = "jane@example.com"
    table.cell(0, 1).text = "(415) 555-0100"
    document.add_paragraph("EXPERIENCE")
    buffer = io.BytesIO()
    document.save(buffer)

    fragments = read_document(buffer.getvalue())

    assert [fragment.text for fragment in fragments] == ["JANE DOE", "jane@example.com", "(415) 555-0100", "EXPERIENCE"]
    email, phone = fragments[1], fragments[2]
    assert email.y == phone.y and phone.x > email.x
    assert not email.end_of_line and phone.end_of_line

    resume = parse_resume(buffer.getvalue())
    assert resume.profile.name == "JANE DOE"
    assert resume.profile.email == "jane@example.com"
    assert "555-0100" in resume.profile.phone


def test_engine_setup_runs_once_across_threads():
    setup = EngineSetup()
    results = []

    def worker():
        results.append(setup.ensure(ReaderConfig()))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 1
    assert setup.configured
    assert setup.ensure(ReaderConfig()) is False


def test_ocr_reader_requires_easyocr(monkeypatch):
    monkeypatch.setattr(ingestion, "easyocr", None)
    with pytest.raises(ImportError):
        EngineSetup().ocr_reader("en")
