"""Document ingestion: decode a resume into positioned text fragments."""

from __future__ import annotations

import io
import logging
import os
import re
import threading
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Tuple, Union

try:  # pragma: no cover - optional dependency
    import pdfplumber  # type: ignore
except Exception:  # pragma: no cover
    pdfplumber = None

try:  # pragma: no cover - optional dependency
    import docx  # python-docx
    from docx.oxml.ns import qn
    from docx.table import Table
    from docx.text.paragraph import Paragraph
except Exception:  # pragma: no cover
    docx = None

try:  # pragma: no cover - optional dependency
    from pdf2image import convert_from_bytes  # type: ignore
except Exception:  # pragma: no cover
    convert_from_bytes = None

try:  # pragma: no cover - optional dependency
    import easyocr
except Exception:  # pragma: no cover
    easyocr = None

from .types import TextFragment

LOGGER = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".pdf", ".docx", ".txt"}
ENGINE_LOGGERS = ("pdfminer", "pdfplumber")
SUBSET_PREFIX = re.compile(r"^[A-Z]{6}\+")
BROKEN_HYPHEN = "-\u00ad\u2010"

# Synthetic geometry for formats without absolute positioning.
LINE_HEIGHT = 14.0
CHAR_WIDTH = 6.0
LEFT_MARGIN = 72.0
# Horizontal offset between neighbouring DOCX table cells.
CELL_WIDTH = 180.0

DocumentSource = Union[bytes, bytearray, memoryview, BinaryIO, str, Path]


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class ReaderConfig:
    """Configuration options for the text reader."""

    max_pages: Optional[int] = None
    ocr_fallback: bool = _env_flag("RESUME_OCR_FALLBACK")
    ocr_language: str = "en"
    column_aware: bool = False
    silence_engine_logs: bool = True


class EngineSetup:
    """One-time, thread-safe configuration of the extraction engine.

    The pdfminer loggers are quieted once per process and OCR readers are
    built at most once per language.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._configured = False
        self._ocr_readers: Dict[str, Any] = {}

    @property
    def configured(self) -> bool:
        return self._configured

    def ensure(self, config: ReaderConfig) -> bool:
        """Configure the engine; return True only for the call that did it."""

        if self._configured:
            return False
        with self._lock:
            if self._configured:
                return False
            if config.silence_engine_logs:
                for name in ENGINE_LOGGERS:
                    logging.getLogger(name).setLevel(logging.ERROR)
            self._configured = True
        LOGGER.debug("Configured PDF extraction engine")
        return True

    def ocr_reader(self, language: str) -> Any:
        if easyocr is None:
            raise ImportError("easyocr is required for OCR on scanned PDFs")
        with self._lock:
            reader = self._ocr_readers.get(language)
            if reader is None:
                LOGGER.info("Loading OCR reader for language %s", language)
                reader = easyocr.Reader([language], gpu=False)
                self._ocr_readers[language] = reader
        return reader


ENGINE_SETUP = EngineSetup()


def read_source_bytes(source: DocumentSource) -> Tuple[bytes, Optional[str]]:
    """Return the raw bytes of *source* and a file name hint when known."""

    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source), None
    if isinstance(source, (str, Path)):
        path = Path(source).expanduser()
        return path.read_bytes(), path.name
    if hasattr(source, "read"):
        data = source.read()
        if isinstance(data, str):
            data = data.encode("utf-8")
        return bytes(data), getattr(source, "name", None)
    raise TypeError(f"Unsupported document source: {type(source).__name__}")


def detect_document_type(data: bytes, filename: Optional[str] = None) -> str:
    """Return the canonical extension for *data*.

    Magic bytes win over the file name; plain UTF-8 text is accepted last.

    Raises:
        ValueError: If the document type is not supported.
    """

    if b"%PDF-" in data[:1024]:
        return ".pdf"
    if data[:2] == b"PK":
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                if "word/document.xml" in archive.namelist():
                    return ".docx"
        except zipfile.BadZipFile:
            pass
    extension = Path(filename).suffix.lower() if filename else ""
    if extension in SUPPORTED_EXTENSIONS:
        return extension
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        raise ValueError(f"Unsupported document type: {extension or 'unknown'}") from None
    return ".txt"


def resolve_font_name(alias: str, font_table: Dict[str, str]) -> str:
    """Map an engine font reference to its display name.

    Subset fonts carry a six letter tag (``ABCDEF+Calibri-Bold``); the tag is
    dropped. Results are cached in the per-page *font_table*.
    """

    if alias in font_table:
        return font_table[alias]
    resolved = SUBSET_PREFIX.sub("", alias or "")
    if not resolved:
        LOGGER.debug("Could not resolve font %r; keeping alias", alias)
        resolved = alias or ""
    font_table[alias] = resolved
    return resolved


def repair_text(text: str) -> str:
    return text.replace(BROKEN_HYPHEN, "-")


def _keep_fragment(fragment: TextFragment) -> bool:
    return fragment.end_of_line or not fragment.is_blank


def _fragments_from_runs(runs: List[Dict[str, Any]], page: int) -> List[TextFragment]:
    """Convert word-like runs (pdfplumber ``extract_words`` shape) to fragments.

    A run ends its line when it is the last on the page or when the next run
    in flow order moves back to the left or drops below it.
    """

    font_table: Dict[str, str] = {}
    fragments: List[TextFragment] = []
    for index, run in enumerate(runs):
        x0, x1 = float(run["x0"]), float(run["x1"])
        top, bottom = float(run["top"]), float(run["bottom"])
        following = runs[index + 1] if index + 1 < len(runs) else None
        end_of_line = (
            following is None
            or float(following["x0"]) < x0
            or float(following["top"]) >= bottom
        )
        fragment = TextFragment(
            text=repair_text(str(run.get("text", ""))),
            x=x0,
            y=bottom,
            width=x1 - x0,
            height=bottom - top,
            font_name=resolve_font_name(str(run.get("fontname") or ""), font_table),
            end_of_line=end_of_line,
            page=page,
        )
        if _keep_fragment(fragment):
            fragments.append(fragment)
    return fragments


def _ocr_page_runs(data: bytes, page_index: int, page_width: float, config: ReaderConfig) -> List[Dict[str, Any]]:
    if convert_from_bytes is None:
        raise ImportError("pdf2image is required to OCR scanned PDFs")
    reader = ENGINE_SETUP.ocr_reader(config.ocr_language)
    runs: List[Dict[str, Any]] = []
    for image in convert_from_bytes(data, first_page=page_index + 1, last_page=page_index + 1):
        scale = page_width / image.width if image.width else 1.0
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        image.close()
        for bbox, text, _confidence in reader.readtext(buffer.getvalue(), detail=1, paragraph=False):
            xs = [point[0] for point in bbox]
            ys = [point[1] for point in bbox]
            runs.append(
                {
                    "text": text,
                    "x0": min(xs) * scale,
                    "x1": max(xs) * scale,
                    "top": min(ys) * scale,
                    "bottom": max(ys) * scale,
                    "fontname": "",
                }
            )
    return runs


def read_pdf_fragments(data: bytes, config: Optional[ReaderConfig] = None) -> List[TextFragment]:
    """Extract fragments from a PDF using pdfplumber.

    Pages without selectable text are OCRed when ``ocr_fallback`` is enabled
    and skipped otherwise.
    """

    if pdfplumber is None:
        raise ImportError("pdfplumber is required to parse PDF files")
    config = config or ReaderConfig()
    ENGINE_SETUP.ensure(config)

    pages: List[Tuple[int, float, List[Dict[str, Any]]]] = []
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for page_index, page in enumerate(pdf.pages):
                if config.max_pages and page_index >= config.max_pages:
                    break
                words = page.extract_words(
                    keep_blank_chars=True,
                    use_text_flow=True,
                    extra_attrs=["fontname", "size"],
                )
                pages.append((page_index, float(page.width or 0), words))
    except Exception as error:
        LOGGER.error("Failed to decode PDF document: %s", error)
        raise ValueError(f"Unable to decode PDF document: {error}") from error

    fragments: List[TextFragment] = []
    for page_index, page_width, words in pages:
        if not words and config.ocr_fallback:
            LOGGER.info("No selectable text on page %s; running OCR", page_index + 1)
            words = _ocr_page_runs(data, page_index, page_width, config)
        elif not words:
            LOGGER.warning("No selectable text on page %s; skipping", page_index + 1)
        fragments.extend(_fragments_from_runs(words, page_index))
    LOGGER.debug("Read %s fragments from %s PDF pages", len(fragments), len(pages))
    return fragments


def _docx_font_name(run: Any, paragraph: Any) -> str:
    style = paragraph.style
    style_name = (getattr(style, "name", "") or "").lower()
    base = run.font.name or (style.font.name if style is not None else None) or "Default"
    bold = run.bold
    if bold is None and style is not None:
        bold = style.font.bold
    if bold is None:
        bold = style_name.startswith(("heading", "title"))
    return f"{base}-Bold" if bold else base


def _docx_blocks(document: Any) -> Iterator[Any]:
    """Yield top-level paragraphs and tables in document order."""

    for child in document.element.body.iterchildren():
        if child.tag == qn("w:p"):
            yield Paragraph(child, document)
        elif child.tag == qn("w:tbl"):
            yield Table(child, document)


def _paragraph_rows(paragraph: Any) -> List[List[Tuple[str, str]]]:
    """Split a paragraph into rows of ``(text, font_name)`` runs at line breaks."""

    rows: List[List[Tuple[str, str]]] = [[]]
    for run in paragraph.runs:
        font_name = _docx_font_name(run, paragraph)
        pieces = run.text.replace("\r", "\n").replace("\v", "\n").split("\n")
        for piece_index, piece in enumerate(pieces):
            if piece_index > 0:
                rows.append([])
            if piece:
                rows[-1].append((piece, font_name))
    return rows


def _layout_docx_runs(runs: List[Tuple[str, str]], x: float, row: int) -> List[TextFragment]:
    laid_out = []
    for text, font_name in runs:
        width = len(text) * CHAR_WIDTH
        laid_out.append(
            TextFragment(
                text=text,
                x=x,
                y=row * LINE_HEIGHT,
                width=width,
                height=LINE_HEIGHT,
                font_name=font_name,
            )
        )
        x += width
    return laid_out


def _table_rows(table: Any) -> Iterator[List[List[List[Tuple[str, str]]]]]:
    """Yield, per table row, the paragraph rows of each distinct cell."""

    for table_row in table.rows:
        seen = set()
        cells = []
        for cell in table_row.cells:
            # Merged cells repeat across the columns they span.
            if cell._tc in seen:
                continue
            seen.add(cell._tc)
            cells.append([runs for paragraph in cell.paragraphs for runs in _paragraph_rows(paragraph)])
        yield cells


def _cell_starts(cells: List[List[List[Tuple[str, str]]]]) -> List[float]:
    """Left edge of each cell: at least ``CELL_WIDTH`` apart, never overlapping."""

    starts = []
    x = LEFT_MARGIN
    for cell_rows in cells:
        starts.append(x)
        widest = max((sum(len(text) for text, _ in runs) for runs in cell_rows), default=0) * CHAR_WIDTH
        x += max(CELL_WIDTH, widest + 2 * CHAR_WIDTH)
    return starts


def read_docx_fragments(data: bytes, config: Optional[ReaderConfig] = None) -> List[TextFragment]:
    """Extract fragments from a DOCX file using python-docx.

    DOCX does not expose absolute positioning, so each paragraph line gets a
    synthetic row and runs are laid out by character count. Body paragraphs
    and tables are read in document order; the cells of a table row share
    synthetic rows and sit side by side, at least ``CELL_WIDTH`` apart.
    """

    if docx is None:
        raise ImportError("python-docx is required to parse DOCX files")
    try:
        document = docx.Document(io.BytesIO(data))  # type: ignore
    except Exception as error:
        LOGGER.error("Failed to decode DOCX document: %s", error)
        raise ValueError(f"Unable to decode DOCX document: {error}") from error

    fragments: List[TextFragment] = []
    row = 0
    tables = 0
    for block in _docx_blocks(document):
        if isinstance(block, Paragraph):
            for runs in _paragraph_rows(block):
                row += 1
                fragments.extend(_close_docx_line(_layout_docx_runs(runs, LEFT_MARGIN, row), row))
            continue
        tables += 1
        for cells in _table_rows(block):
            starts = _cell_starts(cells)
            height = max((len(cell_rows) for cell_rows in cells), default=0)
            for offset in range(height):
                row += 1
                line: List[TextFragment] = []
                for start, cell_rows in zip(starts, cells):
                    if offset < len(cell_rows):
                        line.extend(_layout_docx_runs(cell_rows[offset], start, row))
                fragments.extend(_close_docx_line(line, row))
    fragments = [fragment for fragment in fragments if _keep_fragment(fragment)]
    LOGGER.debug("Read %s fragments from DOCX (%s tables)", len(fragments), tables)
    return fragments


def _close_docx_line(line: List[TextFragment], row: int) -> List[TextFragment]:
    if not line:
        return [TextFragment(text="", x=LEFT_MARGIN, y=row * LINE_HEIGHT, height=LINE_HEIGHT, end_of_line=True)]
    last = line[-1]
    line[-1] = TextFragment(
        text=last.text,
        x=last.x,
        y=last.y,
        width=last.width,
        height=last.height,
        font_name=last.font_name,
        end_of_line=True,
        page=last.page,
    )
    return line


def read_text_fragments(data: bytes, config: Optional[ReaderConfig] = None) -> List[TextFragment]:
    """Treat every line of a UTF-8 text file as one fragment."""

    text = data.decode("utf-8-sig", errors="replace")
    fragments: List[TextFragment] = []
    for row, raw_line in enumerate(text.splitlines(), start=1):
        line = repair_text(raw_line.rstrip())
        fragments.append(
            TextFragment(
                text=line,
                x=LEFT_MARGIN + (len(line) - len(line.lstrip())) * CHAR_WIDTH,
                y=row * LINE_HEIGHT,
                width=len(line.strip()) * CHAR_WIDTH,
                height=LINE_HEIGHT,
                end_of_line=True,
            )
        )
    return fragments


READERS = {
    ".pdf": read_pdf_fragments,
    ".docx": read_docx_fragments,
    ".txt": read_text_fragments,
}


def read_document(
    source: DocumentSource,
    config: Optional[ReaderConfig] = None,
    filename: Optional[str] = None,
) -> List[TextFragment]:
    """Decode *source* into an ordered list of text fragments."""

    if config is None:
        config = ReaderConfig()
    data, name_hint = read_source_bytes(source)
    document_type = detect_document_type(data, filename or name_hint)
    LOGGER.debug("Detected %s document (%s bytes)", document_type, len(data))
    return READERS[document_type](data, config)


__all__ = [
    "ENGINE_SETUP",
    "EngineSetup",
    "ReaderConfig",
    "detect_document_type",
    "read_docx_fragments",
    "read_document",
    "read_pdf_fragments",
    "read_source_bytes",
    "read_text_fragments",
    "repair_text",
    "resolve_font_name",
]
