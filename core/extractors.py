import io
import logging
import threading
from pathlib import Path

import docx   # python-docx
import fitz   # PyMuPDF

from core.config import (MAX_FILE_BYTES, PDF_EXTENSIONS, PDF_MIME, TEXT_EXTENSIONS,
                         WORD_EXTENSIONS, WORD_MIMES)
from core.errors import ExtractionError, FileTooLargeError, UnsupportedFileTypeError
from core.models import DocumentKind, FileDescriptor

logger = logging.getLogger(__name__)

PAGE_PLACEHOLDER = "[Unable to extract text from this page]"


def get_file_extension(path: str) -> str:
    return Path(path).suffix.casefold()


class PdfDecoder:
    """
    Process-wide PyMuPDF access.

    MuPDF's global settings are applied once, on first use. PyMuPDF objects
    must not be used from several threads at the same time, so every decode
    goes through the same lock.
    """

    _instance: "PdfDecoder | None" = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._initialized = False
        self._init_lock = threading.Lock()
        self._decode_lock = threading.Lock()

    @classmethod
    def instance(cls) -> "PdfDecoder":
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @property
    def initialized(self) -> bool:
        return self._initialized

    def ensure_initialized(self) -> None:
        if self._initialized:
            return

        with self._init_lock:
            if self._initialized:
                return
            # Keep MuPDF's per-object warnings off stderr; failures still raise.
            fitz.TOOLS.mupdf_display_errors(False)
            self._initialized = True
            logger.debug("PyMuPDF %s initialized", fitz.VersionBind)

    def extract_text(self, data: bytes) -> str:
        self.ensure_initialized()

        with self._decode_lock:
            try:
                document = fitz.open(stream=data, filetype="pdf")
            except Exception as e:
                raise ExtractionError("Failed to extract text from PDF") from e

            if document.page_count == 0:
                document.close()
                raise ExtractionError("Failed to extract text from PDF")

            try:
                parts: list[str] = []
                for page_number in range(1, document.page_count + 1):
                    parts.append(self._extract_page(document, page_number))
                return "".join(parts)
            finally:
                document.close()

    @staticmethod
    def _extract_page(document: "fitz.Document", page_number: int) -> str:
        try:
            page = document.load_page(page_number - 1)
            page_text = page.get_text("text")
            field_values = [str(widget.field_value) for widget in page.widgets()
                            if widget.field_value not in (None, "", False)]
        except Exception as e:
            logger.warning("PDF page %d could not be read: %s", page_number, e)
            return f"Page {page_number}:\n{PAGE_PLACEHOLDER}\n\n"

        return f"Page {page_number}:\n{page_text}\n{' '.join(field_values)}\n\n"


def extract_pdf_text(data: bytes) -> str:
    return PdfDecoder.instance().extract_text(data)


def extract_word_text(data: bytes) -> str:
    try:
        document = docx.Document(io.BytesIO(data))
    except Exception as e:
        raise ExtractionError("Failed to extract text from Word document") from e

    parts = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            parts.append("\t".join(cell.text for cell in row.cells))

    return "\n".join(parts)


def extract_plaintext(data: bytes) -> str:
    return data.decode("utf-8-sig", errors="replace")


def classify(descriptor: FileDescriptor) -> DocumentKind:
    declared = (descriptor.declared_type or "").casefold()
    ext = get_file_extension(descriptor.name)

    if declared == PDF_MIME or ext in PDF_EXTENSIONS:
        return DocumentKind.PDF
    elif declared in WORD_MIMES or ext in WORD_EXTENSIONS:
        return DocumentKind.WORD
    elif "text" in declared or ext in TEXT_EXTENSIONS:
        return DocumentKind.TEXT
    else:
        return DocumentKind.UNSUPPORTED


def extract_text(descriptor: FileDescriptor, *, max_bytes: int = MAX_FILE_BYTES) -> str:
    """
    Turn one file into plain text.

    Raises:
        FileTooLargeError before anything is read when the file is over max_bytes
        UnsupportedFileTypeError when no decoder handles the file
        ExtractionError when a decoder fails
    """
    if descriptor.size > max_bytes:
        raise FileTooLargeError(descriptor.size, max_bytes)

    kind = classify(descriptor)
    if kind is DocumentKind.UNSUPPORTED:
        raise UnsupportedFileTypeError(descriptor.declared_type or "unknown")

    try:
        data = descriptor.read_bytes()
    except OSError as e:
        raise ExtractionError(f"Failed to read file: {e}") from e

    if kind is DocumentKind.PDF:
        return extract_pdf_text(data)
    elif kind is DocumentKind.WORD:
        return extract_word_text(data)
    else:
        return extract_plaintext(data)
