import io
import os

import pytest


@pytest.fixture
def pdf_bytes():
    fitz = pytest.importorskip("fitz")

    def _build(*pages: str) -> bytes:
        document = fitz.open()
        for text in pages:
            page = document.new_page()
            page.insert_text((72, 72), text)
        data = document.tobytes()
        document.close()
        return data

    return _build


@pytest.fixture
def docx_bytes():
    docx = pytest.importorskip("docx")

    def _build(*paragraphs: str, table: list[list[str]] | None = None) -> bytes:
        document = docx.Document()
        for text in paragraphs:
            document.add_paragraph(text)
        if table:
            grid = document.add_table(rows=len(table), cols=len(table[0]))
            for r, row in enumerate(table):
                for c, value in enumerate(row):
                    grid.cell(r, c).text = value
        buffer = io.BytesIO()
        document.save(buffer)
        return buffer.getvalue()

    return _build


@pytest.fixture(scope="session")
def qt_app():
    QtWidgets = pytest.importorskip("PyQt6.QtWidgets")
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
