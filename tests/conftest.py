"""
Shared fixtures: PDFs are generated on the fly with PyMuPDF so the tests
need no sample files.
"""

import pytest
import fitz  # PyMuPDF

from layoutrans.translate.base import Translator

LETTER = (612, 792)


def make_pdf(pages):
    """Build PDF bytes from a list of pages.

    Each page is a list of (x, y, text, fontsize) tuples drawn in order with
    Helvetica; (x, y) is the baseline point in top-left coordinates.
    """
    doc = fitz.open()
    for runs in pages:
        page = doc.new_page(width=LETTER[0], height=LETTER[1])
        for x, y, text, size in runs:
            page.insert_text((x, y), text, fontsize=size, fontname="helv")
    data = doc.tobytes()
    doc.close()
    return data


def make_stream_pdf(content):
    """Build a one-page Letter PDF whose content stream is exactly content.

    The page gets a Helvetica resource named /helv, so content can use
    several show operations inside one BT block, which insert_text never does.
    """
    doc = fitz.open()
    page = doc.new_page(width=LETTER[0], height=LETTER[1])
    page.insert_text((0, 0), "x", fontname="helv")
    xrefs = page.get_contents()
    doc.update_stream(xrefs[0], content.encode("latin-1"))
    for xref in xrefs[1:]:
        doc.update_stream(xref, b"")
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def hello_pdf():
    """One Letter page with "Hello" at baseline (10, 700), size 12."""
    return make_pdf([[(10, 700, "Hello", 12)]])


@pytest.fixture
def multi_page_pdf():
    return make_pdf([
        [(72, 700, "Bottom line", 11), (72, 100, "Top line", 18)],
        [(50, 400, "Second page", 14)],
    ])


class RecordingTranslator(Translator):
    """Translator stub that records calls and maps each line."""

    def __init__(self, convert=None):
        self.calls = []
        self.convert = convert or (lambda line, call: line)

    @property
    def name(self):
        return "recording"

    def translate(self, text, target_lang):
        call = len(self.calls)
        self.calls.append((text, target_lang))
        return [self.convert(line, call) for line in text.split("\n")]


@pytest.fixture
def recording_translator():
    return RecordingTranslator()


@pytest.fixture
def pdf_factory():
    """Return the make_pdf builder for tests that need custom layouts."""
    return make_pdf


@pytest.fixture
def stream_pdf_factory():
    """Return the raw content-stream builder."""
    return make_stream_pdf


@pytest.fixture
def translator_factory():
    """Build RecordingTranslators with a custom per-line conversion."""
    return RecordingTranslator
