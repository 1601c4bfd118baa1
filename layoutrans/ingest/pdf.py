"""
PDF token extraction.

This module reads a PDF page by page and yields positioned text tokens in a
top-left coordinate space, ready for translation and redraw.

Approach:
1. PyMuPDF text trace (``Page.get_texttrace``) reports glyph runs in
   content-stream order, with font size, writing direction and the baseline
   origin of every glyph.
2. A trace span groups glyphs by font state only, so consecutive show
   operations (``Td``/``T*`` line moves, far-apart ``Tj``, large ``TJ``
   offsets) can share one span. Each span is split wherever the baseline
   changes or the pen jumps, and every piece becomes one token.
3. Each piece is turned into an AffineTransform in bottom-left PDF space and
   converted back to top-left page coordinates with
   ``origin_y = page_height - translate_y``.

Show operations with an empty string paint no glyphs, so they never reach
the trace and produce no token. Glyphs without a Unicode mapping still count
for position, which can leave a token with empty text.
"""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

import fitz  # PyMuPDF

from layoutrans.errors import DocumentParseError
from layoutrans.models import AffineTransform, PositionedToken

logger = logging.getLogger(__name__)

# Horizontal gap (in ems) past the previous glyph that starts a new token
GAP_TOLERANCE = 0.5
# Baseline shift or backward pen move (in ems) that starts a new token
LINE_TOLERANCE = 0.1


def _is_horizontal(span: dict) -> bool:
    cos, sin = span.get("dir", (1.0, 0.0))
    return cos > 0 and abs(sin) < 1e-3


def _breaks(prev: Sequence, char: Sequence, size: float) -> bool:
    (px, py), pbox = prev[2], prev[3]
    x, y = char[2]
    if abs(y - py) > LINE_TOLERANCE * size:
        return True
    if x < px - LINE_TOLERANCE * size:
        return True
    return x - max(pbox[2], px) > GAP_TOLERANCE * size


def split_runs(span: dict) -> list[tuple]:
    """Split a trace span into runs of contiguous glyphs on one baseline.

    Rotated spans are kept whole. A span without glyphs gives one empty run.
    """
    chars = tuple(span.get("chars") or ())
    if len(chars) < 2 or not _is_horizontal(span):
        return [chars]

    size = float(span.get("size", 0.0)) or 1.0
    runs = [[chars[0]]]
    for prev, char in zip(chars, chars[1:]):
        if _breaks(prev, char, size):
            runs.append([char])
        else:
            runs[-1].append(char)
    return [tuple(run) for run in runs]


def span_transform(span: dict, page_height: float, chars: Sequence | None = None) -> AffineTransform:
    """Build the bottom-left text matrix of a glyph run.

    PyMuPDF reports the span in top-left page space: ``dir`` is the
    writing direction, ``size`` the rendered font size, and each char's
    origin is a baseline point. Flipping y gives the PDF-space matrix.
    ``chars`` selects one run of the span; it defaults to all its glyphs.
    """
    size = float(span.get("size", 0.0))
    cos, sin = span.get("dir", (1.0, 0.0))
    if chars is None:
        chars = span.get("chars") or ()
    if chars:
        x, y = chars[0][2]
    else:
        x0, _, _, y1 = span.get("bbox", (0.0, 0.0, 0.0, 0.0))
        x, y = x0, y1
    return AffineTransform.from_sequence((
        size * cos, -size * sin, size * sin, size * cos, x, page_height - y,
    ))


def run_text(chars: Sequence) -> str:
    """Literal text of a glyph run, one character per mapped glyph."""
    return "".join(chr(c[0]) for c in chars if c[0] >= 0)


class TokenExtractor:
    """Extract ordered PositionedTokens from PDF bytes.

    Usage:
        extractor = TokenExtractor()
        tokens = extractor.extract(pdf_bytes)
    """

    def extract(self, document: bytes) -> tuple[PositionedToken, ...]:
        """Extract every token of every page.

        Raises:
            DocumentParseError: If the document or any page cannot be decoded.
        """
        doc = self._open(document)
        page_count = doc.page_count
        try:
            indexed: list[tuple[int, int, PositionedToken]] = []
            for page_index in range(page_count):
                for seq, token in enumerate(self._page_tokens(doc, page_index)):
                    indexed.append((page_index, seq, token))
        finally:
            doc.close()

        # Stable order on (page, emission order)
        indexed.sort(key=lambda item: (item[0], item[1]))
        tokens = tuple(token for _, _, token in indexed)
        logger.info("Extracted %d tokens from %d pages", len(tokens), page_count)
        return tokens

    def _open(self, document: bytes) -> "fitz.Document":
        if not document:
            raise DocumentParseError("document is empty")
        try:
            doc = fitz.open(stream=document, filetype="pdf")
        except Exception as exc:
            raise DocumentParseError(f"not a readable PDF: {exc}") from exc

        if doc.needs_pass:
            doc.close()
            raise DocumentParseError("document is encrypted")
        if doc.page_count == 0:
            doc.close()
            raise DocumentParseError("document has no pages")
        return doc

    def _page_tokens(self, doc: "fitz.Document", page_index: int) -> Iterator[PositionedToken]:
        try:
            page = doc.load_page(page_index)
            page_height = page.rect.height
            spans = page.get_texttrace()
        except Exception as exc:
            raise DocumentParseError(f"page {page_index} could not be decoded: {exc}") from exc

        logger.debug("Page %d: %d text runs", page_index, len(spans))
        for span in spans:
            for run in split_runs(span):
                transform = span_transform(span, page_height, run)
                yield PositionedToken.from_transform(
                    run_text(run), transform, page_height, page_index
                )


def extract_tokens(document: bytes) -> tuple[PositionedToken, ...]:
    """Convenience function to extract tokens from PDF bytes."""
    return TokenExtractor().extract(document)
