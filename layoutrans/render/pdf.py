"""
PDF recomposition with layout preservation.

This module rebuilds a translated PDF by:
1. Reopening the original PDF (images, vector graphics and layout untouched)
2. Painting an opaque cover over each original token
3. Drawing the translated text in the same place at the same height

All measuring and drawing uses one fixed font (a PyMuPDF ``fitz.Font``).
Cover width follows an explicit CoverPolicy:
- largest: cover the wider of the source and the translation (default)
- shrink: cover the source and scale the translation down to fit
- source: cover the source only; wider translations overflow the cover
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import fitz  # PyMuPDF

from layoutrans.config import BACKGROUND_COLOR, DEFAULT_FONT, TEXT_COLOR
from layoutrans.errors import DocumentRebuildError
from layoutrans.models import CompositionInstruction, CoverPolicy, PositionedToken, Rect

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """Configuration for PDF recomposition."""
    font_name: str = DEFAULT_FONT
    font_file: Optional[str] = None  # overrides font_name when set
    cover_policy: CoverPolicy = CoverPolicy.LARGEST
    min_font_size: float = 4.0  # floor for the shrink policy
    subset_fonts: bool = True  # embed only the glyphs actually drawn
    text_color: tuple = TEXT_COLOR
    background_color: tuple = BACKGROUND_COLOR

    def to_dict(self) -> dict:
        return {
            "font_name": self.font_name,
            "font_file": self.font_file,
            "cover_policy": CoverPolicy(self.cover_policy).value,
            "min_font_size": self.min_font_size,
            "subset_fonts": self.subset_fonts,
        }


class LayoutCompositor:
    """Cover original tokens and draw their translations.

    Usage:
        compositor = LayoutCompositor()
        output = compositor.compose(pdf_bytes, tokens, translations)
    """

    def __init__(self, config: Optional[RenderConfig] = None):
        self.config = config or RenderConfig()
        self._font: Optional[fitz.Font] = None
        self._stats = {"covered": 0, "drawn": 0, "skipped": 0}

    @property
    def font(self) -> "fitz.Font":
        if self._font is None:
            try:
                if self.config.font_file:
                    self._font = fitz.Font(fontfile=self.config.font_file)
                else:
                    self._font = fitz.Font(self.config.font_name)
            except Exception as exc:
                raise DocumentRebuildError(
                    f"font '{self.config.font_file or self.config.font_name}' is unavailable: {exc}"
                ) from exc
        return self._font

    @property
    def stats(self) -> dict:
        """Get composition statistics of the last compose() call."""
        return self._stats.copy()

    def text_width(self, text: str, size: float) -> float:
        """Rendered width of text at size using the fixed font."""
        if not text:
            return 0.0
        return self.font.text_length(text, fontsize=size)

    def plan(
        self,
        tokens: Sequence[PositionedToken],
        translations: Sequence[str],
    ) -> list[CompositionInstruction]:
        """Compute the cover and redraw for every token.

        Missing translations are treated as empty strings.

        Raises:
            DocumentRebuildError: If there are more translations than tokens
        """
        if len(translations) > len(tokens):
            raise DocumentRebuildError(
                f"{len(translations)} translations for {len(tokens)} tokens"
            )

        instructions = []
        for i, token in enumerate(tokens):
            if token.font_height <= 0:
                logger.debug("Token %d has no height, skipped", i)
                continue
            text = translations[i] if i < len(translations) else ""
            instructions.append(self._instruction(token, text or ""))
        return instructions

    def _instruction(self, token: PositionedToken, text: str) -> CompositionInstruction:
        height = token.font_height
        source_width = self.text_width(token.text, height)
        target_width = self.text_width(text, height)
        policy = CoverPolicy(self.config.cover_policy)

        size = height
        if policy is CoverPolicy.LARGEST:
            width = max(source_width, target_width)
        else:
            width = source_width
            if policy is CoverPolicy.SHRINK and target_width > source_width > 0:
                size = max(self.config.min_font_size, height * source_width / target_width)
                size = min(size, height)

        return CompositionInstruction(
            page_index=token.page_index,
            cover=Rect(token.origin_x, token.origin_y - height, width, height),
            text=text,
            font_size=size,
        )

    def compose(
        self,
        document: bytes,
        tokens: Sequence[PositionedToken],
        translations: Sequence[str],
    ) -> bytes:
        """Produce a new PDF with every token replaced by its translation.

        Raises:
            DocumentRebuildError: If the source cannot be reopened, a page
                index is out of range, or the output cannot be written
        """
        self._stats = {"covered": 0, "drawn": 0, "skipped": 0}
        instructions = self.plan(tokens, translations)
        self._stats["skipped"] = len(tokens) - len(instructions)

        try:
            doc = fitz.open(stream=document, filetype="pdf")
        except Exception as exc:
            raise DocumentRebuildError(f"source PDF could not be reopened: {exc}") from exc

        try:
            for ins in instructions:
                if not 0 <= ins.page_index < doc.page_count:
                    raise DocumentRebuildError(
                        f"page index {ins.page_index} out of range (document has {doc.page_count} pages)"
                    )

            pages: dict[int, fitz.Page] = {}
            for ins in instructions:
                page = pages.get(ins.page_index)
                if page is None:
                    page = pages[ins.page_index] = doc.load_page(ins.page_index)
                self._draw(page, ins)

            if self.config.subset_fonts and self._stats["drawn"]:
                doc.subset_fonts()
            output = doc.tobytes(garbage=4, deflate=True, no_new_id=True)
        except DocumentRebuildError:
            raise
        except Exception as exc:
            raise DocumentRebuildError(f"output PDF could not be written: {exc}") from exc
        finally:
            doc.close()

        logger.info(
            "Composed %d tokens (%d covered, %d drawn, %d skipped)",
            len(tokens), self._stats["covered"], self._stats["drawn"], self._stats["skipped"],
        )
        return output

    def _draw(self, page: "fitz.Page", ins: CompositionInstruction) -> None:
        cover = ins.cover
        if cover.width > 0:
            page.draw_rect(
                fitz.Rect(cover.x, cover.y, cover.x1, cover.y1),
                color=None,
                fill=self.config.background_color,
                width=0,
                overlay=True,
            )
            self._stats["covered"] += 1

        if ins.text:
            writer = fitz.TextWriter(page.rect)
            writer.append(ins.baseline, ins.text, font=self.font, fontsize=ins.font_size)
            writer.write_text(page, color=self.config.text_color)
            self._stats["drawn"] += 1


def compose_pdf(
    document: bytes,
    tokens: Sequence[PositionedToken],
    translations: Sequence[str],
    cover_policy: CoverPolicy | str = CoverPolicy.LARGEST,
) -> bytes:
    """Convenience function to recompose a translated PDF.

    Args:
        document: Original PDF bytes
        tokens: Tokens extracted from the original
        translations: Translated strings aligned with tokens
        cover_policy: "largest", "shrink" or "source"

    Returns:
        Bytes of the new PDF
    """
    config = RenderConfig(cover_policy=CoverPolicy(cover_policy))
    return LayoutCompositor(config).compose(document, tokens, translations)
