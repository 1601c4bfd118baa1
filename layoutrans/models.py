"""
Core data models for layoutrans.

This module defines the value types passed between the three phases of a
translation job:

- AffineTransform: a text-rendering matrix in bottom-left PDF space
- PositionedToken: one run of text at a top-left page position
- TranslationBatch: a bounded group of token texts sent in one call
- CompositionInstruction: the cover and redraw for a single token

All of them are immutable. A job owns its tokens exclusively and none of
these objects outlive it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Sequence


@dataclass(frozen=True)
class AffineTransform:
    """A 2x3 affine matrix in PDF order ``a b c d e f``.

    The matrix maps text space to page space with the origin at the
    bottom-left corner and y increasing upward.
    """
    scale_x: float
    shear_y: float
    shear_x: float
    scale_y: float
    translate_x: float
    translate_y: float

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "AffineTransform":
        """Build a transform from a raw ``[a, b, c, d, e, f]`` array."""
        if len(values) != 6:
            raise ValueError(f"affine transform needs 6 components, got {len(values)}")
        return cls(*(float(v) for v in values))

    @property
    def font_height(self) -> float:
        """Rendered glyph height: magnitude of the vertical scaling vector."""
        return math.hypot(self.shear_x, self.scale_y)

    def to_top_left(self, page_height: float) -> tuple[float, float]:
        """Convert the translation point to top-left page coordinates."""
        return self.translate_x, page_height - self.translate_y


@dataclass(frozen=True)
class PositionedToken:
    """One unit of extractable text.

    Attributes:
        text: Literal string content (may be empty or whitespace-only)
        origin_x: Baseline x position
        origin_y: Baseline y position, top-left origin (y grows downward)
        font_height: Effective rendered glyph height
        page_index: Zero-based page index
    """
    text: str
    origin_x: float
    origin_y: float
    font_height: float
    page_index: int

    @classmethod
    def from_transform(
        cls,
        text: str,
        transform: AffineTransform,
        page_height: float,
        page_index: int,
    ) -> "PositionedToken":
        x, y = transform.to_top_left(page_height)
        return cls(
            text=text,
            origin_x=x,
            origin_y=y,
            font_height=transform.font_height,
            page_index=page_index,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TranslationBatch:
    """A contiguous slice of token texts submitted in a single call."""
    index: int
    start: int
    texts: tuple[str, ...]

    @property
    def stop(self) -> int:
        return self.start + len(self.texts)

    @property
    def payload(self) -> str:
        return "\n".join(self.texts)

    def __len__(self) -> int:
        return len(self.texts)


class CoverPolicy(str, Enum):
    """How the cover rectangle and replacement size are chosen.

    - LARGEST: cover the wider of source and translated text
    - SHRINK: cover the source width and shrink the replacement to fit
    - SOURCE: cover the source width only; the replacement may overflow
    """
    LARGEST = "largest"
    SHRINK = "shrink"
    SOURCE = "source"


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in top-left page coordinates."""
    x: float
    y: float
    width: float
    height: float

    @property
    def x1(self) -> float:
        return self.x + self.width

    @property
    def y1(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class CompositionInstruction:
    """Cover rectangle plus replacement draw for one token."""
    page_index: int
    cover: Rect
    text: str
    font_size: float

    @property
    def anchor(self) -> tuple[float, float]:
        """Top-left corner of the replacement box."""
        return self.cover.x, self.cover.y

    @property
    def baseline(self) -> tuple[float, float]:
        """Baseline start point of the replacement text."""
        return self.cover.x, self.cover.y1
