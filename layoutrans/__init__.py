"""
layoutrans: layout-preserving PDF translation.

Every text run of a PDF is extracted with its position and scale,
translated in order-preserving batches, and redrawn in place over an
opaque cover, leaving images and vector graphics untouched.

License: MIT
"""

__version__ = "0.1.0"

from layoutrans.models import AffineTransform, PositionedToken, CoverPolicy
from layoutrans.pipeline import TranslationPipeline, PipelineConfig, translate_document

__all__ = [
    "AffineTransform",
    "PositionedToken",
    "CoverPolicy",
    "TranslationPipeline",
    "PipelineConfig",
    "translate_document",
]
