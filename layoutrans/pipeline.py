"""
Main translation pipeline for layoutrans.

This module runs one translation job end to end:
1. Extract positioned tokens from the source PDF
2. Translate token texts in size-bounded, order-preserving batches
3. Recompose the PDF with each token covered and redrawn

Design Philosophy:
- Phases run strictly in sequence; each one is atomic
- The translator is injected; the pipeline never looks up credentials
- Progress callbacks report coarse phase progress for CLI integration
- A job may be cancelled between phases, never in the middle of one
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from layoutrans.config import DEFAULT_BATCH_SIZE, DEFAULT_TARGET_LANG
from layoutrans.errors import JobCancelledError
from layoutrans.ingest.pdf import TokenExtractor
from layoutrans.models import PositionedToken
from layoutrans.render.pdf import LayoutCompositor, RenderConfig
from layoutrans.translate.base import Translator, create_translator
from layoutrans.translate.batcher import TranslationBatcher

logger = logging.getLogger(__name__)

# Type alias for progress callbacks
ProgressCallback = Callable[[str, float], None]

# Coarse progress reported at each phase boundary
PROGRESS_STARTED = 0.1
PROGRESS_EXTRACTED = 0.4
PROGRESS_TRANSLATED = 0.7
PROGRESS_COMPOSED = 1.0


@dataclass
class PipelineConfig:
    """Configuration for a translation job."""
    target_lang: str = DEFAULT_TARGET_LANG
    translator_backend: str = "dummy"  # 'dummy', 'deepl'
    translator_kwargs: dict = field(default_factory=dict)
    batch_size: int = DEFAULT_BATCH_SIZE
    render: RenderConfig = field(default_factory=RenderConfig)

    def to_dict(self) -> dict:
        """Serialize config for logging/debugging."""
        return {
            "target_lang": self.target_lang,
            "translator_backend": self.translator_backend,
            "batch_size": self.batch_size,
            "render": self.render.to_dict(),
        }


@dataclass
class PipelineResult:
    """Output of a successful job plus what it was built from."""
    document: bytes
    tokens: tuple[PositionedToken, ...]
    translations: list[str]
    stats: dict = field(default_factory=dict)


class TranslationPipeline:
    """Run extract → translate → recompose for one document.

    Usage:
        pipeline = TranslationPipeline(translator=DeepLTranslator(api_key=key))
        translated_pdf = pipeline.translate(pdf_bytes, "JA")
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        translator: Translator | None = None,
        progress_callback: ProgressCallback | None = None,
        should_cancel: Callable[[], bool] | None = None,
    ):
        self.config = config or PipelineConfig()
        self.translator = translator or create_translator(
            self.config.translator_backend, **self.config.translator_kwargs
        )
        self.progress_callback = progress_callback or (lambda msg, pct: None)
        self.should_cancel = should_cancel or (lambda: False)

        self.extractor = TokenExtractor()
        self.batcher = TranslationBatcher(self.translator, self.config.batch_size)
        self.compositor = LayoutCompositor(self.config.render)

    def translate(self, document: bytes, target_lang: str | None = None) -> bytes:
        """Translate a PDF and return the new PDF bytes."""
        return self.run(document, target_lang).document

    def run(self, document: bytes, target_lang: str | None = None) -> PipelineResult:
        """Run the full job and keep intermediate results.

        Raises:
            DocumentParseError, TranslationServiceError, AlignmentError,
            DocumentRebuildError, JobCancelledError
        """
        target_lang = target_lang or self.config.target_lang
        logger.info("Starting job: %s", self.config.to_dict() | {"target_lang": target_lang})
        self.progress_callback("Extracting text...", PROGRESS_STARTED)

        tokens = self.extractor.extract(document)
        self.progress_callback(f"Extracted {len(tokens)} tokens", PROGRESS_EXTRACTED)
        self._check_cancelled("extract")

        translations = self.batcher.translate([t.text for t in tokens], target_lang)
        self.progress_callback(f"Translated {len(translations)} tokens", PROGRESS_TRANSLATED)
        self._check_cancelled("translate")

        output = self.compositor.compose(document, tokens, translations)
        self.progress_callback("Composition complete", PROGRESS_COMPOSED)

        stats = {
            "tokens": len(tokens),
            "pages": len({t.page_index for t in tokens}),
            "batches": -(-len(tokens) // self.config.batch_size),
            **self.compositor.stats,
        }
        logger.info("Job complete: %s", stats)
        return PipelineResult(
            document=output,
            tokens=tokens,
            translations=translations,
            stats=stats,
        )

    def _check_cancelled(self, phase: str) -> None:
        if self.should_cancel():
            logger.info("Job cancelled after %s phase", phase)
            raise JobCancelledError(f"cancelled after {phase} phase", phase=phase)


def translate_document(
    document: bytes,
    target_lang: str = DEFAULT_TARGET_LANG,
    translator: Translator | None = None,
    progress_callback: Optional[ProgressCallback] = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> bytes:
    """Job entry point: translate PDF bytes into new PDF bytes.

    Example:
        >>> output = translate_document(pdf_bytes, "JA", translator=DummyTranslator())
    """
    config = PipelineConfig(target_lang=target_lang, batch_size=batch_size)
    pipeline = TranslationPipeline(config, translator=translator, progress_callback=progress_callback)
    return pipeline.translate(document)


def translate_pdf(
    input_path: str | Path,
    output_path: str | Path,
    target_lang: str = DEFAULT_TARGET_LANG,
    translator: Translator | None = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> Path:
    """Translate a PDF file on disk and write the result.

    Returns:
        Path to the written PDF
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    if not input_path.exists():
        raise FileNotFoundError(f"Source PDF not found: {input_path}")

    output = translate_document(
        input_path.read_bytes(),
        target_lang,
        translator=translator,
        progress_callback=progress_callback,
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(output)
    return output_path
