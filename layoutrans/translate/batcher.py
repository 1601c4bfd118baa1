"""
Size-bounded batching with a strict alignment check.

Token texts are grouped into contiguous batches, each batch is joined with
newlines and sent to the translator in a single call, and the result is split
back into lines. The number of lines returned for a batch must equal the
number of texts sent; anything else raises AlignmentError instead of
shifting translations onto unrelated tokens.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from layoutrans.config import DEFAULT_BATCH_SIZE
from layoutrans.errors import AlignmentError
from layoutrans.models import TranslationBatch
from layoutrans.translate.base import Translator

logger = logging.getLogger(__name__)

_LINE_BREAKS = re.compile(r"\r\n|\r|\n")


def single_line(text: str) -> str:
    """Fold internal line breaks so a text occupies exactly one line."""
    return _LINE_BREAKS.sub(" ", text)


def make_batches(texts: Sequence[str], batch_size: int = DEFAULT_BATCH_SIZE) -> list[TranslationBatch]:
    """Partition texts into contiguous batches of at most batch_size entries."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    return [
        TranslationBatch(
            index=i,
            start=start,
            texts=tuple(single_line(t) for t in texts[start:start + batch_size]),
        )
        for i, start in enumerate(range(0, len(texts), batch_size))
    ]


class TranslationBatcher:
    """Translate an ordered list of texts while keeping index alignment.

    Usage:
        batcher = TranslationBatcher(translator, batch_size=1000)
        translated = batcher.translate(["Hello", "World"], "JA")
    """

    def __init__(self, translator: Translator, batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.translator = translator
        self.batch_size = batch_size

    def translate(self, texts: Sequence[str], target_lang: str) -> list[str]:
        """Translate texts, one output string per input text.

        Raises:
            TranslationServiceError: If any batch call fails
            AlignmentError: If a batch comes back with the wrong line count
        """
        batches = make_batches(texts, self.batch_size)
        logger.info(
            "Translating %d texts in %d batch(es) with %s",
            len(texts), len(batches), self.translator.name,
        )

        translated: list[str] = []
        for batch in batches:
            translated.extend(self._translate_batch(batch, target_lang))

        if len(translated) != len(texts):
            raise AlignmentError(len(batches) - 1, len(texts), len(translated))
        return translated

    def _translate_batch(self, batch: TranslationBatch, target_lang: str) -> list[str]:
        segments = self.translator.translate(batch.payload, target_lang)
        lines = "\n".join(segments).split("\n")
        if len(lines) != len(batch):
            logger.error(
                "Batch %d (tokens %d-%d) returned %d lines, expected %d",
                batch.index, batch.start, batch.stop - 1, len(lines), len(batch),
            )
            raise AlignmentError(batch.index, len(batch), len(lines))

        logger.debug("Batch %d: %d lines translated", batch.index, len(lines))
        return lines


def translate_texts(
    texts: Sequence[str],
    target_lang: str,
    translator: Translator,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> list[str]:
    """Convenience function wrapping TranslationBatcher."""
    return TranslationBatcher(translator, batch_size).translate(texts, target_lang)
