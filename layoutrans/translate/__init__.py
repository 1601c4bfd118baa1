"""Translation backends and order-preserving batching."""

from layoutrans.translate.base import Translator, DummyTranslator, create_translator
from layoutrans.translate.batcher import TranslationBatcher, make_batches, translate_texts

__all__ = [
    "Translator",
    "DummyTranslator",
    "create_translator",
    "TranslationBatcher",
    "make_batches",
    "translate_texts",
]
