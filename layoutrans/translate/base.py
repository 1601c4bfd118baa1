"""
Base translator interface and implementations.

This module defines:
- Abstract Translator interface that every backend implements
- DummyTranslator for testing and offline dry runs
- create_translator() factory used by the pipeline and CLI

Design Philosophy:
- Translators are injected collaborators: the pipeline never reads
  credentials or global settings, it only calls translate()
- A translator receives newline-delimited text and returns the translated
  segments in order; alignment is checked by the batcher, not here
- Transport failures surface as TranslationServiceError
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class Translator(ABC):
    """Abstract base class for all translation backends.

    Implementations must provide:
    - name: a short identifier used in logs
    - translate(): translate newline-delimited text into ordered segments
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the translator name (e.g., 'deepl', 'dummy-echo')."""
        pass

    @abstractmethod
    def translate(self, text: str, target_lang: str) -> list[str]:
        """Translate a block of newline-delimited text.

        Args:
            text: Source lines joined with "\\n"
            target_lang: Target language code (e.g., "JA", "FR")

        Returns:
            Translated segments in order. Segments may themselves contain
            line breaks; callers re-split on "\\n".

        Raises:
            TranslationServiceError: On network, auth or quota failures
        """
        pass


class DummyTranslator(Translator):
    """A dummy translator for testing.

    Each line is transformed independently, so line counts are preserved.

    Modes:
    - 'echo': Return the input unchanged
    - 'upper': Return uppercase version
    - 'prefix': Add a [LANG] prefix to non-empty lines
    - 'reverse': Reverse the text (for debugging)
    """

    MODES = ("echo", "upper", "prefix", "reverse")

    def __init__(self, mode: str = "prefix"):
        if mode not in self.MODES:
            raise ValueError(f"Unknown dummy mode: {mode}. Available: {', '.join(self.MODES)}")
        self.mode = mode
        self.calls: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return f"dummy-{self.mode}"

    def translate(self, text: str, target_lang: str) -> list[str]:
        self.calls.append((text, target_lang))
        return [self._convert(line, target_lang) for line in text.split("\n")]

    def _convert(self, line: str, target_lang: str) -> str:
        if self.mode == "echo":
            return line
        if self.mode == "upper":
            return line.upper()
        if self.mode == "reverse":
            return line[::-1]
        return f"[{target_lang}] {line}" if line.strip() else line


def create_translator(backend: str, **kwargs) -> Translator:
    """Factory function to create a translator by name.

    Args:
        backend: Translator backend name
        **kwargs: Backend-specific arguments

    Supported backends and aliases:
        - deepl: DeepL REST API (needs api_key)
        - dummy, echo, test: Offline test translator (mode=...)
    """
    backend_lower = backend.lower().replace("_", "-")

    if backend_lower in ("dummy", "echo", "test"):
        mode = kwargs.get("mode", "echo" if backend_lower == "echo" else "prefix")
        return DummyTranslator(mode=mode)

    elif backend_lower in ("deepl",):
        from layoutrans.translate.deepl import DeepLTranslator
        return DeepLTranslator(
            api_key=kwargs.get("api_key"),
            source_lang=kwargs.get("source_lang"),
            timeout=kwargs.get("timeout"),
            api_url=kwargs.get("api_url"),
        )

    else:
        available = ["deepl", "dummy", "echo", "test"]
        raise ValueError(
            f"Unknown translator backend: {backend}. "
            f"Available backends: {', '.join(available)}"
        )
