"""Token extraction from source documents."""

from layoutrans.ingest.pdf import TokenExtractor, extract_tokens

__all__ = ["TokenExtractor", "extract_tokens"]
