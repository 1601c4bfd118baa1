"""
DeepL translation backend.

Sends one form-encoded POST per call to the DeepL v2 REST API and returns
the translated segments in order. Keys ending in ``:fx`` belong to the free
plan and are routed to the free endpoint.

Usage:
    translator = DeepLTranslator(api_key="...:fx")
    lines = translator.translate("Hello\\nWorld", "JA")
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from layoutrans.config import DEFAULT_TIMEOUT
from layoutrans.errors import TranslationServiceError
from layoutrans.translate.base import Translator

logger = logging.getLogger(__name__)

FREE_API_URL = "https://api-free.deepl.com/v2/translate"
PRO_API_URL = "https://api.deepl.com/v2/translate"

# DeepL status codes with a specific meaning
STATUS_MESSAGES = {
    400: "bad request",
    403: "authorization failed, check the API key",
    413: "request too large",
    429: "too many requests",
    456: "quota exceeded",
}


class DeepLTranslator(Translator):
    """DeepL REST API translator.

    The API key is passed in by the caller; this class never looks it up.
    """

    def __init__(
        self,
        api_key: Optional[str],
        source_lang: Optional[str] = None,
        timeout: Optional[float] = None,
        api_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise TranslationServiceError("DeepL API key is missing")
        self.api_key = api_key
        self.source_lang = source_lang
        self.timeout = timeout or DEFAULT_TIMEOUT
        self.api_url = api_url or (FREE_API_URL if api_key.endswith(":fx") else PRO_API_URL)
        self.session = session or requests.Session()

    @property
    def name(self) -> str:
        return "deepl"

    def translate(self, text: str, target_lang: str) -> list[str]:
        data = {
            "text": text,
            "target_lang": target_lang.upper(),
            "preserve_formatting": "1",
        }
        if self.source_lang:
            data["source_lang"] = self.source_lang.upper()

        headers = {"Authorization": f"DeepL-Auth-Key {self.api_key}"}

        try:
            response = self.session.post(
                self.api_url,
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TranslationServiceError(f"DeepL request failed: {e}") from e

        if response.status_code != 200:
            reason = STATUS_MESSAGES.get(response.status_code, response.reason or "error")
            raise TranslationServiceError(
                f"DeepL returned HTTP {response.status_code}: {reason}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
            translations = [t["text"] for t in payload["translations"]]
        except (ValueError, KeyError, TypeError) as e:
            raise TranslationServiceError(f"Malformed DeepL response: {e}") from e

        logger.debug("DeepL returned %d segment(s) for %d chars", len(translations), len(text))
        return translations
