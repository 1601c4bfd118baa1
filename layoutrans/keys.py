"""
API key management for layoutrans.

Keys are looked up in this order:
1. Environment variables (preferred for CI/production)
2. OS keychain via keyring (secure local storage)
3. Local config file (~/.layoutrans/keys.json)

Only the CLI reads keys; the pipeline receives an already configured
translator.

Usage:
    from layoutrans.keys import KeyManager

    km = KeyManager()
    km.set_key("deepl", "...:fx")
    key = km.get_key("deepl")
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from layoutrans.config import APP_NAME, KEYS_FILE

logger = logging.getLogger(__name__)

# Supported services and their env var names
SERVICES = {
    "deepl": "DEEPL_API_KEY",
}


@dataclass
class KeyInfo:
    """Information about an API key."""
    service: str
    is_set: bool
    source: str  # 'env', 'keyring', 'config', 'none'
    masked_value: str


def env_var_for(service: str) -> str:
    return SERVICES.get(service, f"{service.upper()}_API_KEY")


class KeyManager:
    """Manage API keys for translation services."""

    def __init__(self, config_file: Path | None = None, use_keyring: bool = True):
        self.config_file = Path(config_file) if config_file else KEYS_FILE
        self._keyring = self._load_keyring() if use_keyring else None

    @staticmethod
    def _load_keyring():
        try:
            import keyring
            keyring.get_keyring()
            return keyring
        except Exception as e:
            logger.debug("keyring unavailable: %s", e)
            return None

    def _read_config(self) -> dict:
        if not self.config_file.exists():
            return {}
        try:
            return json.loads(self.config_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable key file %s: %s", self.config_file, e)
            return {}

    def _write_config(self, config: dict) -> None:
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(json.dumps(config, indent=2), encoding="utf-8")
        self.config_file.chmod(0o600)

    def _lookup(self, service: str) -> tuple[Optional[str], str]:
        if env_val := os.getenv(env_var_for(service)):
            return env_val, "env"

        if self._keyring is not None:
            try:
                if key := self._keyring.get_password(APP_NAME, service):
                    return key, "keyring"
            except Exception as e:
                logger.debug("keyring lookup failed for %s: %s", service, e)

        if key := self._read_config().get(service):
            return key, "config"

        return None, "none"

    def get_key(self, service: str) -> Optional[str]:
        """Get API key for a service, or None if not found."""
        return self._lookup(service.lower())[0]

    def set_key(self, service: str, key: str, use_keyring: bool = True) -> str:
        """Store API key for a service.

        Returns:
            Storage location used ('keyring' or 'config')
        """
        service = service.lower()

        if use_keyring and self._keyring is not None:
            try:
                self._keyring.set_password(APP_NAME, service, key)
                return "keyring"
            except Exception as e:
                logger.debug("keyring store failed, using config file: %s", e)

        config = self._read_config()
        config[service] = key
        self._write_config(config)
        return "config"

    def delete_key(self, service: str) -> bool:
        """Delete stored API key for a service."""
        service = service.lower()
        deleted = False

        if self._keyring is not None:
            try:
                self._keyring.delete_password(APP_NAME, service)
                deleted = True
            except Exception as e:
                logger.debug("keyring delete failed for %s: %s", service, e)

        config = self._read_config()
        if service in config:
            del config[service]
            self._write_config(config)
            deleted = True

        return deleted

    def get_key_info(self, service: str) -> KeyInfo:
        """Get information about a stored key."""
        service = service.lower()
        key, source = self._lookup(service)
        return KeyInfo(
            service=service,
            is_set=key is not None,
            source=source,
            masked_value=self._mask_key(key) if key else "",
        )

    def list_keys(self) -> list[KeyInfo]:
        """List all configured services and their key status."""
        return [self.get_key_info(service) for service in SERVICES]

    @staticmethod
    def _mask_key(key: str) -> str:
        """Mask a key for display (show first 4 and last 4 chars)."""
        if len(key) <= 12:
            return "*" * len(key)
        return f"{key[:4]}...{key[-4:]}"


def require_key(service: str, manager: KeyManager | None = None) -> str:
    """Get API key or raise error if not found."""
    key = (manager or KeyManager()).get_key(service)
    if not key:
        raise ValueError(
            f"API key for '{service}' not found. "
            f"Set {env_var_for(service)} environment variable "
            f"or run: layoutrans keys set {service}"
        )
    return key
