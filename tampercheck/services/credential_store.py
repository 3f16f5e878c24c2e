"""
Per-session credential storage: Redis-backed (preferred) with in-memory fallback.

Values are obfuscated (reversed text, base64-encoded) so they are not stored
in plain text. This is NOT encryption.

The Redis client is accessed at call-time via the integration module
so it picks up the instance initialized during the FastAPI lifespan.
"""

import base64
import binascii
import logging
import time
from typing import Dict, Optional, Tuple

from tampercheck.config import settings
from tampercheck.core.credentials import validate_api_key
from tampercheck.integrations import redis_client as redis_module
from tampercheck.schemas.options import ApiKeys, Provider

logger = logging.getLogger(__name__)

# In-memory store: {key: (obfuscated_value, expires_at)}
_memory: Dict[str, Tuple[str, float]] = {}


def obfuscate(text: str) -> str:
    return base64.b64encode(text[::-1].encode("utf-8")).decode("ascii")


def deobfuscate(stored: str) -> str:
    try:
        return base64.b64decode(stored, validate=True).decode("utf-8")[::-1]
    except (binascii.Error, UnicodeDecodeError):
        # Written before obfuscation was applied
        return stored


def credential_key(session_id: str, provider: Provider) -> str:
    return f"{settings.credential_key_prefix}:{session_id}:{provider.value}"


# ---------------------------------------------------------------------------
# Key/value primitives
# ---------------------------------------------------------------------------


def get(key: str) -> Optional[str]:
    rc = redis_module.client
    if rc:
        try:
            stored = rc.get(key)
            return deobfuscate(stored) if stored else None
        except Exception as e:
            logger.error(f"[CREDENTIALS] Redis read error: {e}. Falling back to memory.")
    return _get_memory(key)


def set(key: str, value: str) -> None:
    obfuscated = obfuscate(value)
    rc = redis_module.client
    if rc:
        try:
            rc.set(key, obfuscated, ex=settings.credential_ttl_sec)
            return
        except Exception as e:
            logger.error(f"[CREDENTIALS] Redis write error: {e}. Falling back to memory.")
    _set_memory(key, obfuscated)


def clear(key: str) -> None:
    rc = redis_module.client
    if rc:
        try:
            rc.delete(key)
        except Exception as e:
            logger.error(f"[CREDENTIALS] Redis delete error: {e}")
    _memory.pop(key, None)


def _get_memory(key: str) -> Optional[str]:
    entry = _memory.get(key)
    if not entry:
        return None
    value, expires_at = entry
    if time.time() > expires_at:
        _memory.pop(key, None)
        return None
    return deobfuscate(value)


def _set_memory(key: str, obfuscated: str) -> None:
    now = time.time()
    if len(_memory) >= settings.credential_memory_limit:
        _cleanup_memory(now)
    _memory[key] = (obfuscated, now + settings.credential_ttl_sec)


def _cleanup_memory(now: float) -> None:
    """Drop expired entries; if still full, drop the ones closest to expiry."""
    expired = [k for k, (_, expires_at) in _memory.items() if now > expires_at]
    for k in expired:
        del _memory[k]

    overflow = len(_memory) - settings.credential_memory_limit + 1
    if overflow > 0:
        for k, _ in sorted(_memory.items(), key=lambda item: item[1][1])[:overflow]:
            del _memory[k]
    logger.info(f"[CREDENTIALS] Memory store cleanup: removed {len(expired)} expired entries.")


# ---------------------------------------------------------------------------
# Session-level helpers
# ---------------------------------------------------------------------------


def store_api_key(session_id: str, provider: Provider, value: str) -> None:
    set(credential_key(session_id, provider), value.strip())
    logger.info(f"[CREDENTIALS] Stored {provider.value} credential for session")


def clear_api_key(session_id: str, provider: Optional[Provider] = None) -> None:
    providers = [provider] if provider else list(Provider)
    for p in providers:
        clear(credential_key(session_id, p))


def stored_api_keys(session_id: Optional[str]) -> Dict[Provider, str]:
    if not session_id:
        return {}
    keys = {}
    for provider in Provider:
        value = get(credential_key(session_id, provider))
        if value:
            keys[provider] = value
    return keys


def load_api_keys(session_id: Optional[str], overrides: Optional[ApiKeys] = None) -> ApiKeys:
    """
    Stored keys for the session, overlaid with per-request keys.

    A per-request key only replaces a stored one when it passes the format
    check; a malformed request key never hides a well-formed stored key.
    """
    stored = stored_api_keys(session_id)
    merged = {provider: stored.get(provider) for provider in Provider}

    if overrides is not None:
        for provider in Provider:
            value = overrides.for_provider(provider)
            if not value or not value.strip():
                continue
            if merged[provider] and not validate_api_key(provider, value):
                logger.warning(
                    f"[CREDENTIALS] Ignoring malformed {provider.value} request key; using stored key"
                )
                continue
            merged[provider] = value

    return ApiKeys(
        google=merged[Provider.GOOGLE],
        openai=merged[Provider.OPENAI],
        azure_openai=merged[Provider.AZURE_OPENAI],
        bedrock_proxy=merged[Provider.BEDROCK_OPENAI],
    )
