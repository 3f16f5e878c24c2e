"""
Upstash Redis integration, used by the session credential store.

`client` starts as None. Call `initialize()` inside the FastAPI lifespan
context manager. Consuming modules reference `redis_client.client` at
call time rather than importing the variable directly.
"""

import logging
from upstash_redis import Redis

from tampercheck.config import settings

logger = logging.getLogger(__name__)

# Set by initialize(). None when Redis credentials are absent or init fails.
client = None  # Redis | None


def initialize() -> None:
    """Bind an Upstash Redis client to `client` when UPSTASH_REDIS_* is configured."""
    global client

    if not (settings.upstash_redis_host and settings.upstash_redis_password):
        logger.warning(
            "[STARTUP] Redis credentials not found. Session credentials will be kept in memory."
        )
        return

    try:
        client = Redis(url=settings.upstash_redis_host, token=settings.upstash_redis_password)
        logger.info("[STARTUP] Upstash Redis client initialized")
    except Exception as e:
        logger.error(f"[STARTUP] Failed to initialize Upstash Redis client: {e}")
