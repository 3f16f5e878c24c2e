"""
System / health routes.
"""

from fastapi import APIRouter

from tampercheck.integrations import redis_client
from tampercheck.integrations.prompts import PROMPT_VERSION

router = APIRouter(tags=["System"])


@router.get("/health")
async def health():
    return {
        "status": "healthy",
        "promptVersion": PROMPT_VERSION,
        "credentialStore": "redis" if redis_client.client else "memory",
    }
