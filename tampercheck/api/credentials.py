"""
Session credential routes: /api/v1/credentials

Keyed by the X-Session-ID header. Stored values are never returned, only
masked; a write that fails the provider's format check is still stored but
comes back with a warning.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Header, HTTPException

from tampercheck.core import credentials as creds
from tampercheck.schemas.credentials import CredentialStatus, StoreCredentialRequest
from tampercheck.schemas.options import Provider
from tampercheck.services import credential_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/credentials", tags=["Credentials"])


def _provider(name: str) -> Provider:
    try:
        return Provider(name)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unsupported provider: {name}")


def _session(session_id: Optional[str]) -> str:
    if not session_id or not session_id.strip():
        raise HTTPException(status_code=400, detail="Missing X-Session-ID header")
    return session_id.strip()


def _status(provider: Provider, stored: Optional[str]) -> CredentialStatus:
    return CredentialStatus(
        provider=provider.value,
        label=creds.api_key_label(provider),
        stored=bool(stored),
        masked=creds.mask_api_key(stored) if stored else None,
        valid_format=creds.validate_api_key(provider, stored),
        available=creds.is_credential_available(provider, stored),
        warning=creds.credential_format_warning(provider, stored),
    )


@router.get("", response_model=List[CredentialStatus])
async def list_credentials(session_id: Optional[str] = Header(None, alias="X-Session-ID")):
    stored = credential_store.stored_api_keys(_session(session_id))
    return [_status(provider, stored.get(provider)) for provider in Provider]


@router.put("/{provider}", response_model=CredentialStatus)
async def store_credential(
    provider: str,
    body: StoreCredentialRequest,
    session_id: Optional[str] = Header(None, alias="X-Session-ID"),
):
    sid = _session(session_id)
    p = _provider(provider)
    value = body.value.strip()
    if not value:
        raise HTTPException(status_code=400, detail="Credential value must not be empty")

    credential_store.store_api_key(sid, p, value)
    return _status(p, value)


@router.delete("")
async def clear_credentials(session_id: Optional[str] = Header(None, alias="X-Session-ID")):
    credential_store.clear_api_key(_session(session_id))
    return {"cleared": [p.value for p in Provider]}


@router.delete("/{provider}")
async def clear_credential(
    provider: str,
    session_id: Optional[str] = Header(None, alias="X-Session-ID"),
):
    sid = _session(session_id)
    p = _provider(provider)
    credential_store.clear_api_key(sid, p)
    return {"cleared": [p.value]}
