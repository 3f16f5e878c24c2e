"""
Analysis route: /api/v1/analyze

Accepts multipart/form-data with a 'file' field, an optional free-text
'context' and an optional 'config' field holding AnalyzeConfig as JSON.
Credentials stored for the X-Session-ID session are used unless the
config carries its own.
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Header, HTTPException, UploadFile
from pydantic import ValidationError

from tampercheck.core.errors import (
    AnalysisError,
    InvalidParameters,
    MissingCredential,
    NetworkError,
    ProviderError,
    UnsupportedProvider,
)
from tampercheck.core.images import validate_image
from tampercheck.schemas.analysis import AnalysisResult
from tampercheck.schemas.options import AnalyzeConfig
from tampercheck.services import credential_store
from tampercheck.services.analysis_service import analyze

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Analysis"])


def to_http_exception(error: AnalysisError) -> HTTPException:
    if isinstance(error, InvalidParameters):
        return HTTPException(status_code=422, detail=error.user_message)
    if isinstance(error, (MissingCredential, UnsupportedProvider)):
        return HTTPException(status_code=400, detail=error.user_message)
    if isinstance(error, ProviderError):
        status = 429 if error.status == 429 else 502
        return HTTPException(status_code=status, detail=error.user_message)
    if isinstance(error, NetworkError):
        return HTTPException(status_code=503, detail=error.user_message)
    return HTTPException(status_code=500, detail=error.user_message)


def _parse_config(raw: Optional[str]) -> AnalyzeConfig:
    if not raw or not raw.strip():
        return AnalyzeConfig()
    try:
        return AnalyzeConfig.model_validate_json(raw)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid config: {e.errors()[0]['msg']}")


@router.post("/analyze", response_model=AnalysisResult)
async def analyze_document(
    file: UploadFile = File(...),
    context: str = Form(""),
    config: Optional[str] = Form(None),
    session_id: Optional[str] = Header(None, alias="X-Session-ID"),
):
    """Run a forensic tampering analysis on one document image."""
    data = await file.read()
    image = validate_image(file.filename or "document", data)

    options = _parse_config(config)
    options = options.model_copy(
        update={"api_keys": credential_store.load_api_keys(session_id, options.api_keys)}
    )

    try:
        return await analyze(image, context, options)
    except AnalysisError as e:
        logger.warning(f"[ANALYZE] {type(e).__name__}: {e}")
        raise to_http_exception(e)
