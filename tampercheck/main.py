"""
FastAPI application entry point.

    uvicorn tampercheck.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

load_dotenv()

from tampercheck.config import settings  # noqa: E402
from tampercheck.api import analysis, credentials, models, system  # noqa: E402
from tampercheck.integrations import http_client, redis_client  # noqa: E402

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    redis_client.initialize()
    await http_client.initialize()
    logger.info(f"[STARTUP] Default provider: {settings.ai_provider}")

    yield

    await http_client.close()


app = FastAPI(title="TamperCheck Document Forensics API", lifespan=lifespan)


# ---- Global Exception Handler for CORS ----
# HTTP errors must carry CORS headers so the browser can read the JSON body.
@app.exception_handler(StarletteHTTPException)
async def custom_http_exception_handler(request: Request, exc: StarletteHTTPException):
    headers = dict(getattr(exc, "headers", None) or {})
    headers["Access-Control-Allow-Origin"] = "*"
    headers["Access-Control-Allow-Methods"] = "*"
    headers["Access-Control-Allow-Headers"] = "*"

    logger.info(f"[ERROR HANDLER] Returning {exc.status_code} to client: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers,
    )


# ---- CORS ----
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system.router)
app.include_router(models.router)
app.include_router(credentials.router)
app.include_router(analysis.router)
