"""
FastAPI REST API for JSON extraction.

Provides /parse, /inspect, and /health endpoints with API key authentication.

Usage:
    uvicorn llmjson.api:app --reload
    # or
    python -m llmjson.api
"""

import logging
import os
import time

from fastapi import FastAPI, Depends, HTTPException, Security, Request
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from dotenv import load_dotenv

from llmjson.api_models import (
    ParseRequest, ParseResponse,
    InspectRequest, InspectResponse,
    HealthResponse, ErrorResponse,
)
from llmjson.errors import JsonExtractionError, ParseFailedError
from llmjson.logging_config import setup_logging
from llmjson.output_parser import MODES, REPAIR, extract, has_possible_json, is_json_string
from llmjson.reconciler import NoOp
from llmjson.schemas import describe_shape

load_dotenv()
setup_logging()
logger = logging.getLogger(__name__)

VERSION = "0.1.0"

# --- App setup ---

app = FastAPI(
    title="llmjson API",
    description="Extract, repair and reconcile JSON embedded in LLM output",
    version=VERSION,
)

# --- Auth ---

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)


def verify_api_key(api_key: str = Security(API_KEY_HEADER)) -> str:
    """
    Validate the API key from the X-API-Key header.

    The expected key is set via the API_KEY environment variable.
    If API_KEY is not set, auth is disabled (development mode).
    """
    expected = os.environ.get("API_KEY")
    if expected is None:
        return "dev"
    if not api_key or api_key != expected:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
    return api_key


# --- Error mapping ---

@app.exception_handler(JsonExtractionError)
def extraction_error_handler(request: Request, exc: JsonExtractionError):
    body = ErrorResponse(
        error=exc.kind,
        message=str(exc),
        attempts=exc.attempts if isinstance(exc, ParseFailedError) else None,
        preview=exc.text_preview,
    )
    return JSONResponse(status_code=422, content=body.model_dump())


# --- Request logging middleware ---

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with timing."""
    start = time.time()
    response = await call_next(request)
    elapsed = time.time() - start
    logger.info(
        "%s %s status=%d time=%.3fs",
        request.method, request.url.path, response.status_code, elapsed,
    )
    return response


# --- Routes ---

@app.get("/health", response_model=HealthResponse)
def health():
    """Service health check."""
    return HealthResponse(status="healthy", version=VERSION, modes=list(MODES))


@app.post(
    "/parse",
    response_model=ParseResponse,
    responses={422: {"model": ErrorResponse}},
    dependencies=[Depends(verify_api_key)],
)
def parse(req: ParseRequest):
    """
    Extract the JSON object from an LLM response.

    In repair mode with a schema, `reconciled` reports whether the root key
    was wrapped or renamed.
    """
    logger.info("Parse request: mode=%s, chars=%d, schema=%s",
                req.mode, len(req.text), req.json_schema is not None)

    shape = None
    if req.mode == REPAIR and req.json_schema is not None:
        try:
            shape = describe_shape(req.json_schema)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Unusable schema: {exc}")

    result, decision = extract(req.text, mode=req.mode, schema=shape)
    return ParseResponse(
        result=result,
        mode=req.mode,
        reconciled=not isinstance(decision, NoOp),
    )


@app.post("/inspect", response_model=InspectResponse, dependencies=[Depends(verify_api_key)])
def inspect(req: InspectRequest):
    """Run the cheap pre-filter checks without parsing."""
    return InspectResponse(
        has_possible_json=has_possible_json(req.text),
        is_json_string=is_json_string(req.text),
    )


# --- Entrypoint for python -m ---

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("llmjson.api:app", host="0.0.0.0", port=8000, reload=True)
