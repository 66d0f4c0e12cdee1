#!/usr/bin/env python3

"""FastAPI web application for Strategy Backtest"""

import asyncio
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

import backtest_service
import error_logging
from configuration import Configuration, load_dotenv
from corpus_store import CorpusStore
from errors import BacktestError, ValidationError
from models import Platform

load_dotenv()
CONFIG = Configuration.from_env()
_is_production = CONFIG.is_production

error_logging.configure(CONFIG.environment)

app = FastAPI(
    title="Strategy Backtest",
    version="1.0",
    # Hide docs in production
    docs_url=None if _is_production else "/docs",
    redoc_url=None if _is_production else "/redoc",
)


# ---------------------------------------------------------------------------
# CORS middleware
# ---------------------------------------------------------------------------
if CONFIG.allowed_origins:
  app.add_middleware(
      CORSMiddleware,
      allow_origins=CONFIG.allowed_origins,
      allow_credentials=True,
      allow_methods=["GET", "POST"],
      allow_headers=["*"],
  )


# ---------------------------------------------------------------------------
# Security headers middleware
# ---------------------------------------------------------------------------
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
  async def dispatch(self, request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if _is_production:
      response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response

app.add_middleware(SecurityHeadersMiddleware)


# ---------------------------------------------------------------------------
# Rate limiting (slowapi)
# ---------------------------------------------------------------------------
limiter = Limiter(key_func=get_remote_address, default_limits=["200/minute"])
app.state.limiter = limiter

@app.exception_handler(RateLimitExceeded)
async def _rate_limit_handler(request: Request, exc: RateLimitExceeded):
  return JSONResponse(
      {"success": False,
       "error": {"code": "RATE_LIMITED",
                 "message": "Too many requests. Please slow down."}},
      status_code=429,
  )


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------
_STATUS_BY_CODE = {
    "VALIDATION_ERROR": 400,
    "NOT_FOUND": 404,
    "INSUFFICIENT_DATA": 422,
    "DATA_UNAVAILABLE": 503,
}


def format_error(exc: BacktestError, include_details: bool = False) -> dict:
  """Build the {"success": false, "error": {...}} response body."""
  error = {"code": exc.code, "message": exc.message}
  if include_details and exc.details:
    error["details"] = exc.details
  return {"success": False, "error": error}


@app.exception_handler(BacktestError)
async def _backtest_error_handler(request: Request, exc: BacktestError):
  status_code = _STATUS_BY_CODE.get(exc.code, 500)
  if status_code >= 500:
    logging.error("Backtest request failed: %s", exc.message)
  else:
    logging.warning("Backtest request rejected (%s): %s", exc.code, exc.message)
  return JSONResponse(
      format_error(exc, include_details=not _is_production),
      status_code=status_code,
  )


# ---------------------------------------------------------------------------
# Corpus dependency
# ---------------------------------------------------------------------------
_corpus_store = CorpusStore(CONFIG.csv_path)


def get_corpus_store() -> CorpusStore:
  """Shared corpus store; overridden in tests."""
  return _corpus_store


# ---------------------------------------------------------------------------
# Request validation
# ---------------------------------------------------------------------------
_REQUIRED_FIELDS = ("strategy", "features", "platform")


def validate_backtest_body(body) -> tuple[dict, dict, str]:
  """Check the backtest payload shape.

  Returns:
    (strategy, features, platform)
  Raises:
    ValidationError: body is not an object, a field is missing or the
      platform is not supported.
  """
  if not isinstance(body, dict):
    raise ValidationError("Request body must be a valid JSON object")
  for name in _REQUIRED_FIELDS:
    if name not in body:
      raise ValidationError(f"Missing required field: {name}")

  strategy = body["strategy"]
  features = body["features"]
  if not isinstance(strategy, dict):
    raise ValidationError("strategy must be an object")
  if not isinstance(features, dict):
    raise ValidationError("features must be an object")

  platform = body["platform"]
  if platform not in Platform.values():
    raise ValidationError(
        "Invalid platform. Must be " + ", ".join(Platform.values())
    )
  return strategy, features, platform


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/health")
async def health_check(store: CorpusStore = Depends(get_corpus_store)):
  """Health check for uptime monitoring and load balancer probes."""
  try:
    total = store.stats()["totalVideos"]
    data_ok = True
  except BacktestError as ex:
    logging.error("Health check could not load dataset: %s", ex.message)
    total = 0
    data_ok = False

  return JSONResponse(
      {
          "status": "healthy" if data_ok else "degraded",
          "version": app.version,
          "dataset": "ok" if data_ok else "unavailable",
          "totalVideos": total,
      },
      status_code=200 if data_ok else 503,
  )


@app.post("/api/backtest")
@limiter.limit(CONFIG.rate_limit)
async def backtest(
    request: Request,
    store: CorpusStore = Depends(get_corpus_store),
):
  """Predict 24h performance of a strategy from similar historical videos."""
  try:
    body = await request.json()
  except ValueError:
    raise ValidationError("Request body must be a valid JSON object")

  strategy, features, platform = validate_backtest_body(body)
  query = backtest_service.build_query(strategy, features, platform)
  logging.info(
      "Backtest request received: platform=%s category=%s",
      query.platform, query.category,
  )

  # Scoring is CPU-bound; keep it off the event loop
  result = await asyncio.to_thread(
      backtest_service.run_backtest, query, store, CONFIG.match_count,
  )
  return JSONResponse({"success": True, "data": result.to_dict()})


@app.get("/api/stats")
async def dataset_stats(store: CorpusStore = Depends(get_corpus_store)):
  """Size of the historical dataset plus its platforms and categories."""
  return JSONResponse({"success": True, "data": store.stats()})


if __name__ == "__main__":
  import uvicorn
  uvicorn.run(app, host="0.0.0.0", port=8080)
