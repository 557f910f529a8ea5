from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Dict, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import CORS_ORIGINS, EXAMPLE_URL, HOST, PORT
from flightaware_client import FlightAwareClient
from logging_utils import configure_logging, log_event, new_request_id
from lookups import collect_flights, split_param
from models import ErrorResponse, FlightsResponse

__version__ = "1.0.0"

# ------------------------------------------------------------------------------
# APP + LOGGING SETUP
# ------------------------------------------------------------------------------

configure_logging()
logger = logging.getLogger("flightinfo.api")

app = FastAPI(title="flightinfo", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET"],
    allow_headers=["*"],
)

MISSING_PARAMS_ERROR = "You must provide at least the 'airport' or 'aircraft' parameter."
INTERNAL_ERROR = "Internal server error"

logger.info("Starting flightinfo %s", __version__)


# ------------------------------------------------------------------------------
# REQUEST LOGGING MIDDLEWARE
# ------------------------------------------------------------------------------

@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    rid = new_request_id()
    start = time.time()

    log_event(
        logger,
        "http_request_started",
        method=request.method,
        path=request.url.path,
        query=str(request.url.query),
        client_ip=request.client.host if request.client else None,
        request_id=rid,
    )

    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        response.headers["X-Request-ID"] = rid
        return response
    finally:
        duration_ms = int((time.time() - start) * 1000)
        log_event(
            logger,
            "http_request_finished",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=duration_ms,
            request_id=rid,
        )


# ------------------------------------------------------------------------------
# DEPENDENCIES
# ------------------------------------------------------------------------------

async def get_client() -> AsyncIterator[FlightAwareClient]:
    async with FlightAwareClient() as client:
        yield client


def get_clock() -> Callable[[], datetime]:
    return lambda: datetime.now(timezone.utc)


def _missing_params_response() -> JSONResponse:
    body = ErrorResponse(error=MISSING_PARAMS_ERROR, example=EXAMPLE_URL)
    return JSONResponse(status_code=400, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log_event(
        logger,
        "unhandled_exception",
        level=logging.ERROR,
        exc_info=True,
        method=request.method,
        path=request.url.path,
        error=str(exc),
    )
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})


# ------------------------------------------------------------------------------
# ROUTES
# ------------------------------------------------------------------------------

@app.get("/")
async def root() -> JSONResponse:
    return _missing_params_response()


@app.get("/health")
async def health() -> Dict[str, Any]:
    return {
        "status": "ok",
        "version": app.version,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


@app.get(
    "/flights",
    response_model=FlightsResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def flights(
    airport: Optional[str] = Query(None, description="Comma-separated airport codes, e.g. SBME,SBRJ"),
    aircraft: Optional[str] = Query(None, description="Comma-separated registrations, e.g. PR-OHR,OHR"),
    client: FlightAwareClient = Depends(get_client),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    airports = split_param(airport)
    tails = split_param(aircraft)

    if not airports and not tails:
        log_event(logger, "flights_missing_params", level=logging.WARNING)
        return _missing_params_response()

    try:
        return await collect_flights(client, airports, tails, now=clock())
    except Exception as e:
        log_event(
            logger,
            "flights_request_failed",
            level=logging.ERROR,
            exc_info=True,
            airports=airports,
            aircraft=tails,
            error=str(e),
        )
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})


# ================= Run Server =================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT, log_level="info", access_log=True)
