# lookups.py
"""
Per-airport and per-aircraft lookups.

Each lookup fetches one FlightAware page, extracts its table rows and turns
them into FlightRecords. A failed lookup comes back as an empty
LookupResult carrying an error string so sibling lookups are unaffected.
collect_flights() runs every lookup for a request concurrently and
aggregates the results.
"""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

import aiohttp

from config import (
    MONTH_LOCALE,
    OFFSHORE_MARKERS,
    REGISTRATION_PREFIXES,
    TRAILING_FRAGMENT_POLICY,
)
from flight_normalizer import (
    EN_ROUTE,
    aggregate_results,
    compute_duration,
    duration_minutes,
    infer_date_from_time,
    merge_offshore_legs,
    normalize_date,
    normalize_time,
)
from flightaware_client import airport_url, history_url
from logging_utils import log_event
from models import FlightRecord, FlightsResponse, LookupResult, RawLegRow
from scraper import extract_departure_rows, extract_history_rows

logger = logging.getLogger("flightinfo.lookups")

NETWORK_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)

_IDENT_STRIP_RE = re.compile(r"[\s-]")


def normalize_ident(text: Optional[str]) -> str:
    """Drop dashes and spaces and uppercase: "pr-ohr" -> "PROHR"."""
    return _IDENT_STRIP_RE.sub("", text or "").upper()


def split_param(value: Optional[str]) -> List[str]:
    codes: List[str] = []
    for part in (value or "").split(","):
        code = normalize_ident(part)
        if code and code not in codes:
            codes.append(code)
    return codes


def registration_candidates(ident: str) -> List[str]:
    # A bare 3-char tail ("OHR") needs a nationality prefix to resolve
    if len(ident) == 3:
        return [f"{prefix}{ident}" for prefix in REGISTRATION_PREFIXES]
    return [ident]


# ─────────────────────────────────────────────────────────────────────────────
# ROW → RECORD
# ─────────────────────────────────────────────────────────────────────────────


def airport_row_to_record(row: RawLegRow, airport: str, now: datetime) -> FlightRecord:
    departure = normalize_time(row.departure_text)
    arrival = normalize_time(row.arrival_text)
    date = infer_date_from_time(departure, now) or ""
    duration = compute_duration(departure, arrival or row.arrival_text, date)
    if duration == EN_ROUTE:
        arrival = ""

    return FlightRecord(
        date=date,
        aircraft_id=normalize_ident(row.aircraft_id),
        aircraft_type=row.aircraft_type,
        origin=airport,
        destination=row.destination,
        departure=departure,
        arrival=arrival,
        duration=duration,
        status=row.status,
    )


def history_row_to_record(
    row: RawLegRow, aircraft_id: str, locale: Optional[str] = MONTH_LOCALE
) -> FlightRecord:
    date = normalize_date(row.date, locale) or ""
    departure = normalize_time(row.departure_text)
    arrival = normalize_time(row.arrival_text)
    duration = compute_duration(departure, arrival or row.arrival_text, date)
    if not duration and duration_minutes(row.duration_text) is not None:
        duration = row.duration_text.strip()
    if duration == EN_ROUTE:
        arrival = ""

    return FlightRecord(
        date=date,
        aircraft_id=aircraft_id,
        aircraft_type=row.aircraft_type,
        origin=row.origin,
        destination=row.destination,
        departure=departure,
        arrival=arrival,
        duration=duration,
        status=row.status,
    )


# ─────────────────────────────────────────────────────────────────────────────
# LOOKUPS
# ─────────────────────────────────────────────────────────────────────────────


async def get_by_airport(
    client,
    airport: str,
    aircraft_filter: Sequence[str] = (),
    now: Optional[datetime] = None,
) -> LookupResult:
    now = now or datetime.now(timezone.utc)
    url = airport_url(airport)

    try:
        html = await client.fetch_html(url)
    except NETWORK_ERRORS as e:
        log_event(
            logger,
            "airport_lookup_failed",
            level=logging.WARNING,
            airport=airport,
            error=str(e) or type(e).__name__,
        )
        return LookupResult(error=f"Failed to fetch FlightAware data for airport {airport}.", source=url)

    rows = extract_departure_rows(html)
    if rows is None:
        log_event(logger, "departures_board_missing", level=logging.WARNING, airport=airport)
        return LookupResult(error=f"Departures section not found for airport {airport}.", source=url)

    records = [airport_row_to_record(row, airport, now) for row in rows]
    if aircraft_filter:
        records = [r for r in records if any(f in r.aircraft_id for f in aircraft_filter)]

    log_event(
        logger,
        "airport_lookup_finished",
        airport=airport,
        rows=len(rows),
        flights=len(records),
    )
    return LookupResult(data=records, source=url)


async def get_by_aircraft(
    client,
    aircraft: str,
    *,
    locale: Optional[str] = MONTH_LOCALE,
    markers: Sequence[str] = OFFSHORE_MARKERS,
    trailing_policy: str = TRAILING_FRAGMENT_POLICY,
) -> LookupResult:
    ident = normalize_ident(aircraft)
    candidates = registration_candidates(ident)

    error: Optional[str] = None
    source: Optional[str] = None

    for i, candidate in enumerate(candidates):
        url = history_url(candidate)
        has_fallback = i < len(candidates) - 1

        try:
            html = await client.fetch_html(url)
        except NETWORK_ERRORS as e:
            log_event(
                logger,
                "aircraft_lookup_failed",
                level=logging.WARNING,
                aircraft=candidate,
                error=str(e) or type(e).__name__,
            )
            error = f"Failed to fetch flight history for aircraft {candidate}."
            source = url
            continue

        rows = extract_history_rows(html)
        if rows is None or (not rows and has_fallback):
            log_event(logger, "history_table_missing", aircraft=candidate, fallback=has_fallback)
            error = f"Flight history table not found for aircraft {candidate}."
            source = url
            continue

        records = [history_row_to_record(row, candidate, locale) for row in rows]
        flights = merge_offshore_legs(records, markers=markers, trailing_policy=trailing_policy)

        log_event(
            logger,
            "aircraft_lookup_finished",
            aircraft=candidate,
            legs=len(records),
            flights=len(flights),
        )
        return LookupResult(data=flights, source=url)

    return LookupResult(error=error, source=source)


async def collect_flights(
    client,
    airports: Iterable[str] = (),
    aircraft: Iterable[str] = (),
    now: Optional[datetime] = None,
) -> FlightsResponse:
    """Run every airport and aircraft lookup concurrently and merge the results."""
    airports = list(airports)
    aircraft = list(aircraft)
    now = now or datetime.now(timezone.utc)

    tasks = [get_by_airport(client, code, aircraft, now) for code in airports]
    tasks += [get_by_aircraft(client, ident) for ident in aircraft]

    results = await asyncio.gather(*tasks)
    response = aggregate_results(results)

    log_event(
        logger,
        "flights_collected",
        airports=airports,
        aircraft=aircraft,
        total=response.total,
        errors=len(response.error),
    )
    return response
