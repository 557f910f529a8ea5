"""Tests for :mod:`lookups` with a fake upstream client."""

from __future__ import annotations

import asyncio

import pytest

from fakes import FakeClient, board_html, history_html
from flight_normalizer import EN_ROUTE
from flightaware_client import airport_url, history_url
from lookups import (
    collect_flights,
    get_by_aircraft,
    get_by_airport,
    history_row_to_record,
    normalize_ident,
    registration_candidates,
    split_param,
)
from models import RawLegRow

SBME_BOARD = board_html(
    [
        ["PR-OHR", "S76", "near Campos Basin", "09:45AM -03", "En Route", "En Route"],
        ["PS-BRB", "AW139", "SBCB", "10:10a -03", "Arrived", "10:55a -03"],
        ["PR-ABC", "EC25", "SBRJ", "01:30PM -03", "Scheduled", "unknown"],
    ]
)

PROHR_HISTORY = history_html(
    [
        ["23-Jul-2025", "S76", "near Platform X", "SBME", "10:00AM -03", "10:25AM -03", "0:25", "Landed"],
        ["23-Jul-2025", "S76", "SBME", "near Platform X", "09:00AM -03", "09:30AM -03", "0:30", "Landed"],
        ["22-Jul-2025", "S76", "SBME", "SBRJ", "02:00PM -03", "02:50PM -03", "0:50", "Landed"],
    ]
)


def test_normalize_ident_and_split_param() -> None:
    assert normalize_ident(" pr-ohr ") == "PROHR"
    assert split_param(" sbme , SBRJ,,sbme") == ["SBME", "SBRJ"]
    assert split_param(None) == []
    assert split_param(" , ") == []


def test_registration_candidates() -> None:
    assert registration_candidates("OHR") == ["PROHR", "PPOHR", "PTOHR"]
    assert registration_candidates("PROHR") == ["PROHR"]


def test_airport_board_rows_become_records(now) -> None:
    client = FakeClient({airport_url("SBME"): SBME_BOARD})

    result = asyncio.run(get_by_airport(client, "SBME", now=now))

    assert result.error is None
    assert result.source == airport_url("SBME")
    by_id = {r.aircraft_id: r for r in result.data}
    assert set(by_id) == {"PROHR", "PSBRB", "PRABC"}

    airborne = by_id["PROHR"]
    assert airborne.origin == "SBME"
    assert airborne.departure == "09:45 -03"
    assert airborne.date == "2025-07-23"
    assert airborne.duration == EN_ROUTE
    assert airborne.arrival == ""

    landed = by_id["PSBRB"]
    assert (landed.departure, landed.arrival, landed.duration) == ("10:10 -03", "10:55 -03", "0:45")

    # 13:30 -03 is still ahead of 15:00 UTC, so it left yesterday
    scheduled = by_id["PRABC"]
    assert scheduled.date == "2025-07-22"
    assert scheduled.duration == ""
    assert scheduled.arrival == ""


def test_airport_board_filtered_by_aircraft(now) -> None:
    client = FakeClient({airport_url("SBME"): SBME_BOARD})

    result = asyncio.run(get_by_airport(client, "SBME", ["OHR"], now=now))

    assert [r.aircraft_id for r in result.data] == ["PROHR"]


def test_airport_without_departures_board(now) -> None:
    client = FakeClient()

    result = asyncio.run(get_by_airport(client, "XXXX", now=now))

    assert result.data == []
    assert "Departures section not found" in result.error
    assert result.source == airport_url("XXXX")


def test_airport_network_failure_is_absorbed(now) -> None:
    client = FakeClient(failures=[airport_url("SBME")])

    result = asyncio.run(get_by_airport(client, "SBME", now=now))

    assert result.data == []
    assert result.error == "Failed to fetch FlightAware data for airport SBME."


def test_aircraft_history_is_merged_and_keeps_order() -> None:
    client = FakeClient({history_url("PROHR"): PROHR_HISTORY})

    result = asyncio.run(get_by_aircraft(client, "PR-OHR"))

    assert client.calls == [history_url("PROHR")]
    assert result.error is None
    assert result.source == history_url("PROHR")
    assert [(r.origin, r.destination, r.duration) for r in result.data] == [
        ("SBME", "SBME", "1:25"),
        ("SBME", "SBRJ", "0:50"),
    ]
    merged = result.data[0]
    assert merged.date == "2025-07-23"
    assert merged.departure == "09:00 -03"
    assert merged.arrival == "10:25 -03"
    assert merged.aircraft_id == "PROHR"


def test_bare_tail_falls_back_through_prefixes() -> None:
    client = FakeClient({history_url("PPOHR"): PROHR_HISTORY})

    result = asyncio.run(get_by_aircraft(client, "ohr"))

    assert client.calls == [history_url("PROHR"), history_url("PPOHR")]
    assert result.error is None
    assert result.source == history_url("PPOHR")
    assert {r.aircraft_id for r in result.data} == {"PPOHR"}


def test_bare_tail_with_no_match_reports_last_attempt() -> None:
    client = FakeClient(failures=[history_url("PTOHR")])

    result = asyncio.run(get_by_aircraft(client, "OHR"))

    assert len(client.calls) == 3
    assert result.data == []
    assert result.error == "Failed to fetch flight history for aircraft PTOHR."
    assert result.source == history_url("PTOHR")


def test_full_registration_with_empty_history() -> None:
    client = FakeClient({history_url("PRXYZ"): history_html([])})

    result = asyncio.run(get_by_aircraft(client, "PR-XYZ"))

    assert result.data == []
    assert result.error is None


def test_history_row_falls_back_to_scraped_duration_without_date() -> None:
    row = RawLegRow(
        date="??",
        origin="SBME",
        destination="SBRJ",
        departure_text="09:00AM -03",
        arrival_text="09:30AM -03",
        duration_text="0:30",
    )

    record = history_row_to_record(row, "PROHR")

    assert record.date == ""
    assert record.duration == "0:30"
    assert record.departure == "09:00 -03"


def test_history_row_en_route_clears_arrival() -> None:
    row = RawLegRow(
        date="23-Jul-2025",
        origin="SBME",
        destination="near Platform X",
        departure_text="09:00AM -03",
        arrival_text="En Route",
        duration_text="En Route",
    )

    record = history_row_to_record(row, "PROHR")

    assert record.duration == EN_ROUTE
    assert record.arrival == ""


def test_collect_flights_combines_and_sorts(now) -> None:
    client = FakeClient(
        {
            airport_url("SBME"): SBME_BOARD,
            history_url("PROHR"): PROHR_HISTORY,
        },
        failures=[airport_url("SBRJ")],
    )

    response = asyncio.run(collect_flights(client, ["SBME", "SBRJ"], ["PROHR"], now=now))

    keys = [r.date + r.departure for r in response.data]
    assert keys == sorted(keys, reverse=True)
    assert response.total == len(response.data) == 3
    assert response.error == ["Failed to fetch FlightAware data for airport SBRJ."]
    assert response.source == [airport_url("SBME"), airport_url("SBRJ"), history_url("PROHR")]
    # the board only keeps the requested aircraft
    assert {r.aircraft_id for r in response.data} == {"PROHR"}


@pytest.mark.parametrize("airports, aircraft", [([], []), (["SBME"], []), ([], ["PROHR"])])
def test_collect_flights_total_matches_data(now, airports, aircraft) -> None:
    client = FakeClient({airport_url("SBME"): SBME_BOARD, history_url("PROHR"): PROHR_HISTORY})

    response = asyncio.run(collect_flights(client, airports, aircraft, now=now))

    assert response.total == len(response.data)
