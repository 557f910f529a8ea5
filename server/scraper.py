# scraper.py
"""
HTML table extraction for FlightAware pages.

Turns the departures board and the aircraft history table into RawLegRow
objects, one per <tr>. Cell text is whitespace-collapsed and otherwise left
untouched; all interpretation happens in flight_normalizer.
"""

from typing import List, Optional

from bs4 import BeautifulSoup

from models import RawLegRow

DEPARTURE_COLUMNS = (
    "aircraft_id",
    "aircraft_type",
    "destination",
    "departure_text",
    "status",
    "arrival_text",
)

HISTORY_COLUMNS = (
    "date",
    "aircraft_type",
    "origin",
    "destination",
    "departure_text",
    "arrival_text",
    "duration_text",
    "status",
)


def _cell_text(td) -> str:
    return " ".join(td.get_text().split())


def _rows(table, columns) -> List[RawLegRow]:
    rows: List[RawLegRow] = []
    # First row is the header
    for tr in table.find_all("tr")[1:]:
        cells = tr.find_all("td")
        if not cells:
            continue
        values = [_cell_text(td) for td in cells]
        rows.append(RawLegRow(**dict(zip(columns, values))))
    return rows


def extract_departure_rows(html: str) -> Optional[List[RawLegRow]]:
    """Rows of the airport departures board, or None if the board is missing."""
    soup = BeautifulSoup(html, "html.parser")
    section = soup.find(id="departures-board")
    if section is None:
        return None
    table = section.find("table")
    if table is None:
        return None
    return _rows(table, DEPARTURE_COLUMNS)


def extract_history_rows(html: str) -> Optional[List[RawLegRow]]:
    """Rows of the aircraft flight-history table, or None if it is missing."""
    soup = BeautifulSoup(html, "html.parser")
    table = soup.select_one("table.prettyTable")
    if table is None:
        return None
    return _rows(table, HISTORY_COLUMNS)
