"""
flight_normalizer package

Public API:
    - normalize_time(text) -> "HH:MM [offset]" | ""
    - normalize_date(text, locale=None) -> "YYYY-MM-DD" | None
    - infer_date_from_time(time_text, now) -> "YYYY-MM-DD" | None
    - compute_duration(departure, arrival, reference_date) -> "H:MM" | "En Route" | ""
    - merge_offshore_legs(legs, ...) -> List[FlightRecord]
    - aggregate_results(results) -> FlightsResponse
"""

from .aggregator import aggregate_results, sort_records
from .duration import EN_ROUTE, compute_duration, duration_minutes
from .normalizers import (
    MONTHS_EN,
    MONTHS_PT,
    infer_date_from_time,
    normalize_date,
    normalize_time,
    strip_decorations,
)
from .offshore import MergeState, is_airport, merge_offshore_legs

__all__ = [
    "EN_ROUTE",
    "MONTHS_EN",
    "MONTHS_PT",
    "MergeState",
    "aggregate_results",
    "compute_duration",
    "duration_minutes",
    "infer_date_from_time",
    "is_airport",
    "merge_offshore_legs",
    "normalize_date",
    "normalize_time",
    "sort_records",
    "strip_decorations",
]
