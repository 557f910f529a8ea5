from __future__ import annotations

from typing import Iterable, List

from models import FlightRecord, FlightsResponse, LookupResult


def sort_records(records: Iterable[FlightRecord]) -> List[FlightRecord]:
    # Plain string sort on date + departure, most recent first
    return sorted(records, key=lambda r: r.sort_key(), reverse=True)


def aggregate_results(results: Iterable[LookupResult]) -> FlightsResponse:
    data: List[FlightRecord] = []
    errors: List[str] = []
    sources: List[str] = []

    for result in results:
        data.extend(result.data)
        if result.error:
            errors.append(result.error)
        if result.source:
            sources.append(result.source)

    data = sort_records(data)
    return FlightsResponse(error=errors, total=len(data), source=sources, data=data)
