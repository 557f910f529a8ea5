from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial, reduce
from typing import Callable, List, Optional, Sequence

from logging_utils import log_event
from models import FlightRecord

from .duration import EN_ROUTE, compute_duration, duration_minutes, format_minutes
from .normalizers import strip_decorations

logger = logging.getLogger("flightinfo.offshore")

DEFAULT_OFFSHORE_MARKERS = ("near", "plataforma")
TRAILING_POLICIES = ("drop", "emit", "en_route")

# Offshore-origin legs longer than this are whole flights, not fragments
LONG_OFFSHORE_LEG_MINUTES = 60

LocationPredicate = Callable[[str], bool]


def is_airport(location: Optional[str], markers: Sequence[str] = DEFAULT_OFFSHORE_MARKERS) -> bool:
    """A location is an airport unless its text names an offshore position."""
    lowered = (location or "").lower()
    return not any(marker in lowered for marker in markers)


@dataclass
class MergeState:
    """Accumulator for one pass of the merge fold."""

    pending: Optional[FlightRecord] = None
    results: List[FlightRecord] = field(default_factory=list)

    def emit(self, record: FlightRecord) -> None:
        self.results.append(record)

    def open(self, leg: FlightRecord) -> None:
        self.pending = leg

    def flush(self) -> None:
        if self.pending is not None:
            self.results.append(self.pending)
            self.pending = None

    def extend(self, leg: FlightRecord) -> None:
        pending = self.pending
        duration = compute_duration(pending.departure, leg.arrival, pending.date)
        if not duration:
            # undated history rows: add up the scraped leg durations instead
            parts = [duration_minutes(pending.duration), duration_minutes(leg.duration)]
            if None not in parts:
                duration = format_minutes(sum(parts))
        self.pending = pending.model_copy(
            update={
                "destination": leg.destination,
                "arrival": leg.arrival,
                "duration": duration,
            }
        )

    def finish(self, policy: str) -> None:
        if self.pending is None:
            return
        if policy == "emit":
            self.flush()
        elif policy == "en_route":
            self.pending = self.pending.model_copy(update={"arrival": "", "duration": EN_ROUTE})
            self.flush()
        else:
            log_event(
                logger,
                "offshore_trailing_fragment_dropped",
                level=logging.DEBUG,
                origin=self.pending.origin,
                destination=self.pending.destination,
                date=self.pending.date,
            )
            self.pending = None


def _is_complete(leg: FlightRecord, from_airport: bool, to_airport: bool) -> bool:
    if leg.duration == EN_ROUTE:
        return True
    if from_airport and to_airport:
        return True
    if not from_airport:
        minutes = duration_minutes(leg.duration)
        return minutes is not None and minutes > LONG_OFFSHORE_LEG_MINUTES
    return False


def _step(state: MergeState, leg: FlightRecord, classify: LocationPredicate) -> MergeState:
    if not leg.origin:
        return state

    leg = leg.model_copy(
        update={
            "departure": strip_decorations(leg.departure),
            "arrival": strip_decorations(leg.arrival),
        }
    )
    from_airport = classify(leg.origin)
    to_airport = classify(leg.destination)

    # A new airport departure always closes whatever was open
    if from_airport and state.pending is not None:
        state.flush()

    # Never merge across a date change
    if state.pending is not None and state.pending.date != leg.date:
        state.flush()

    if _is_complete(leg, from_airport, to_airport):
        state.emit(leg)
    elif from_airport or state.pending is None:
        state.open(leg)
    elif not to_airport:
        state.extend(leg)
    else:
        state.extend(leg)
        state.flush()
    return state


def _is_descending(legs: Sequence[FlightRecord]) -> bool:
    dated = [leg for leg in legs if leg.date]
    if len(dated) < 2:
        return False
    return dated[0].sort_key() > dated[-1].sort_key()


def merge_offshore_legs(
    legs: Sequence[FlightRecord],
    *,
    is_airport_fn: Optional[LocationPredicate] = None,
    markers: Sequence[str] = DEFAULT_OFFSHORE_MARKERS,
    trailing_policy: str = "drop",
) -> List[FlightRecord]:
    """
    Rebuild whole flights from legs split at untracked offshore platforms.

    SBME -> "near Platform X" followed by "near Platform X" -> SBME becomes
    one SBME -> SBME flight with the duration recomputed end to end. The
    output keeps the input's chronological direction.
    """
    if trailing_policy not in TRAILING_POLICIES:
        raise ValueError(f"Unknown trailing fragment policy: {trailing_policy!r}")

    classify = is_airport_fn or partial(is_airport, markers=tuple(m.lower() for m in markers))

    descending = _is_descending(legs)
    ordered = list(reversed(legs)) if descending else list(legs)

    state = reduce(lambda acc, leg: _step(acc, leg, classify), ordered, MergeState())
    state.finish(trailing_policy)

    merged = state.results
    if descending:
        merged.reverse()

    log_event(
        logger,
        "offshore_legs_merged",
        level=logging.DEBUG,
        legs_in=len(legs),
        flights_out=len(merged),
        descending=descending,
    )
    return merged
