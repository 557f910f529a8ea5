"""Shared fixtures for the flightinfo test-suite."""

from __future__ import annotations

import pathlib
import sys
from datetime import datetime, timezone

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1] / "server"))


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 7, 23, 15, 0, tzinfo=timezone.utc)
