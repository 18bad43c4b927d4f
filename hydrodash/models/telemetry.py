from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

# Readings at or above this gravity come from a disconnected or floating
# hydrometer and are never displayed.
GRAVITY_SENTINEL = 1140.0


@dataclass(frozen=True)
class TelemetrySample:
    created_on: datetime
    gravity: float
    temperature: float | None = None
    battery: float | None = None
    rssi: float | None = None
    version: str | None = None
    mac_address: str | None = None


TelemetrySeries = tuple[TelemetrySample, ...]


@dataclass(frozen=True)
class DateRange:
    start: datetime | None = None
    end: datetime | None = None

    @property
    def is_complete(self) -> bool:
        return self.start is not None and self.end is not None


@dataclass(frozen=True)
class HydrometerSession:
    hydrometer_id: str
    start_date: datetime


@dataclass(frozen=True)
class SeedData:
    token: str
    hydrometer_id: str
    start_date: str
    series: TelemetrySeries
    loaded_at: datetime


@dataclass(frozen=True)
class FetchRequest:
    ticket: int
    hydrometer_id: str
    token: str
    range: DateRange


@dataclass(frozen=True)
class FetchSuccess:
    series: TelemetrySeries = field(default_factory=tuple)


@dataclass(frozen=True)
class FetchRateLimited:
    message: str


@dataclass(frozen=True)
class FetchError:
    detail: str


FetchOutcome = FetchSuccess | FetchRateLimited | FetchError


def filter_valid(series: TelemetrySeries) -> TelemetrySeries:
    return tuple(s for s in series if s.gravity < GRAVITY_SENTINEL)
