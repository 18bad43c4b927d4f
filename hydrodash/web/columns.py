from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from hydrodash.models.telemetry import TelemetrySample, TelemetrySeries

DisplayValue = str | float | None


@dataclass(frozen=True)
class Column:
    label: str
    extract: Callable[[TelemetrySample], DisplayValue]
    sort_key: Callable[[TelemetrySample], float | datetime | None]
    unit: str | None = None

    @property
    def heading(self) -> str:
        return f"{self.label} ({self.unit})" if self.unit else self.label


def format_timestamp(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d %H:%M:%S")


COLUMNS: list[Column] = [
    Column(
        "Timestamp",
        lambda s: format_timestamp(s.created_on),
        lambda s: s.created_on,
        unit="UTC",
    ),
    Column("Gravity", lambda s: s.gravity, lambda s: s.gravity),
    Column("Temperature", lambda s: s.temperature, lambda s: s.temperature),
    Column("Battery", lambda s: s.battery, lambda s: s.battery),
    Column("Signal", lambda s: s.rssi, lambda s: s.rssi),
]
COLUMNS_BY_LABEL = {c.label: c for c in COLUMNS}

DEFAULT_SORT = "Timestamp"


def sort_rows(
    series: TelemetrySeries, *, sort: str = DEFAULT_SORT, reverse: bool = True
) -> list[TelemetrySample]:
    column = COLUMNS_BY_LABEL.get(sort, COLUMNS_BY_LABEL[DEFAULT_SORT])
    present = [s for s in series if column.sort_key(s) is not None]
    missing = [s for s in series if column.sort_key(s) is None]
    present.sort(key=column.sort_key, reverse=reverse)  # type: ignore[arg-type]
    # Samples without a value always go last, whichever direction.
    return present + missing


def table_rows(samples: list[TelemetrySample]) -> list[list[DisplayValue]]:
    return [[c.extract(s) for c in COLUMNS] for s in samples]


def chart_payload(series: TelemetrySeries) -> list[dict[str, object]]:
    return [
        {
            "createdOn": s.created_on.isoformat().replace("+00:00", "Z"),
            "temperature": s.temperature,
            "gravity": s.gravity,
        }
        for s in series
    ]
