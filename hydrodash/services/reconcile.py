from __future__ import annotations

import logging
import threading
from datetime import datetime

from hydrodash.core.errors import EmptySeedError
from hydrodash.models.telemetry import (
    DateRange,
    FetchError,
    FetchOutcome,
    FetchRateLimited,
    FetchRequest,
    FetchSuccess,
    TelemetrySeries,
    filter_valid,
)

logger = logging.getLogger(__name__)

FETCH_ERROR_NOTICE = "Could not load telemetry for the selected range."


class TelemetryView:
    """Decides which telemetry series a dashboard shows.

    Holds the seed series, the last known-good (fallback) series and the
    user's date range. Any non-ideal state (range untouched, fetch pending,
    rate limit, error, empty result) shows the fallback, so a failed re-fetch
    never blanks the chart.
    """

    def __init__(self, *, hydrometer_id: str | None = None, token: str | None = None) -> None:
        self._lock = threading.Lock()
        self._hydrometer_id = hydrometer_id
        self._token = token

        self._seed: TelemetrySeries = ()
        self._fallback: TelemetrySeries = ()
        self._initial_range = DateRange()
        self._range = DateRange()
        self._dirty = False

        self._last_outcome: FetchOutcome | None = None
        self._in_flight: FetchRequest | None = None
        self._next_ticket = 1
        self._range_version = 0
        self._requested_version = 0
        self._notice: str | None = None

    def initialize(self, initial_series: TelemetrySeries) -> None:
        if not initial_series:
            raise EmptySeedError("Initial telemetry series is empty")
        filtered = filter_valid(initial_series)
        with self._lock:
            self._seed = filtered
            self._fallback = filtered
            self._initial_range = DateRange(
                start=initial_series[0].created_on, end=initial_series[-1].created_on
            )
            self._range = self._initial_range
            self._dirty = False
            self._last_outcome = None
            self._in_flight = None
            self._range_version = 0
            self._requested_version = 0
            self._notice = None

    @property
    def seed(self) -> TelemetrySeries:
        return self._seed

    @property
    def fallback(self) -> TelemetrySeries:
        return self._fallback

    @property
    def initial_range(self) -> DateRange:
        return self._initial_range

    @property
    def range(self) -> DateRange:
        return self._range

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def is_fetch_in_flight(self) -> bool:
        with self._lock:
            return self._fetch_pending()

    def set_range_start(self, start: datetime | None) -> None:
        with self._lock:
            self._range = DateRange(start=start, end=self._range.end)
            self._mark_edited()

    def set_range_end(self, end: datetime | None) -> None:
        with self._lock:
            self._range = DateRange(start=self._range.start, end=end)
            self._mark_edited()

    def begin_fetch(self) -> FetchRequest | None:
        """Issue a fetch for the current range, or return None when not eligible.

        Eligible means: range edited, both bounds set, credentials known, no
        fetch in flight and this range version not requested yet.
        """
        with self._lock:
            if not self._dirty or not self._range.is_complete:
                return None
            if not self._hydrometer_id or not self._token:
                return None
            if self._in_flight is not None:
                return None
            if self._requested_version == self._range_version:
                return None

            request = FetchRequest(
                ticket=self._next_ticket,
                hydrometer_id=self._hydrometer_id,
                token=self._token,
                range=self._range,
            )
            self._next_ticket += 1
            self._requested_version = self._range_version
            self._in_flight = request
            return request

    def resolve(self, request: FetchRequest, outcome: FetchOutcome) -> None:
        with self._lock:
            if self._in_flight is None or self._in_flight.ticket != request.ticket:
                logger.warning("Ignoring outcome for fetch #%s (not in flight)", request.ticket)
                return
            self._in_flight = None
            self._last_outcome = outcome

            if isinstance(outcome, FetchSuccess):
                fetched = filter_valid(outcome.series)
                if fetched:
                    self._fallback = fetched
            elif isinstance(outcome, FetchRateLimited):
                self._notice = outcome.message
            elif isinstance(outcome, FetchError):
                logger.warning("Telemetry fetch #%s failed: %s", request.ticket, outcome.detail)
                self._notice = FETCH_ERROR_NOTICE

    def current_display(self) -> TelemetrySeries:
        with self._lock:
            if not self._dirty or self._fetch_pending():
                return self._fallback
            outcome = self._last_outcome
            if isinstance(outcome, FetchSuccess):
                fetched = filter_valid(outcome.series)
                if fetched:
                    return fetched
            return self._fallback

    def take_notice(self) -> str | None:
        with self._lock:
            notice, self._notice = self._notice, None
            return notice

    def _mark_edited(self) -> None:
        self._dirty = True
        self._range_version += 1

    def _fetch_pending(self) -> bool:
        if not self._dirty:
            return False
        if self._in_flight is not None:
            return True
        # An edit that was never requested (e.g. made while another fetch was
        # in flight) still counts as pending once the range is fetchable.
        return (
            self._requested_version != self._range_version
            and self._range.is_complete
            and bool(self._hydrometer_id and self._token)
        )
