from __future__ import annotations

import logging
from typing import Any

from hydrodash.clients.rapt import RaptClient, parse_telemetry, to_json_time
from hydrodash.core.config import DEFAULT_RATE_LIMIT_MESSAGE
from hydrodash.core.errors import RaptError, RaptRateLimited
from hydrodash.models.telemetry import (
    FetchError,
    FetchOutcome,
    FetchRateLimited,
    FetchRequest,
    FetchSuccess,
)

logger = logging.getLogger(__name__)


class TelemetryRangeService:
    def __init__(
        self,
        *,
        client: RaptClient,
        rate_limit_message: str = DEFAULT_RATE_LIMIT_MESSAGE,
    ) -> None:
        self._client = client
        self._rate_limit_message = rate_limit_message

    @property
    def rate_limit_message(self) -> str:
        return self._rate_limit_message

    def relay(
        self, *, hydrometer_id: str, start_date: str, end_date: str, token: str
    ) -> Any:
        """One upstream telemetry call; the body is returned untouched."""
        return self._client.fetch_telemetry(
            token=token,
            hydrometer_id=hydrometer_id,
            start_date=start_date,
            end_date=end_date,
        )

    def fetch_outcome(self, request: FetchRequest) -> FetchOutcome:
        start, end = request.range.start, request.range.end
        if start is None or end is None:
            return FetchError(detail="Date range is incomplete")
        try:
            payload = self.relay(
                hydrometer_id=request.hydrometer_id,
                start_date=to_json_time(start),
                end_date=to_json_time(end),
                token=request.token,
            )
            series = parse_telemetry(payload)
        except RaptRateLimited:
            return FetchRateLimited(message=self._rate_limit_message)
        except RaptError as e:
            logger.warning("Telemetry range fetch failed: %s", e)
            return FetchError(detail=str(e))
        logger.debug(
            "Fetched %d samples for %s [%s, %s]",
            len(series),
            request.hydrometer_id,
            start,
            end,
        )
        return FetchSuccess(series=series)
