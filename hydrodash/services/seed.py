from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone

from hydrodash.clients.rapt import RaptClient, parse_telemetry, to_json_time
from hydrodash.core.errors import RaptError, SeedLoadError
from hydrodash.models.telemetry import SeedData

logger = logging.getLogger(__name__)


def normalize_start_date(value: datetime) -> str:
    """UTC ISO-8601 with a trailing ``Z``, as sent back to GetTelemetry."""
    return to_json_time(value)


class SeedLoader:
    """Produces the telemetry a freshly generated dashboard page starts from."""

    def __init__(
        self,
        *,
        client: RaptClient,
        client_id: str,
        username: str,
        password: str | None,
    ) -> None:
        self._client = client
        self._client_id = client_id
        self._username = username
        self._password = password

    def load(self) -> SeedData:
        if not self._password:
            raise SeedLoadError("RAPT portal secret is not configured")

        now = datetime.now(tz=timezone.utc)
        try:
            token = self._client.fetch_token(
                client_id=self._client_id,
                username=self._username,
                password=self._password,
            )
            sessions = self._client.list_hydrometers(token)
            if not sessions:
                raise SeedLoadError("No hydrometer with an active profile session")
            session = sessions[0]
            start_date = normalize_start_date(session.start_date)
            payload = self._client.fetch_telemetry(
                token=token,
                hydrometer_id=session.hydrometer_id,
                start_date=start_date,
                end_date=to_json_time(now),
            )
            series = parse_telemetry(payload)
        except RaptError as e:
            raise SeedLoadError(f"Initial telemetry load failed: {e}") from e

        logger.info(
            "Loaded %d seed samples for hydrometer %s since %s",
            len(series),
            session.hydrometer_id,
            start_date,
        )
        return SeedData(
            token=token,
            hydrometer_id=session.hydrometer_id,
            start_date=start_date,
            series=series,
            loaded_at=now,
        )


class SeedStore:
    """Caches the seed for one regeneration interval.

    A failed regeneration raises; stale seed data is never served in its place.
    """

    def __init__(self, *, loader: SeedLoader, revalidate_seconds: int) -> None:
        self._loader = loader
        self._revalidate_seconds = max(int(revalidate_seconds), 0)
        self._lock = threading.Lock()
        self._seed: SeedData | None = None

    def get(self, *, now: datetime | None = None) -> SeedData:
        now = now or datetime.now(tz=timezone.utc)
        with self._lock:
            if self._seed is not None:
                age = (now - self._seed.loaded_at).total_seconds()
                if age < self._revalidate_seconds:
                    return self._seed
            try:
                self._seed = self._loader.load()
            except SeedLoadError:
                self._seed = None
                logger.exception("Seed regeneration failed")
                raise
            return self._seed
