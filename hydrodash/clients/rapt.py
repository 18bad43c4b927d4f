from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from hydrodash.core.errors import RaptError, RaptRateLimited
from hydrodash.models.telemetry import HydrometerSession, TelemetrySample, TelemetrySeries

RAPT_AUTH_URL = "https://id.rapt.io/connect/token"
RAPT_API_URL = "https://api.rapt.io/api"

logger = logging.getLogger(__name__)


def parse_time(value: str) -> datetime:
    # Example: "2023-03-01T18:02:11.123+00:00" or "2023-03-01T18:02:11Z"
    if not isinstance(value, str):
        raise TypeError(f"Expected an ISO-8601 string, got {type(value).__name__}")
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_json_time(dt: datetime) -> str:
    """Format like JavaScript's ``Date.toJSON``: UTC, milliseconds, ``Z``."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


class RaptClient:
    def __init__(
        self,
        *,
        timeout_seconds: float,
        auth_url: str = RAPT_AUTH_URL,
        api_url: str = RAPT_API_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._auth_url = auth_url
        self._api_url = api_url.rstrip("/")
        self._client = httpx.Client(
            timeout=timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def fetch_token(self, *, client_id: str, username: str, password: str) -> str:
        resp = self._send(
            "POST",
            self._auth_url,
            data={
                "client_id": client_id,
                "grant_type": "password",
                "username": username,
                "password": password,
            },
        )
        payload = self._json(resp)
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(token, str) or not token:
            raise RaptError("Token response did not contain an access_token")
        return token

    def list_hydrometers(self, token: str) -> list[HydrometerSession]:
        resp = self._send(
            "GET", f"{self._api_url}/Hydrometers/GetHydrometers", token=token
        )
        payload = self._json(resp)
        if not isinstance(payload, list):
            raise RaptError("Unexpected GetHydrometers response shape")

        sessions: list[HydrometerSession] = []
        for device in payload:
            session = device.get("activeProfileSession") if isinstance(device, dict) else None
            if not isinstance(session, dict):
                continue
            try:
                sessions.append(
                    HydrometerSession(
                        hydrometer_id=str(session["hydrometerId"]),
                        start_date=parse_time(session["startDate"]),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                raise RaptError("Unexpected activeProfileSession shape") from e
        return sessions

    def fetch_telemetry(
        self, *, token: str, hydrometer_id: str, start_date: str, end_date: str
    ) -> Any:
        """Return the raw GetTelemetry JSON body.

        Dates are forwarded exactly as given so the proxy stays a relay.
        """
        resp = self._send(
            "GET",
            f"{self._api_url}/Hydrometers/GetTelemetry",
            token=token,
            params={
                "hydrometerId": hydrometer_id,
                "startDate": start_date,
                "endDate": end_date,
            },
        )
        return self._json(resp)

    def _send(
        self,
        method: str,
        url: str,
        *,
        token: str | None = None,
        params: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        try:
            resp = self._client.request(
                method, url, params=params, data=data, headers=headers
            )
        except httpx.HTTPError as e:
            raise RaptError(f"Request to {url} failed: {type(e).__name__}") from e

        if resp.status_code == httpx.codes.TOO_MANY_REQUESTS:
            logger.warning("RAPT rate limit reached on %s", url)
            raise RaptRateLimited(f"Rate limited by {url}")
        if resp.is_error:
            raise RaptError(f"Upstream responded with HTTP {resp.status_code}")
        return resp

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise RaptError("Upstream response was not valid JSON") from e


def parse_telemetry(payload: Any) -> TelemetrySeries:
    if not isinstance(payload, list):
        raise RaptError("Unexpected GetTelemetry response shape")

    samples: list[TelemetrySample] = []
    for item in payload:
        if not isinstance(item, dict):
            raise RaptError("Unexpected telemetry entry shape")
        try:
            created_on = parse_time(item["createdOn"])
            gravity = float(item["gravity"])
        except (KeyError, TypeError, ValueError) as e:
            raise RaptError("Telemetry entry is missing createdOn or gravity") from e
        samples.append(
            TelemetrySample(
                created_on=created_on,
                gravity=gravity,
                temperature=_float_or_none(item.get("temperature")),
                battery=_float_or_none(item.get("battery")),
                rssi=_float_or_none(item.get("rssi")),
                version=_str_or_none(item.get("version")),
                mac_address=_str_or_none(item.get("macAddress")),
            )
        )
    return tuple(samples)


def _float_or_none(v: Any) -> float | None:
    try:
        if v is None:
            return None
        return float(v)
    except (TypeError, ValueError):
        return None


def _str_or_none(v: Any) -> str | None:
    if v is None:
        return None
    if isinstance(v, str):
        return v
    return str(v)
