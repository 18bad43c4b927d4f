from __future__ import annotations


class RaptError(Exception):
    """Upstream RAPT API call failed (network, HTTP status or payload shape)."""


class RaptRateLimited(RaptError):
    """Upstream answered HTTP 429."""


class SeedLoadError(Exception):
    """The initial telemetry for the page could not be produced."""


class EmptySeedError(SeedLoadError):
    """The initial telemetry series was empty, so there is no range to show."""
