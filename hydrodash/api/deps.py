from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from hydrodash.clients.rapt import RaptClient
from hydrodash.core.config import Settings
from hydrodash.services.dashboard import ViewRegistry
from hydrodash.services.seed import SeedStore
from hydrodash.services.telemetry import TelemetryRangeService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rapt_client(request: Request) -> RaptClient:
    return request.app.state.rapt_client


def get_telemetry_service(
    client: Annotated[RaptClient, Depends(get_rapt_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TelemetryRangeService:
    return TelemetryRangeService(
        client=client, rate_limit_message=settings.rate_limit_message
    )


def get_seed_store(request: Request) -> SeedStore:
    return request.app.state.seed_store


def get_view_registry(request: Request) -> ViewRegistry:
    return request.app.state.view_registry
