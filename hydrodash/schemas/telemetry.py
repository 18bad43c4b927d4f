from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from hydrodash.models.telemetry import TelemetrySample


class TelemetrySampleRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    temperature: float | None = None
    gravity: float
    battery: float | None = None
    version: str | None = None
    created_on: datetime = Field(alias="createdOn")
    mac_address: str | None = Field(default=None, alias="macAddress")
    rssi: float | None = None

    @classmethod
    def from_sample(cls, sample: TelemetrySample) -> TelemetrySampleRead:
        return cls(
            temperature=sample.temperature,
            gravity=sample.gravity,
            battery=sample.battery,
            version=sample.version,
            created_on=sample.created_on,
            mac_address=sample.mac_address,
            rssi=sample.rssi,
        )


class RateLimitedBody(BaseModel):
    message: str


class UpstreamErrorBody(BaseModel):
    kind: str = "upstream_failure"
    detail: str
