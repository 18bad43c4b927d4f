from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse

from hydrodash.api.deps import get_seed_store, get_telemetry_service, get_view_registry
from hydrodash.core.errors import SeedLoadError
from hydrodash.schemas.telemetry import TelemetrySampleRead
from hydrodash.services.dashboard import ViewRegistry, sync_view
from hydrodash.services.reconcile import TelemetryView
from hydrodash.services.seed import SeedStore
from hydrodash.services.telemetry import TelemetryRangeService
from hydrodash.web.columns import (
    COLUMNS,
    DEFAULT_SORT,
    chart_payload,
    sort_rows,
    table_rows,
)
from hydrodash.web.deps import detect_locale, ensure_view_id, get_view_id
from hydrodash.web.templates import templates

router = APIRouter()

INPUT_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _parse_bound(name: str, value: str) -> datetime | None:
    if not value.strip():
        return None
    try:
        return _to_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"'{name}' is not a valid date/time",
        ) from e


def _same_instant(a: datetime | None, b: datetime | None) -> bool:
    if a is None or b is None:
        return a is b
    return a.replace(microsecond=0) == b.replace(microsecond=0)


def _input_value(dt: datetime | None) -> str:
    return dt.astimezone(timezone.utc).strftime(INPUT_FORMAT) if dt else ""


def _apply_range_edits(view: TelemetryView, start: str | None, end: str | None) -> None:
    if start is not None:
        new_start = _parse_bound("start", start)
        if not _same_instant(new_start, view.range.start):
            view.set_range_start(new_start)
    if end is not None:
        new_end = _parse_bound("end", end)
        if not _same_instant(new_end, view.range.end):
            view.set_range_end(new_end)


def _render_error(request: Request, *, error: str, status_code: int):
    return templates.TemplateResponse(
        request,
        "error.html",
        {
            "request": request,
            "title": "Dashboard unavailable",
            "locale": detect_locale(request),
            "error": error,
        },
        status_code=status_code,
    )


@router.get("/", include_in_schema=False)
def ui_index():
    return RedirectResponse("/ui/dashboard", status_code=303)


@router.get("/dashboard", include_in_schema=False)
def dashboard(
    request: Request,
    seed_store: Annotated[SeedStore, Depends(get_seed_store)],
    registry: Annotated[ViewRegistry, Depends(get_view_registry)],
    service: Annotated[TelemetryRangeService, Depends(get_telemetry_service)],
    start: Annotated[str | None, Query(max_length=64)] = None,
    end: Annotated[str | None, Query(max_length=64)] = None,
    sort: Annotated[str, Query(max_length=32)] = DEFAULT_SORT,
    reverse: bool = True,
):
    view_id = ensure_view_id(request)
    editing = start is not None or end is not None

    # Without range parameters this is a page load and starts from the seed.
    view = registry.get(view_id) if editing else None
    if view is None:
        try:
            view = registry.create(view_id, seed_store.get())
        except SeedLoadError:
            return _render_error(
                request,
                error="Telemetry could not be loaded from RAPT.",
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

    if editing:
        _apply_range_edits(view, start, end)
        sync_view(view, service)

    display = view.current_display()
    notice = view.take_notice()
    rows = sort_rows(display, sort=sort, reverse=reverse)

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "request": request,
            "title": "Fermentation",
            "locale": detect_locale(request),
            "range_start": _input_value(view.range.start),
            "range_end": _input_value(view.range.end),
            "range_min": _input_value(view.initial_range.start),
            "range_max": _input_value(datetime.now(tz=timezone.utc)),
            "columns": [(c.label, c.heading) for c in COLUMNS],
            "rows": table_rows(rows),
            "sort": sort if sort in {c.label for c in COLUMNS} else DEFAULT_SORT,
            "reverse": reverse,
            "chart_payload": chart_payload(display),
            "sample_count": len(display),
            "notice": notice,
        },
    )


@router.get("/dashboard/telemetry.json", include_in_schema=False)
def dashboard_telemetry_json(
    request: Request,
    registry: Annotated[ViewRegistry, Depends(get_view_registry)],
) -> list[dict[str, object]]:
    view_id = get_view_id(request)
    view = registry.get(view_id) if view_id else None
    if view is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="No dashboard view for this session"
        )
    return [
        TelemetrySampleRead.from_sample(s).model_dump(by_alias=True, mode="json")
        for s in view.current_display()
    ]
