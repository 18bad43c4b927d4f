from __future__ import annotations

import logging
import threading
from collections import OrderedDict

from hydrodash.models.telemetry import SeedData
from hydrodash.services.reconcile import TelemetryView
from hydrodash.services.telemetry import TelemetryRangeService

logger = logging.getLogger(__name__)


class ViewRegistry:
    """In-memory dashboard views, one per browser session."""

    def __init__(self, *, max_views: int) -> None:
        self._max_views = max(int(max_views), 1)
        self._lock = threading.Lock()
        self._views: OrderedDict[str, TelemetryView] = OrderedDict()

    def create(self, view_id: str, seed: SeedData) -> TelemetryView:
        view = TelemetryView(hydrometer_id=seed.hydrometer_id, token=seed.token)
        view.initialize(seed.series)
        with self._lock:
            self._views[view_id] = view
            self._views.move_to_end(view_id)
            while len(self._views) > self._max_views:
                evicted, _ = self._views.popitem(last=False)
                logger.debug("Evicted dashboard view %s", evicted)
        return view

    def get(self, view_id: str) -> TelemetryView | None:
        with self._lock:
            view = self._views.get(view_id)
            if view is not None:
                self._views.move_to_end(view_id)
            return view

    def __len__(self) -> int:
        with self._lock:
            return len(self._views)


def sync_view(view: TelemetryView, service: TelemetryRangeService) -> int:
    """Fetch while the view's range is dirty and no fetch is in flight.

    Returns the number of fetches issued.
    """
    issued = 0
    while True:
        request = view.begin_fetch()
        if request is None:
            return issued
        issued += 1
        view.resolve(request, service.fetch_outcome(request))
