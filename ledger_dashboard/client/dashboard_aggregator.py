"""Dashboard metrics for the active business."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, UTC
from typing import Callable, TYPE_CHECKING

from ledger_dashboard.client.data_service import DataService, Unsubscribe
from ledger_dashboard.config import settings
from ledger_dashboard.core.exceptions import AggregationFetchError, DataServiceError
from ledger_dashboard.schemas.dashboard_schemas import DashboardMetrics
from ledger_dashboard.services.dashboard_metrics import compute_dashboard_metrics

if TYPE_CHECKING:
    from ledger_dashboard.client.session_manager import SessionManager

logger = logging.getLogger(__name__)

MetricsListener = Callable[["DashboardAggregator"], None]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DashboardAggregator:
    """
    Fetches the active business's recent invoices and reduces them.

    Reactive fields: metrics, loading, error, business_id.

    Each refresh replaces metrics wholesale. If another refresh starts
    before a fetch returns, that fetch's result is dropped.
    """

    def __init__(
        self,
        data_service: DataService,
        recent_limit: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._data_service = data_service
        self.recent_limit = recent_limit or settings.DASHBOARD_RECENT_LIMIT
        self._clock = clock

        self.metrics = DashboardMetrics.empty()
        self.loading = False
        self.error: AggregationFetchError | None = None
        self.business_id: str | None = None

        self._request_seq = 0
        self._tasks: set[asyncio.Task] = set()
        self._listeners: list[MetricsListener] = []

    def subscribe(self, listener: MetricsListener) -> Unsubscribe:
        """Call ``listener(aggregator)`` whenever metrics or loading change"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def bind(self, session_manager: SessionManager) -> Unsubscribe:
        """
        Refresh on every active-business change of ``session_manager``.

        Must be called from inside the running event loop. If a business is
        already active a refresh for it is scheduled immediately.
        """
        unsubscribe = session_manager.on_active_business_changed(self.schedule_refresh)
        if session_manager.active_business_id is not None:
            self.schedule_refresh(session_manager.active_business_id)
        return unsubscribe

    def schedule_refresh(self, business_id: str | None) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.refresh(business_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait until no scheduled refresh is in flight"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def refresh(self, business_id: str | None) -> DashboardMetrics:
        """
        Run one aggregation cycle for ``business_id``.

        With no business the metrics reset to the empty state. On fetch
        failure the previous metrics are kept and ``error`` is set.

        Returns:
            The metrics current after this call
        """
        self._request_seq += 1
        seq = self._request_seq
        self.business_id = business_id

        if business_id is None:
            self.metrics = DashboardMetrics.empty()
            self.loading = False
            self.error = None
            self._notify()
            return self.metrics

        self.loading = True
        self._notify()

        try:
            invoices = await self._data_service.query_recent_invoices(
                business_id, limit=self.recent_limit
            )
        except DataServiceError as e:
            if seq != self._request_seq:
                return self.metrics
            self.error = AggregationFetchError(business_id, e)
            logger.error(str(self.error))
            self.loading = False
            self._notify()
            return self.metrics

        if seq != self._request_seq:
            logger.debug(f"Discarding invoices fetched for superseded business {business_id}")
            return self.metrics

        self.metrics = compute_dashboard_metrics(invoices, now=self._clock())
        self.error = None
        self.loading = False
        self._notify()
        return self.metrics
