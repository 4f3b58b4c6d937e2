"""Background KPI computation -- count, churn rate and average monthly charge.

The foreground serialises each request to JSON and hands it to a worker
process, so the worker never shares memory with the caller. Requests carry a
monotonically increasing sequence number; a response is delivered only if
it answers the most recent request, so a slow stale response can never
overwrite newer results.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future, ProcessPoolExecutor

import pandas as pd
from loguru import logger
from pydantic import BaseModel

from churn_analytics.analyses.aggregates import average_monthly, churn_rate
from churn_analytics.analyses.filters import filter_customers
from churn_analytics.models import CustomerRecord, FilterCriteria, frame_to_records, records_to_frame


class KpiRequest(BaseModel):
    seq: int
    rows: list[CustomerRecord]
    filters: FilterCriteria


class KpiResponse(BaseModel):
    seq: int
    count: int
    churn: float
    avg_monthly: float


def encode_request(df: pd.DataFrame, criteria: FilterCriteria, seq: int) -> str:
    return KpiRequest(seq=seq, rows=frame_to_records(df), filters=criteria).model_dump_json()


def handle_request(payload: str) -> str:
    """Worker entry point: JSON request in, JSON response out."""
    request = KpiRequest.model_validate_json(payload)
    filtered = filter_customers(records_to_frame(request.rows), request.filters)
    response = KpiResponse(
        seq=request.seq,
        count=len(filtered),
        churn=churn_rate(filtered),
        avg_monthly=average_monthly(filtered),
    )
    return response.model_dump_json()


class OffloadCoordinator:
    """Issues KPI requests to a worker and delivers only the latest response.

    Args:
        on_response: Optional callback invoked with each delivered response.
            Runs on the executor's callback thread.
        executor: Executor to submit to. Defaults to a private single-worker
            ProcessPoolExecutor that ``close()`` shuts down.
    """

    def __init__(
        self,
        on_response: Callable[[KpiResponse], None] | None = None,
        executor: Executor | None = None,
    ) -> None:
        self._owns_executor = executor is None
        self._executor = executor or ProcessPoolExecutor(max_workers=1)
        self._on_response = on_response
        self._lock = threading.Lock()
        self._idle = threading.Event()
        self._idle.set()
        self._latest_seq = 0
        self.last_response: KpiResponse | None = None
        self.dropped = 0

    @property
    def latest_seq(self) -> int:
        return self._latest_seq

    @property
    def pending(self) -> bool:
        """True while the latest request has not been answered or failed."""
        return not self._idle.is_set()

    def submit(self, df: pd.DataFrame, criteria: FilterCriteria) -> int:
        """Queue a KPI computation for *df* under *criteria*; return its sequence number."""
        with self._lock:
            self._latest_seq += 1
            seq = self._latest_seq
            self._idle.clear()
        try:
            payload = encode_request(df, criteria, seq)
            future = self._executor.submit(handle_request, payload)
        except Exception:
            self._settle_without_response(seq)
            raise
        future.add_done_callback(lambda f: self._deliver(f, seq))
        logger.debug("Submitted KPI request seq={seq} ({n} rows)", seq=seq, n=len(df))
        return seq

    def _settle_without_response(self, seq: int) -> None:
        # An older response must not stand in for a failed latest request
        with self._lock:
            if seq == self._latest_seq:
                self.last_response = None
                self._idle.set()

    def _deliver(self, future: Future, seq: int) -> None:
        try:
            response = KpiResponse.model_validate_json(future.result())
        except Exception as e:
            logger.error("KPI request seq={seq} failed: {err}", seq=seq, err=e)
            self._settle_without_response(seq)
            return

        with self._lock:
            if response.seq != self._latest_seq:
                self.dropped += 1
                logger.debug(
                    "Dropped stale KPI response seq={seq} (latest={latest})",
                    seq=response.seq,
                    latest=self._latest_seq,
                )
                return
            self.last_response = response

        try:
            if self._on_response:
                self._on_response(response)
        finally:
            # The callback may have issued a newer request
            with self._lock:
                if seq == self._latest_seq:
                    self._idle.set()

    def wait(self, timeout: float | None = None) -> KpiResponse | None:
        """Block until the latest request has been handled; return its response."""
        if not self._idle.wait(timeout):
            logger.warning("Timed out waiting for KPI response seq={seq}", seq=self._latest_seq)
            return None
        return self.last_response

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> OffloadCoordinator:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
