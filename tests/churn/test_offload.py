"""Tests for churn_analytics.offload."""

from __future__ import annotations

import json
from concurrent.futures import Executor, Future, ThreadPoolExecutor

import pytest

from churn_analytics.models import FilterCriteria
from churn_analytics.offload import (
    KpiRequest,
    KpiResponse,
    OffloadCoordinator,
    encode_request,
    handle_request,
)


class ManualExecutor(Executor):
    """Holds submitted work until the test resolves it."""

    def __init__(self):
        self.pending: list[tuple[Future, str]] = []

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        self.pending.append((future, fn(*args, **kwargs)))
        return future

    def resolve(self, index: int) -> None:
        future, result = self.pending[index]
        future.set_result(result)

    def fail(self, index: int, exc: Exception) -> None:
        future, _ = self.pending[index]
        future.set_exception(exc)


class TestProtocol:
    def test_request_is_plain_json(self, example_df):
        payload = encode_request(example_df, FilterCriteria(), seq=3)
        data = json.loads(payload)
        assert data["seq"] == 3
        assert len(data["rows"]) == 100
        assert data["filters"]["contract"] == "All"

    def test_request_round_trips_records(self, example_df):
        payload = encode_request(example_df, FilterCriteria(contract="One year"), seq=1)
        request = KpiRequest.model_validate_json(payload)
        assert request.rows[0].customer_id == "C-0000"
        assert request.filters.contract.value == "One year"

    def test_handle_request(self, example_df):
        payload = encode_request(example_df, FilterCriteria(contract="Month-to-month"), seq=7)
        response = KpiResponse.model_validate_json(handle_request(payload))
        assert response.seq == 7
        assert response.count == 60
        assert response.churn == pytest.approx(50.0)
        assert response.avg_monthly == pytest.approx(71.667, abs=1e-3)

    def test_handle_request_empty_selection(self, example_df):
        criteria = FilterCriteria(tenure_min=50, tenure_max=10)
        response = KpiResponse.model_validate_json(handle_request(encode_request(example_df, criteria, seq=1)))
        assert (response.count, response.churn, response.avg_monthly) == (0, 0.0, 0.0)


class TestOffloadCoordinator:
    def test_thread_pool(self, example_df):
        with ThreadPoolExecutor(max_workers=1) as pool:
            coordinator = OffloadCoordinator(executor=pool)
            seq = coordinator.submit(example_df, FilterCriteria())
            response = coordinator.wait(timeout=10)
        assert seq == 1
        assert response.count == 100
        assert response.churn == pytest.approx(36.0)

    def test_sequence_numbers_increase(self, example_df):
        coordinator = OffloadCoordinator(executor=ManualExecutor())
        seqs = [coordinator.submit(example_df, FilterCriteria()) for _ in range(3)]
        assert seqs == [1, 2, 3]
        assert coordinator.latest_seq == 3

    def test_stale_response_dropped(self, example_df):
        executor = ManualExecutor()
        received: list[KpiResponse] = []
        coordinator = OffloadCoordinator(on_response=received.append, executor=executor)
        coordinator.submit(example_df, FilterCriteria())
        coordinator.submit(example_df, FilterCriteria(contract="Two year"))

        # Newer answer arrives first; the older one must not overwrite it
        executor.resolve(1)
        executor.resolve(0)

        assert [r.seq for r in received] == [2]
        assert coordinator.last_response.count == 15
        assert coordinator.dropped == 1

    def test_stale_response_while_latest_pending(self, example_df):
        executor = ManualExecutor()
        coordinator = OffloadCoordinator(executor=executor)
        coordinator.submit(example_df, FilterCriteria())
        coordinator.submit(example_df, FilterCriteria())
        executor.resolve(0)
        assert coordinator.last_response is None
        assert coordinator.wait(timeout=0) is None
        executor.resolve(1)
        assert coordinator.wait(timeout=0).seq == 2

    def test_failed_request_logged_not_raised(self, example_df):
        executor = ManualExecutor()
        received: list[KpiResponse] = []
        coordinator = OffloadCoordinator(on_response=received.append, executor=executor)
        coordinator.submit(example_df, FilterCriteria())
        executor.fail(0, RuntimeError("worker died"))
        assert received == []
        assert coordinator.wait(timeout=0) is None

    def test_process_pool_default(self, example_df):
        received: list[KpiResponse] = []
        with OffloadCoordinator(on_response=received.append) as coordinator:
            coordinator.submit(example_df, FilterCriteria())
            response = coordinator.wait(timeout=60)
        assert response is not None
        assert response.count == 100
        assert response.churn == pytest.approx(36.0)
        assert received == [response]

    def test_failed_latest_does_not_return_older_response(self, example_df):
        executor = ManualExecutor()
        coordinator = OffloadCoordinator(executor=executor)
        coordinator.submit(example_df, FilterCriteria())
        executor.resolve(0)
        assert coordinator.wait(timeout=0).seq == 1

        coordinator.submit(example_df, FilterCriteria(contract="Two year"))
        executor.fail(1, RuntimeError("worker died"))
        assert not coordinator.pending
        assert coordinator.wait(timeout=0) is None

    def test_request_issued_from_callback_stays_pending(self, example_df):
        executor = ManualExecutor()
        seen: list[int] = []

        def resubmit(response):
            seen.append(response.seq)
            if response.seq == 1:
                coordinator.submit(example_df, FilterCriteria(contract="One year"))

        coordinator = OffloadCoordinator(on_response=resubmit, executor=executor)
        coordinator.submit(example_df, FilterCriteria())
        executor.resolve(0)

        assert coordinator.latest_seq == 2
        assert coordinator.pending
        assert coordinator.wait(timeout=0) is None

        executor.resolve(1)
        assert seen == [1, 2]
        assert coordinator.wait(timeout=0).count == 25

    def test_submit_failure_does_not_leave_pending(self, example_df):
        class RejectingExecutor(ManualExecutor):
            def submit(self, fn, /, *args, **kwargs):
                raise RuntimeError("cannot schedule new futures after shutdown")

        coordinator = OffloadCoordinator(executor=RejectingExecutor())
        with pytest.raises(RuntimeError, match="after shutdown"):
            coordinator.submit(example_df, FilterCriteria())
        assert not coordinator.pending
        assert coordinator.wait(timeout=0) is None

    def test_pending_tracks_latest_request(self, example_df):
        executor = ManualExecutor()
        coordinator = OffloadCoordinator(executor=executor)
        assert not coordinator.pending
        coordinator.submit(example_df, FilterCriteria())
        assert coordinator.pending
        executor.resolve(0)
        assert not coordinator.pending
