"""End-to-end tests for StockAssigner: validate, expand, dispatch."""

import asyncio

import pytest
from core.assigner import StockAssigner
from core.exceptions import PlanValidationError
from core.models import DispatchConfig
from core.pricing import PriceSynchronizer
from tests.conftest import FakeService, create_session


@pytest.fixture
def planned_session(vodka_lots):
    """Vodka A=10, B=6 to 2 bars, 8 per bar → 4 tasks."""
    session = create_session(vodka_lots, bar_count=2)
    session.set_group_quantity(session.groups[0].key, "8")
    return session


def execute(assigner, service, **kwargs):
    return asyncio.run(assigner.execute(service, **kwargs))


class TestSuccessfulRun:

    def test_all_tasks_succeed(self, planned_session):
        service = FakeService()
        outcome = execute(StockAssigner(planned_session), service)

        assert len(service.calls) == 4
        assert outcome.summary.success_count == 4
        assert outcome.message == "4 items assigned to 2 bars"
        assert outcome.caches_to_refresh == ["stock", "bars", "global-inventory", "recipes"]

    def test_session_reset_when_nothing_failed(self, planned_session):
        outcome = execute(StockAssigner(planned_session), FakeService())

        assert outcome.should_close
        assert planned_session.configs == {}
        assert planned_session.selected_ids == []
        assert planned_session.groups == []

    def test_single_bar_label(self, vodka_lots):
        session = create_session(vodka_lots, bar_count=1)
        session.set_group_quantity(session.groups[0].key, "3")

        outcome = execute(StockAssigner(session), FakeService())

        assert outcome.message == "1 item assigned to Main Bar"

    def test_direct_sale_payload_reaches_service(self, vodka_lots):
        session = create_session(vodka_lots, bar_count=1)
        key = session.groups[0].key
        session.set_group_quantity(key, "2")
        pricing = PriceSynchronizer(session)
        pricing.set_direct_sale(key, True)
        pricing.set_price(key, "18.5")
        service = FakeService()

        execute(StockAssigner(session), service)

        assert service.calls[0].to_payload()["salePrice"] == 1850

    def test_progress_follows_configured_chunk_size(self, planned_session):
        snapshots = []
        assigner = StockAssigner(planned_session, config=DispatchConfig(batch_size=3))

        execute(assigner, FakeService(), on_progress=snapshots.append)

        assert [s.completed for s in snapshots] == [3, 4]


class TestPartialFailure:

    def test_partial_failure_keeps_plan_open(self, planned_session):
        outcome = execute(StockAssigner(planned_session), FakeService(fail_calls={1}))

        assert outcome.summary.is_success
        assert not outcome.should_close
        assert outcome.message == "3 items assigned to 2 bars, 1 errors"
        assert outcome.summary.error_samples == [
            "Error assigning Vodka to Main Bar: Insufficient stock"
        ]
        assert len(planned_session.configs) == 2

    def test_everything_failed(self, planned_session):
        outcome = execute(StockAssigner(planned_session), FakeService(fail_calls=range(4)))

        assert not outcome.summary.is_success
        assert outcome.message == "No items assigned (4 errors)"
        assert outcome.caches_to_refresh == []


class TestInvalidPlan:

    def test_invalid_plan_sends_nothing(self, vodka_lots):
        session = create_session(vodka_lots, bar_count=2)
        service = FakeService()

        with pytest.raises(PlanValidationError) as exc_info:
            execute(StockAssigner(session), service)

        assert exc_info.value.errors == ["Enter the quantity for Vodka"]
        assert service.calls == []

    def test_preview_does_not_dispatch(self, planned_session):
        tasks = StockAssigner(planned_session).preview()

        assert len(tasks) == 4
        assert len(planned_session.configs) == 2
