"""Tests for the credit ledger."""

import asyncio

import pytest

from bluecarbon.exceptions import NotFoundError, PersistenceError, ValidationError
from bluecarbon.models.entities.localstore import CreditEntry, Project
from bluecarbon.models.factory import RecordFactory
from bluecarbon.models.operations.credits import credit_balance, credit_issue

from conftest import PROJECT_FORM, active_project, run


class TestIssue:

    def test_issue_raises_project_total(self, field_registry, store):
        project = active_project(field_registry, tonnes=100.0)

        entry = run(field_registry.issue_credits(project.id, 60.0, unit_price=12.5))

        assert entry.data.kind == "issue"
        assert entry.data.unit_price == 12.5
        assert entry.synced is True
        assert Project.get(store, project.id).data.credits_issued == 60.0

    def test_cannot_exceed_sequestration(self, field_registry, store):
        project = active_project(field_registry, tonnes=100.0)
        run(field_registry.issue_credits(project.id, 60.0))

        with pytest.raises(ValidationError) as exc_info:
            run(field_registry.issue_credits(project.id, 50.0))

        assert exc_info.value.field == "quantity"
        assert Project.get(store, project.id).data.credits_issued == 60.0
        assert len(CreditEntry.list(store)) == 1

    def test_concurrent_issues_cannot_exceed_sequestration(self, field_registry, store):
        project = active_project(field_registry, tonnes=100.0)

        async def _both():
            return await asyncio.gather(
                field_registry.issue_credits(project.id, 60.0),
                field_registry.issue_credits(project.id, 60.0),
                return_exceptions=True,
            )

        results = run(_both())

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], ValidationError)
        assert errors[0].field == "quantity"
        assert Project.get(store, project.id).data.credits_issued == 60.0
        assert len(CreditEntry.list(store)) == 1

    def test_project_must_be_active(self, field_registry):
        project = run(field_registry.submit_project(PROJECT_FORM))
        with pytest.raises(ValidationError):
            run(field_registry.issue_credits(project.id, 1.0))

    def test_unknown_project(self, field_registry):
        with pytest.raises(NotFoundError):
            run(field_registry.issue_credits(99, 1.0))

    @pytest.mark.parametrize("quantity", [0, -5])
    def test_quantity_must_be_positive(self, field_registry, quantity):
        project = active_project(field_registry)
        with pytest.raises(ValidationError) as exc_info:
            run(field_registry.issue_credits(project.id, quantity))
        assert exc_info.value.field == "quantity"

    def test_ledger_write_failure_reverts_project(self, failing_store, failing_backend):
        factory = RecordFactory(failing_store, methodologies=["VM0033"])
        project = run(Project.insert(failing_store, factory.build_project(PROJECT_FORM)))
        run(failing_store.replace(
            "projects", project.id,
            lambda p: p.with_data(status="active", carbon_sequestered=50.0),
        ))
        failing_backend.fail_keys.add("credits")

        with pytest.raises(PersistenceError):
            run(credit_issue(failing_store, factory, project.id, 20.0))

        assert Project.get(failing_store, project.id).data.credits_issued == 0.0
        assert CreditEntry.list(failing_store) == []


class TestSpend:

    def test_balance_after_retire_and_trade(self, field_registry):
        project = active_project(field_registry, tonnes=100.0)
        run(field_registry.issue_credits(project.id, 60.0))
        run(field_registry.retire_credits(project.id, 20.0, note="Offsetting 2024 fleet"))
        trade = run(field_registry.trade_credits(project.id, 30.0, 18.0, counterparty="Coastal Buyers Ltd"))

        assert trade.data.counterparty == "Coastal Buyers Ltd"
        balance = field_registry.credit_balance(project.id)
        assert (balance.issued, balance.retired, balance.traded, balance.available) == (60.0, 20.0, 30.0, 10.0)

    def test_cannot_spend_more_than_available(self, field_registry, store):
        project = active_project(field_registry, tonnes=100.0)
        run(field_registry.issue_credits(project.id, 10.0))

        with pytest.raises(ValidationError):
            run(field_registry.retire_credits(project.id, 15.0))
        with pytest.raises(ValidationError):
            run(field_registry.trade_credits(project.id, 11.0, 5.0))

        assert credit_balance(store, project.id).available == 10.0

    def test_concurrent_retires_cannot_overspend(self, field_registry, store):
        project = active_project(field_registry, tonnes=100.0)
        run(field_registry.issue_credits(project.id, 10.0))

        async def _both():
            return await asyncio.gather(
                field_registry.retire_credits(project.id, 10.0),
                field_registry.retire_credits(project.id, 10.0),
                return_exceptions=True,
            )

        results = run(_both())

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], ValidationError)
        balance = credit_balance(store, project.id)
        assert (balance.retired, balance.available) == (10.0, 0.0)

    def test_spending_does_not_change_issued_total(self, field_registry, store):
        project = active_project(field_registry, tonnes=100.0)
        run(field_registry.issue_credits(project.id, 40.0))
        run(field_registry.retire_credits(project.id, 40.0))

        assert Project.get(store, project.id).data.credits_issued == 40.0
        assert credit_balance(store, project.id).available == 0.0

    def test_ledger_entries_wait_offline(self, field_registry, monitor):
        project = active_project(field_registry, tonnes=100.0)
        monitor.report(False)

        entry = run(field_registry.issue_credits(project.id, 5.0))

        assert entry.synced is False
        assert field_registry.get_sync_status().collections["credits"].pending == 1
