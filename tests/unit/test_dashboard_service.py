"""
Unit tests for portal/services/dashboard_service.py

Tests: search/status filtering, summary stats, row affordances, and the
act-then-refetch cycle of DashboardController.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from portal.models.purchase import Purchase
from portal.services.dashboard_service import (
    DashboardController,
    build_rows,
    compute_stats,
    filter_purchases,
)
from portal.services.workflow import Role


def _make_purchase(uploader: str, vendor: str, amount: str, status: str = "pending") -> Purchase:
    now = datetime(2026, 10, 19, tzinfo=timezone.utc)
    return Purchase(
        id=uuid.uuid4(),
        uploader_name=uploader,
        vendor_name=vendor,
        purpose="Repair",
        amount=Decimal(amount),
        bill_type="covalent",
        hub="pune",
        payment_sequence="payment_first",
        payment_date=date(2026, 10, 25),
        status=status,
        director_approval=None,
        finance_approval=None,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def purchases():
    return [
        _make_purchase("Asha Rao", "Quantum Supplies", "2500.50"),
        _make_purchase("Vikram Shah", "Delhi Fabricators", "48000", status="rejected"),
        _make_purchase("Meera Iyer", "Asha Traders", "12000", status="finance_approved"),
        _make_purchase("Rahul K", "Pune Payroll", "9000", status="director_approved"),
    ]


def test_search_matches_uploader_or_vendor_case_insensitively(purchases):
    found = filter_purchases(purchases, search="ASHA")
    assert [p.uploader_name for p in found] == ["Asha Rao", "Meera Iyer"]


def test_status_filter(purchases):
    found = filter_purchases(purchases, status="rejected")
    assert [p.vendor_name for p in found] == ["Delhi Fabricators"]
    assert filter_purchases(purchases, status="all") == purchases


def test_search_and_status_combine(purchases):
    assert filter_purchases(purchases, search="asha", status="pending") == [purchases[0]]


def test_unknown_status_filter_raises(purchases):
    with pytest.raises(ValueError):
        filter_purchases(purchases, status="approved")


def test_stats(purchases):
    stats = compute_stats(purchases)
    assert stats.total == 4
    assert stats.pending == 1
    assert stats.director_approved == 1
    assert stats.approved == 1
    assert stats.rejected == 1
    assert stats.total_amount == Decimal("71500.50")


def test_stats_of_empty_list():
    stats = compute_stats([])
    assert stats.total == 0
    assert stats.total_amount == Decimal("0")


def test_rows_carry_workflow_affordances(purchases):
    rows = build_rows(purchases, Role.FINANCE)
    small_pending, rejected, approved, _ = rows
    assert small_pending.actions.finance_approve is True
    assert small_pending.actions.director_approve is False
    assert rejected.actions.reject is False
    assert approved.actions.reject is False
    assert all(r.actions.delete for r in rows)


@pytest.mark.asyncio
async def test_act_applies_then_refetches(purchases):
    store = AsyncMock()
    target = purchases[0]
    store.get.return_value = target
    store.update.return_value = target
    store.list.return_value = purchases

    controller = DashboardController(store, Role.FINANCE)
    view = await controller.act(str(target.id), "finance_approve")

    store.update.assert_awaited_once()
    assert store.update.call_args.kwargs["expected_status"] == "pending"
    store.list.assert_awaited_once()
    assert view.role == "finance"
    assert view.stats.total == 4


@pytest.mark.asyncio
async def test_view_renders_filtered_rows(purchases):
    store = AsyncMock()
    store.list.return_value = purchases

    view = await DashboardController(store, Role.DIRECTOR).view(search="pune")

    assert [r.purchase.vendor_name for r in view.rows] == ["Pune Payroll"]
    assert view.rows[0].purchase.amount == Decimal("9000")
    assert view.stats.total == 1
