"""
Dashboard controller: fetch, filter/search, render rows with affordances,
act, re-fetch.

Row affordances come from portal.services.workflow; nothing here looks at
amounts or approval stamps to decide what an actor may do.
"""

from decimal import Decimal
from typing import Iterable

import structlog

from portal.models.purchase import Purchase
from portal.schemas.purchase import (
    AllowedActions,
    DashboardRow,
    DashboardStats,
    DashboardView,
    PurchaseResponse,
    PurchaseStatus,
)
from portal.services import workflow
from portal.services.purchase_store import PurchaseStore

logger = structlog.get_logger()

STATUS_ALL = "all"
STATUS_FILTERS = {STATUS_ALL} | {s.value for s in PurchaseStatus}


def to_response(p: Purchase) -> PurchaseResponse:
    return PurchaseResponse(
        id=str(p.id),
        uploader_name=p.uploader_name,
        vendor_name=p.vendor_name,
        purpose=p.purpose,
        amount=p.amount,
        bill_type=p.bill_type,
        hub=p.hub,
        payment_sequence=p.payment_sequence,
        payment_date=p.payment_date.isoformat() if p.payment_date else "",
        file_url=p.file_url,
        file_name=p.file_name,
        status=p.status,
        director_approval=p.director_approval,
        finance_approval=p.finance_approval,
        created_at=p.created_at.isoformat() if p.created_at else "",
        updated_at=p.updated_at.isoformat() if p.updated_at else "",
    )


def filter_purchases(
    purchases: Iterable[Purchase], search: str = "", status: str = STATUS_ALL
) -> list[Purchase]:
    """Case-insensitive substring match on uploader or vendor, plus status."""
    if status not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status!r}")
    needle = (search or "").strip().lower()
    out = []
    for p in purchases:
        if needle and needle not in p.uploader_name.lower() and needle not in p.vendor_name.lower():
            continue
        if status != STATUS_ALL and p.status != status:
            continue
        out.append(p)
    return out


def compute_stats(purchases: list[Purchase]) -> DashboardStats:
    counts = {s.value: 0 for s in PurchaseStatus}
    total_amount = Decimal("0")
    for p in purchases:
        counts[p.status] = counts.get(p.status, 0) + 1
        total_amount += Decimal(str(p.amount))
    return DashboardStats(
        total=len(purchases),
        pending=counts[PurchaseStatus.PENDING.value],
        director_approved=counts[PurchaseStatus.DIRECTOR_APPROVED.value],
        approved=counts[PurchaseStatus.FINANCE_APPROVED.value],
        rejected=counts[PurchaseStatus.REJECTED.value],
        total_amount=total_amount,
    )


def build_rows(purchases: list[Purchase], role: workflow.Role) -> list[DashboardRow]:
    return [
        DashboardRow(
            purchase=to_response(p),
            actions=AllowedActions(**workflow.allowed_actions(p, role)),
        )
        for p in purchases
    ]


class DashboardController:
    def __init__(self, store: PurchaseStore, role: workflow.Role):
        self.store = store
        self.role = role

    async def view(self, search: str = "", status: str = STATUS_ALL) -> DashboardView:
        purchases = filter_purchases(await self.store.list(), search, status)
        return DashboardView(
            role=self.role.value,
            search=search or "",
            status=status,
            stats=compute_stats(purchases),
            rows=build_rows(purchases, self.role),
        )

    async def act(
        self,
        purchase_id: str,
        action: str,
        search: str = "",
        status: str = STATUS_ALL,
    ) -> DashboardView:
        """Apply one action, then return the re-fetched view."""
        command = workflow.command_for(action)
        await workflow.apply_transition(self.store, purchase_id, command, self.role)
        return await self.view(search, status)
