"""
Purchase request routes: public submission and bill attachment, plus the
director/finance reads and workflow actions.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status
import structlog

from portal.middleware.auth import get_current_role, require_portal_role
from portal.middleware.store import get_purchase_store
from portal.schemas.purchase import (
    ActionRequest,
    BillReference,
    PurchaseCreate,
    PurchaseResponse,
)
from portal.services import workflow
from portal.services.dashboard_service import to_response
from portal.services.purchase_service import attach_bill, submit_purchase
from portal.services.purchase_store import PurchaseStore

logger = structlog.get_logger()
router = APIRouter()


# ---------- SUBMIT ----------


@router.post("", response_model=PurchaseResponse, status_code=status.HTTP_201_CREATED)
async def create_purchase(
    body: PurchaseCreate,
    store: PurchaseStore = Depends(get_purchase_store),
):
    purchase = await submit_purchase(store, body)
    return to_response(purchase)


@router.post("/{purchase_id}/bill", response_model=PurchaseResponse)
async def attach_purchase_bill(
    purchase_id: str,
    body: BillReference,
    store: PurchaseStore = Depends(get_purchase_store),
):
    """Attach a bill uploaded via /files/bills to a request that has none yet."""
    purchase = await attach_bill(store, purchase_id, body)
    return to_response(purchase)


# ---------- LIST / GET ----------


@router.get("", response_model=List[PurchaseResponse])
async def list_purchases(
    _role: workflow.Role = Depends(require_portal_role),
    store: PurchaseStore = Depends(get_purchase_store),
):
    purchases = await store.list()
    return [to_response(p) for p in purchases]


@router.get("/{purchase_id}", response_model=PurchaseResponse)
async def get_purchase(
    purchase_id: str,
    _role: workflow.Role = Depends(require_portal_role),
    store: PurchaseStore = Depends(get_purchase_store),
):
    return to_response(await store.get(purchase_id))


# ---------- WORKFLOW ----------


@router.post("/{purchase_id}/actions", response_model=PurchaseResponse)
async def act_on_purchase(
    purchase_id: str,
    body: ActionRequest,
    role: workflow.Role = Depends(get_current_role),
    store: PurchaseStore = Depends(get_purchase_store),
):
    """Apply director_approve, finance_approve or reject. Illegal transitions are 403."""
    command = workflow.command_for(body.action)
    purchase = await workflow.apply_transition(store, purchase_id, command, role)
    return to_response(purchase)


@router.delete("/{purchase_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_purchase(
    purchase_id: str,
    role: workflow.Role = Depends(get_current_role),
    store: PurchaseStore = Depends(get_purchase_store),
):
    await workflow.apply_transition(store, purchase_id, workflow.Delete(), role)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
