from fastapi import APIRouter, Depends, HTTPException, Query, status

from portal.middleware.auth import require_portal_role
from portal.middleware.store import get_purchase_store
from portal.schemas.purchase import DashboardActionRequest, DashboardView
from portal.services.dashboard_service import STATUS_ALL, STATUS_FILTERS, DashboardController
from portal.services.purchase_store import PurchaseStore
from portal.services.workflow import Role

router = APIRouter()


def _check_status_filter(value: str) -> str:
    if value not in STATUS_FILTERS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": f"status must be one of {sorted(STATUS_FILTERS)}",
                }
            },
        )
    return value


@router.get("", response_model=DashboardView)
async def get_dashboard(
    search: str = Query("", max_length=200),
    status_filter: str = Query(STATUS_ALL, alias="status"),
    role: Role = Depends(require_portal_role),
    store: PurchaseStore = Depends(get_purchase_store),
):
    controller = DashboardController(store, role)
    return await controller.view(search, _check_status_filter(status_filter))


@router.post("/actions", response_model=DashboardView)
async def dashboard_action(
    body: DashboardActionRequest,
    search: str = Query("", max_length=200),
    status_filter: str = Query(STATUS_ALL, alias="status"),
    role: Role = Depends(require_portal_role),
    store: PurchaseStore = Depends(get_purchase_store),
):
    """Apply one action and return the re-fetched dashboard."""
    controller = DashboardController(store, role)
    return await controller.act(
        body.purchase_id, body.action, search, _check_status_filter(status_filter)
    )
