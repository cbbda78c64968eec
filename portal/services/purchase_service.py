"""Submission-side operations: draft validation, submit, attach bill."""

from datetime import datetime, timezone
from typing import Mapping, Union

import pydantic
import structlog

from portal.exceptions import ConflictError, ValidationError
from portal.models.purchase import Purchase
from portal.schemas.purchase import BillReference, PurchaseCreate
from portal.services.purchase_store import PurchaseStore

logger = structlog.get_logger()


def _describe(exc: pydantic.ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def validate_draft(data: Mapping) -> PurchaseCreate:
    """Turn raw submission data into a PurchaseCreate or raise ValidationError."""
    try:
        return PurchaseCreate.model_validate(dict(data))
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid purchase request: {_describe(e)}") from e


async def submit_purchase(
    store: PurchaseStore, draft: Union[PurchaseCreate, Mapping]
) -> Purchase:
    if not isinstance(draft, PurchaseCreate):
        draft = validate_draft(draft)
    purchase = await store.insert(draft)
    logger.info(
        "purchase_submitted",
        purchase_id=str(purchase.id),
        uploader=purchase.uploader_name,
        vendor=purchase.vendor_name,
        has_bill=purchase.file_url is not None,
    )
    return purchase


async def attach_bill(
    store: PurchaseStore, purchase_id: str, bill: BillReference
) -> Purchase:
    """Attach a bill to a request that has none yet. Workflow fields are untouched."""
    purchase = await store.get(purchase_id)
    if purchase.file_url is not None:
        raise ConflictError(
            "A bill is already attached to this purchase request",
            code="BILL_ALREADY_ATTACHED",
        )
    updated = await store.update(
        purchase_id,
        {
            "file_url": bill.file_url,
            "file_name": bill.file_name,
            "updated_at": datetime.now(timezone.utc),
        },
        require_no_bill=True,
    )
    logger.info("purchase_bill_attached", purchase_id=str(purchase_id), file_name=bill.file_name)
    return updated
