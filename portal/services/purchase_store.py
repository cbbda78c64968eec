"""Purchase record store: list/get/insert/update/delete over the purchases table."""

import uuid
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy import select, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from portal.exceptions import ConflictError, NotFoundError, StoreError
from portal.models.purchase import Purchase
from portal.schemas.purchase import PurchaseCreate

logger = structlog.get_logger()

# Fields a caller may write through update(); id and created_at never change.
UPDATABLE_FIELDS = frozenset({
    "status",
    "director_approval",
    "finance_approval",
    "file_url",
    "file_name",
    "updated_at",
})


def _parse_id(purchase_id: Union[str, uuid.UUID]) -> uuid.UUID:
    if isinstance(purchase_id, uuid.UUID):
        return purchase_id
    try:
        return uuid.UUID(str(purchase_id))
    except (ValueError, TypeError):
        # a malformed id can never match a row
        raise NotFoundError(f"Purchase request {purchase_id} not found") from None


class PurchaseStore:
    """
    Persistence for purchase requests on a caller-owned AsyncSession.

    Methods flush but never commit; the request-scoped session in
    portal.database.get_db commits or rolls back. SQLAlchemy failures are
    re-raised as StoreError without retry.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list(self) -> list[Purchase]:
        try:
            result = await self.session.execute(
                select(Purchase).order_by(Purchase.created_at.desc(), Purchase.id)
            )
        except SQLAlchemyError as e:
            logger.error("purchase_list_failed", error=str(e))
            raise StoreError("Failed to fetch purchases") from e
        return list(result.scalars().all())

    async def get(self, purchase_id: Union[str, uuid.UUID]) -> Purchase:
        pid = _parse_id(purchase_id)
        try:
            result = await self.session.execute(
                select(Purchase)
                .where(Purchase.id == pid)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            logger.error("purchase_get_failed", purchase_id=str(pid), error=str(e))
            raise StoreError("Failed to fetch purchase") from e
        purchase = result.scalar_one_or_none()
        if not purchase:
            raise NotFoundError(f"Purchase request {pid} not found")
        return purchase

    async def insert(self, draft: PurchaseCreate) -> Purchase:
        now = datetime.now(timezone.utc)
        purchase = Purchase(
            uploader_name=draft.uploader_name,
            vendor_name=draft.vendor_name,
            purpose=draft.purpose.value,
            amount=draft.amount,
            bill_type=draft.bill_type.value,
            hub=draft.hub.value,
            payment_sequence=draft.payment_sequence.value,
            payment_date=draft.payment_date,
            file_url=draft.file_url,
            file_name=draft.file_name,
            status="pending",
            director_approval=None,
            finance_approval=None,
            created_at=now,
            updated_at=now,
        )
        try:
            self.session.add(purchase)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("purchase_insert_failed", error=str(e))
            raise StoreError("Failed to save purchase") from e

        logger.info(
            "purchase_inserted",
            purchase_id=str(purchase.id),
            amount=str(purchase.amount),
            hub=purchase.hub,
        )
        return purchase

    async def update(
        self,
        purchase_id: Union[str, uuid.UUID],
        fields: dict,
        expected_status: Optional[str] = None,
        require_no_bill: bool = False,
    ) -> Purchase:
        """
        Write ``fields`` to one row in a single UPDATE.

        With ``expected_status`` the UPDATE only matches while the row still
        has that status; with ``require_no_bill`` only while no file is
        attached. A miss on an existing row raises ConflictError.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")

        pid = _parse_id(purchase_id)
        stmt = update(Purchase).where(Purchase.id == pid)
        if expected_status is not None:
            stmt = stmt.where(Purchase.status == expected_status)
        if require_no_bill:
            stmt = stmt.where(Purchase.file_url.is_(None))
        stmt = stmt.values(**fields).execution_options(synchronize_session=False)

        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("purchase_update_failed", purchase_id=str(pid), error=str(e))
            raise StoreError("Failed to update purchase") from e

        if result.rowcount == 0:
            # distinguish a missing row from one whose status moved on
            current = await self.get(pid)
            if require_no_bill and current.file_url is not None:
                logger.warning("purchase_bill_conflict", purchase_id=str(pid))
                raise ConflictError(
                    "A bill is already attached to this purchase request",
                    code="BILL_ALREADY_ATTACHED",
                )
            logger.warning(
                "purchase_update_conflict",
                purchase_id=str(pid),
                expected_status=expected_status,
                actual_status=current.status,
            )
            raise ConflictError(
                f"Purchase request changed to {current.status} before the update was applied"
            )

        return await self.get(pid)

    async def delete(self, purchase_id: Union[str, uuid.UUID]) -> None:
        pid = _parse_id(purchase_id)
        try:
            result = await self.session.execute(
                delete(Purchase)
                .where(Purchase.id == pid)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            logger.error("purchase_delete_failed", purchase_id=str(pid), error=str(e))
            raise StoreError("Failed to delete purchase") from e

        if result.rowcount == 0:
            raise NotFoundError(f"Purchase request {pid} not found")
        logger.info("purchase_deleted", purchase_id=str(pid))
