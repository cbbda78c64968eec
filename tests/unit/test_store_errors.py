"""
Unit tests for persistence failures: SQLAlchemy errors surface as StoreError
(503, STORE_UNAVAILABLE) after a single attempt, and the request session
rolls back.
"""

import uuid
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from portal.database import get_db
from portal.exceptions import StoreError
from portal.schemas.purchase import PurchaseCreate
from portal.services.purchase_store import PurchaseStore


def _db_down() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("connection refused"))


def _failing_session() -> MagicMock:
    session = MagicMock()
    session.execute = AsyncMock(side_effect=_db_down())
    session.flush = AsyncMock(side_effect=_db_down())
    return session


def _draft() -> PurchaseCreate:
    return PurchaseCreate(
        uploader_name="Asha Rao",
        vendor_name="Quantum Office Supplies",
        purpose="Procurement",
        amount=Decimal("5000"),
        bill_type="quantum",
        hub="mumbai",
        payment_sequence="payment_without_bill",
        payment_date=date(2026, 10, 20),
    )


@pytest.mark.asyncio
async def test_list_failure_is_store_error():
    session = _failing_session()
    with pytest.raises(StoreError) as exc_info:
        await PurchaseStore(session).list()

    assert exc_info.value.code == "STORE_UNAVAILABLE"
    assert exc_info.value.status_code == 503
    assert isinstance(exc_info.value.__cause__, OperationalError)
    session.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_get_failure_is_not_retried():
    session = _failing_session()
    with pytest.raises(StoreError):
        await PurchaseStore(session).get(uuid.uuid4())
    session.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_failure_is_not_retried():
    session = _failing_session()
    with pytest.raises(StoreError):
        await PurchaseStore(session).update(
            uuid.uuid4(), {"status": "rejected"}, expected_status="pending"
        )
    session.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_delete_failure_is_store_error():
    session = _failing_session()
    with pytest.raises(StoreError):
        await PurchaseStore(session).delete(uuid.uuid4())
    session.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_insert_failure_is_store_error():
    session = _failing_session()
    with pytest.raises(StoreError):
        await PurchaseStore(session).insert(_draft())
    session.flush.assert_awaited_once()


@pytest.mark.asyncio
async def test_request_session_rolls_back_on_store_error():
    session = AsyncMock()
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session

    with patch("portal.database.AsyncSessionLocal", factory):
        gen = get_db()
        assert await gen.__anext__() is session
        with pytest.raises(StoreError):
            await gen.athrow(StoreError("Failed to update purchase"))

    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()
