"""Unit tests for draft validation and bill attachment in portal/services/purchase_service.py"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from portal.exceptions import ConflictError, ValidationError
from portal.schemas.purchase import BillReference, PurchaseCreate
from portal.services.purchase_service import attach_bill, submit_purchase, validate_draft


def _draft(**overrides) -> dict:
    data = {
        "uploader_name": "Asha Rao",
        "vendor_name": "Quantum Office Supplies",
        "purpose": "Small Purchase",
        "amount": "2450.00",
        "bill_type": "quantum",
        "hub": "mumbai",
        "payment_sequence": "payment_without_bill",
        "payment_date": "2026-10-01",
    }
    data.update(overrides)
    return data


def test_valid_draft_without_bill():
    draft = validate_draft(_draft())
    assert isinstance(draft, PurchaseCreate)
    assert draft.file_url is None and draft.file_name is None


def test_negative_amount_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        validate_draft(_draft(amount="-1"))
    assert "amount" in exc_info.value.message


def test_missing_field_is_rejected():
    data = _draft()
    del data["vendor_name"]
    with pytest.raises(ValidationError) as exc_info:
        validate_draft(data)
    assert "vendor_name" in exc_info.value.message


def test_blank_name_is_rejected():
    with pytest.raises(ValidationError):
        validate_draft(_draft(uploader_name="   "))


@pytest.mark.parametrize("field,value", [
    ("purpose", "Travel"),
    ("hub", "chennai"),
    ("bill_type", "other"),
    ("payment_sequence", "later"),
])
def test_enum_fields_are_closed(field, value):
    with pytest.raises(ValidationError):
        validate_draft(_draft(**{field: value}))


def test_file_reference_must_be_a_pair():
    with pytest.raises(ValidationError) as exc_info:
        validate_draft(_draft(file_url="https://files.example.com/x.pdf"))
    assert "together" in exc_info.value.message

    draft = validate_draft(_draft(file_url="https://files.example.com/x.pdf", file_name="x.pdf"))
    assert draft.file_name == "x.pdf"


@pytest.mark.asyncio
async def test_invalid_draft_never_reaches_store():
    store = AsyncMock()
    with pytest.raises(ValidationError):
        await submit_purchase(store, _draft(amount="-5"))
    store.insert.assert_not_awaited()


@pytest.mark.asyncio
async def test_attach_bill_refuses_second_bill():
    store = AsyncMock()
    existing = MagicMock(file_url="https://files.example.com/a.pdf")
    store.get.return_value = existing

    with pytest.raises(ConflictError) as exc_info:
        await attach_bill(store, str(uuid.uuid4()), BillReference(file_url="u", file_name="n"))
    assert exc_info.value.code == "BILL_ALREADY_ATTACHED"
    store.update.assert_not_awaited()


@pytest.mark.asyncio
async def test_attach_bill_writes_only_file_fields():
    store = AsyncMock()
    store.get.return_value = MagicMock(file_url=None)
    pid = str(uuid.uuid4())

    await attach_bill(store, pid, BillReference(file_url="https://f/x.pdf", file_name="x.pdf"))

    args, kwargs = store.update.call_args
    assert args[0] == pid
    assert set(args[1]) == {"file_url", "file_name", "updated_at"}
    assert kwargs["require_no_bill"] is True
