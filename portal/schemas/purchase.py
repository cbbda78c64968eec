from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, Field, PlainSerializer, field_validator, model_validator


class Purpose(str, Enum):
    PROCUREMENT = "Procurement"
    SALARY = "Salary"
    REPAIR = "Repair"
    SMALL_PURCHASE = "Small Purchase"


class BillType(str, Enum):
    QUANTUM = "quantum"
    COVALENT = "covalent"


class Hub(str, Enum):
    MUMBAI = "mumbai"
    DELHI = "delhi"
    BANGALORE = "bangalore"
    PUNE = "pune"


class PaymentSequence(str, Enum):
    PAYMENT_FIRST = "payment_first"
    BILL_FIRST = "bill_first"
    PAYMENT_WITHOUT_BILL = "payment_without_bill"


class PurchaseStatus(str, Enum):
    PENDING = "pending"
    DIRECTOR_APPROVED = "director_approved"
    FINANCE_APPROVED = "finance_approved"
    REJECTED = "rejected"


# Amounts are Decimal internally and plain JSON numbers on the wire.
Amount = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


class BillReference(BaseModel):
    file_url: str = Field(..., min_length=1, max_length=2000)
    file_name: str = Field(..., min_length=1, max_length=255)


class PurchaseCreate(BaseModel):
    uploader_name: str = Field(..., min_length=1, max_length=200)
    vendor_name: str = Field(..., min_length=1, max_length=200)
    purpose: Purpose
    amount: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)
    bill_type: BillType
    hub: Hub
    payment_sequence: PaymentSequence
    payment_date: date
    file_url: Optional[str] = Field(None, min_length=1, max_length=2000)
    file_name: Optional[str] = Field(None, min_length=1, max_length=255)

    @field_validator("uploader_name", "vendor_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @model_validator(mode="after")
    def check_file_pair(self) -> "PurchaseCreate":
        if (self.file_url is None) != (self.file_name is None):
            raise ValueError("file_url and file_name must be provided together")
        return self


class ApprovalStamp(BaseModel):
    approved: bool
    date: str


class PurchaseResponse(BaseModel):
    id: str
    uploader_name: str
    vendor_name: str
    purpose: Purpose
    amount: Amount
    bill_type: BillType
    hub: Hub
    payment_sequence: PaymentSequence
    payment_date: str
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    status: PurchaseStatus
    director_approval: Optional[ApprovalStamp] = None
    finance_approval: Optional[ApprovalStamp] = None
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


# ---------- transition requests ----------

ActionName = Literal["director_approve", "finance_approve", "reject", "delete"]


class ActionRequest(BaseModel):
    # delete goes through DELETE /purchases/{id}
    action: Literal["director_approve", "finance_approve", "reject"]


class DashboardActionRequest(BaseModel):
    purchase_id: str
    action: ActionName


# ---------- dashboard ----------


class AllowedActions(BaseModel):
    director_approve: bool
    finance_approve: bool
    reject: bool
    delete: bool


class DashboardRow(BaseModel):
    purchase: PurchaseResponse
    actions: AllowedActions


class DashboardStats(BaseModel):
    total: int
    pending: int
    director_approved: int
    approved: int
    rejected: int
    total_amount: Amount


class DashboardView(BaseModel):
    role: str
    search: str = ""
    status: str = "all"
    stats: DashboardStats
    rows: List[DashboardRow] = []
