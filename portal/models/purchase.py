import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    JSON,
    String,
    Numeric,
    Date,
    DateTime,
    Text,
    Uuid,
    CheckConstraint,
    Index,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from portal.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
ApprovalJSON = JSON().with_variant(JSONB(), "postgresql")


class Purchase(Base):
    __tablename__ = "purchases"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(), primary_key=True, default=uuid.uuid4
    )
    uploader_name: Mapped[str] = mapped_column(String(200), nullable=False)
    vendor_name: Mapped[str] = mapped_column(String(200), nullable=False)
    purpose: Mapped[str] = mapped_column(String(30), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    bill_type: Mapped[str] = mapped_column(String(20), nullable=False)
    hub: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_sequence: Mapped[str] = mapped_column(String(30), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    file_url: Mapped[Optional[str]] = mapped_column(Text)
    file_name: Mapped[Optional[str]] = mapped_column(String(255))

    status: Mapped[str] = mapped_column(String(30), default="pending", nullable=False)
    director_approval: Mapped[Optional[dict]] = mapped_column(ApprovalJSON)
    finance_approval: Mapped[Optional[dict]] = mapped_column(ApprovalJSON)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'director_approved', 'finance_approved', 'rejected')",
            name="chk_purchase_status",
        ),
        CheckConstraint("amount >= 0", name="chk_purchase_amount_non_negative"),
        CheckConstraint(
            "(file_url IS NULL AND file_name IS NULL) "
            "OR (file_url IS NOT NULL AND file_name IS NOT NULL)",
            name="chk_purchase_file_pair",
        ),
        Index("idx_purchases_created_at", "created_at"),
        Index("idx_purchases_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Purchase {self.id} {self.status} {self.amount}>"
