"""
Seed script: loads a handful of purchase requests covering every workflow state.
Run from the project root: python -m scripts.seed
"""
import asyncio
import sys
import os

# Ensure the project root is on sys.path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select, func
from portal.database import AsyncSessionLocal, Base, engine
from portal.models.purchase import Purchase
from portal.services import workflow
from portal.services.purchase_service import submit_purchase
from portal.services.purchase_store import PurchaseStore
from portal.services.workflow import Role

SAMPLES = [
    # (draft, actions applied in order as (role, command))
    (
        {
            "uploader_name": "Asha Rao",
            "vendor_name": "Quantum Office Supplies",
            "purpose": "Small Purchase",
            "amount": "2450.00",
            "bill_type": "quantum",
            "hub": "mumbai",
            "payment_sequence": "bill_first",
            "payment_date": "2026-10-01",
            "file_url": "https://files.example.com/bills/sample-1.pdf",
            "file_name": "stationery.pdf",
        },
        [],
    ),
    (
        {
            "uploader_name": "Vikram Shah",
            "vendor_name": "Delhi Fabricators",
            "purpose": "Repair",
            "amount": "48000.00",
            "bill_type": "covalent",
            "hub": "delhi",
            "payment_sequence": "payment_first",
            "payment_date": "2026-10-05",
        },
        [(Role.DIRECTOR, workflow.DirectorApprove())],
    ),
    (
        {
            "uploader_name": "Meera Iyer",
            "vendor_name": "Bangalore Instruments",
            "purpose": "Procurement",
            "amount": "125000.00",
            "bill_type": "quantum",
            "hub": "bangalore",
            "payment_sequence": "bill_first",
            "payment_date": "2026-10-09",
            "file_url": "https://files.example.com/bills/sample-3.pdf",
            "file_name": "spectrometer-quote.pdf",
        },
        [(Role.DIRECTOR, workflow.DirectorApprove()), (Role.FINANCE, workflow.FinanceApprove())],
    ),
    (
        {
            "uploader_name": "Rahul Kulkarni",
            "vendor_name": "Pune Payroll Services",
            "purpose": "Salary",
            "amount": "9000.00",
            "bill_type": "covalent",
            "hub": "pune",
            "payment_sequence": "payment_without_bill",
            "payment_date": "2026-10-12",
        },
        [(Role.FINANCE, workflow.Reject())],
    ),
]


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        existing = (await db.execute(select(func.count(Purchase.id)))).scalar() or 0
        if existing:
            print(f"{existing} purchases already present. Skipping.")
            return

        store = PurchaseStore(db)
        for draft, actions in SAMPLES:
            purchase = await submit_purchase(store, draft)
            for role, command in actions:
                await workflow.apply_transition(store, purchase.id, command, role)
        await db.commit()
        print(f"Seeded {len(SAMPLES)} purchases.")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
