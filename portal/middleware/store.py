from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portal.database import get_db
from portal.services.purchase_store import PurchaseStore


async def get_purchase_store(db: AsyncSession = Depends(get_db)) -> PurchaseStore:
    """FastAPI dependency: purchase store bound to the request-scoped session."""
    return PurchaseStore(db)
