"""
API dependencies
"""
from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from storefront.core.database import get_db
from storefront.core.security import decode_token
from storefront.models.customer import Customer
from storefront.services.store_service import StoreService

security = HTTPBearer()


async def get_current_customer(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Customer:
    """Get current authenticated customer"""
    payload = decode_token(credentials.credentials)

    if not payload or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token"
        )

    customer_id = payload.get("sub")
    try:
        customer_id = int(customer_id)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token"
        )

    result = await db.execute(select(Customer).where(Customer.id == customer_id))
    customer = result.scalar_one_or_none()

    if not customer:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Customer not found"
        )

    if not customer.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is disabled"
        )

    return customer


async def get_current_admin(customer: Customer = Depends(get_current_customer)) -> Customer:
    """Require admin customer"""
    if not customer.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return customer


async def get_active_store_scope(
    store_scope: int = Query(0, ge=0, description="Store being configured, 0 for all stores"),
    db: AsyncSession = Depends(get_db),
) -> int:
    """Store scope an admin configuration page applies to."""
    return await StoreService(db).get_active_store_scope_configuration(store_scope)
