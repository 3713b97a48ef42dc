"""
Store Service

Store lookups and resolution of the admin's active store scope.
"""
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models.store import Store

logger = logging.getLogger(__name__)


class StoreService:
    """Read access to stores."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all_stores(self) -> List[Store]:
        result = await self.db.execute(select(Store).order_by(Store.display_order, Store.id))
        return list(result.scalars().all())

    async def get_store_by_id(self, store_id: int) -> Optional[Store]:
        if store_id <= 0:
            return None
        return await self.db.get(Store, store_id)

    async def get_active_store_scope_configuration(self, requested_store_id: int) -> int:
        """
        Resolve the store scope an admin is configuring.

        Returns 0 (global) for single-store installations and for store ids
        that do not exist.
        """
        stores = await self.get_all_stores()
        if len(stores) < 2:
            return 0

        if requested_store_id > 0 and any(store.id == requested_store_id for store in stores):
            return requested_store_id

        if requested_store_id > 0:
            logger.debug(f"Unknown store scope {requested_store_id} requested, using global scope")
        return 0
