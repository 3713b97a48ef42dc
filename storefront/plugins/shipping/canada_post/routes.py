"""
Canada Post API Routes

Admin:
- Configuration page (store scoped)

Public:
- Rate quotes for a shipping request
- Tracking for a parcel
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.configuration import render_configuration, save_configuration
from storefront.api.deps import get_active_store_scope, get_current_admin
from storefront.core.database import get_db
from storefront.models.customer import Customer
from storefront.plugins.shipping.canada_post.computation import CanadaPostComputationMethod
from storefront.plugins.shipping.canada_post.schemas import ConfigurationModel
from storefront.plugins.shipping.canada_post.settings import CanadaPostSettings
from storefront.schemas.common import ConfigurationResponse
from storefront.schemas.shipping import (
    GetShippingOptionRequest,
    GetShippingOptionResponse,
    TrackingResponse,
)

logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/admin/plugins/shipping/canada-post", tags=["admin-plugins"])
router = APIRouter(prefix="/shipping/canada-post", tags=["shipping"])


# ==================== Admin ====================


@admin_router.get("/configure", response_model=ConfigurationResponse)
async def get_configuration(
    store_scope: int = Depends(get_active_store_scope),
    db: AsyncSession = Depends(get_db),
    admin: Customer = Depends(get_current_admin),
):
    """Canada Post settings for the active store scope with override flags."""
    return await render_configuration(db, ConfigurationModel, CanadaPostSettings, store_scope)


@admin_router.post("/configure", response_model=ConfigurationResponse)
async def post_configuration(
    payload: Dict[str, Any] = Body(...),
    store_scope: int = Depends(get_active_store_scope),
    db: AsyncSession = Depends(get_db),
    admin: Customer = Depends(get_current_admin),
):
    """Save Canada Post settings for the active store scope."""
    logger.info(f"Admin {admin.id} saving Canada Post settings for store scope {store_scope}")
    return await save_configuration(db, ConfigurationModel, CanadaPostSettings, store_scope, payload)


# ==================== Public ====================


@router.post("/options", response_model=GetShippingOptionResponse)
async def get_shipping_options(
    request: GetShippingOptionRequest,
    db: AsyncSession = Depends(get_db),
):
    """Canada Post rates in the primary store currency, or the reasons there are none."""
    method = await CanadaPostComputationMethod.create(db, request.store_id)
    try:
        return await method.get_shipping_options(request)
    finally:
        await method.close()


@router.get("/tracking/{tracking_number}", response_model=TrackingResponse)
async def get_tracking(
    tracking_number: str,
    db: AsyncSession = Depends(get_db),
):
    """Tracking page URL and events for a Canada Post parcel."""
    method = await CanadaPostComputationMethod.create(db)
    try:
        tracker = method.shipment_tracker
        return TrackingResponse(
            tracking_number=tracking_number,
            url=tracker.get_url(tracking_number),
            events=await tracker.get_shipment_events(tracking_number),
        )
    finally:
        await method.close()
