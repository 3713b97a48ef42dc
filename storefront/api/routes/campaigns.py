"""
Admin e-mail campaign routes

- List page model (store and customer role filters)
- Campaign list filtered by store / customer role
"""
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_current_admin
from storefront.core.database import get_db
from storefront.models.campaign import Campaign
from storefront.models.customer import Customer, CustomerRole
from storefront.schemas.campaign import CampaignListModel, CampaignListResponse, CampaignResponse
from storefront.schemas.common import SelectListItem
from storefront.services.localization_service import LocalizationService
from storefront.services.store_service import StoreService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/campaigns", tags=["admin-campaigns"])


async def prepare_campaign_list_model(db: AsyncSession) -> CampaignListModel:
    """Campaign list filters: "All" followed by every store / customer role."""
    all_text = await LocalizationService(db).get_resource("Admin.Common.All")
    model = CampaignListModel()

    model.available_stores.append(SelectListItem(text=all_text, value="0"))
    for store in await StoreService(db).get_all_stores():
        model.available_stores.append(SelectListItem(text=store.name, value=str(store.id)))

    model.available_customer_roles.append(SelectListItem(text=all_text, value="0"))
    result = await db.execute(select(CustomerRole).order_by(CustomerRole.name))
    for role in result.scalars().all():
        model.available_customer_roles.append(SelectListItem(text=role.name, value=str(role.id)))

    return model


@router.get("/list-model", response_model=CampaignListModel)
async def get_campaign_list_model(
    db: AsyncSession = Depends(get_db),
    admin: Customer = Depends(get_current_admin),
):
    return await prepare_campaign_list_model(db)


@router.get("", response_model=CampaignListResponse)
async def list_campaigns(
    store_id: int = Query(0, ge=0),
    customer_role_id: int = Query(0, ge=0),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    admin: Customer = Depends(get_current_admin),
):
    """Campaigns, newest first. A filter of 0 matches everything."""
    query = select(Campaign)
    if store_id > 0:
        query = query.where(Campaign.store_id == store_id)
    if customer_role_id > 0:
        query = query.where(Campaign.customer_role_id == customer_role_id)

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    result = await db.execute(query.order_by(Campaign.created_at.desc()).offset(skip).limit(limit))
    campaigns = result.scalars().all()

    return CampaignListResponse(
        campaigns=[CampaignResponse.model_validate(c) for c in campaigns],
        total=total,
    )
