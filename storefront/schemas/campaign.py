"""
Campaign Schemas

Admin view models for the e-mail campaign list page.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from storefront.schemas.common import SelectListItem


class CampaignListModel(BaseModel):
    """Filter state and dropdown options for the campaign list."""
    store_id: int = 0
    available_stores: List[SelectListItem] = []
    customer_role_id: int = 0
    available_customer_roles: List[SelectListItem] = []


class CampaignResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    subject: str
    store_id: int = 0
    customer_role_id: int = 0
    dont_send_before_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class CampaignListResponse(BaseModel):
    campaigns: List[CampaignResponse]
    total: int
