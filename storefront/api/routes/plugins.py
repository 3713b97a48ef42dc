"""
Admin plugin routes

- List registered plugins
- Install / uninstall a plugin (default settings and locale resources)
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_current_admin
from storefront.core.database import get_db
from storefront.core.exceptions import PluginNotFoundError
from storefront.models.customer import Customer
from storefront.plugins import PluginRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/plugins", tags=["admin-plugins"])


class PluginResponse(BaseModel):
    system_name: str
    friendly_name: str
    group: str
    version: str
    configuration_path: Optional[str] = None


class PluginActionResponse(BaseModel):
    system_name: str
    message: str


@router.get("", response_model=List[PluginResponse])
async def list_plugins(
    group: Optional[str] = Query(None, description="Payments or Shipping"),
    admin: Customer = Depends(get_current_admin),
):
    return [PluginResponse(**vars(d)) for d in PluginRegistry.get_descriptors(group)]


@router.post("/{system_name}/install", response_model=PluginActionResponse)
async def install_plugin(
    system_name: str,
    db: AsyncSession = Depends(get_db),
    admin: Customer = Depends(get_current_admin),
):
    try:
        plugin = await PluginRegistry.create(system_name, db)
    except PluginNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    try:
        await plugin.install()
    finally:
        await plugin.close()

    logger.info(f"Admin {admin.id} installed plugin {plugin.system_name}")
    return PluginActionResponse(system_name=plugin.system_name, message="Plugin installed")


@router.post("/{system_name}/uninstall", response_model=PluginActionResponse)
async def uninstall_plugin(
    system_name: str,
    db: AsyncSession = Depends(get_db),
    admin: Customer = Depends(get_current_admin),
):
    try:
        plugin = await PluginRegistry.create(system_name, db)
    except PluginNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    try:
        await plugin.uninstall()
    finally:
        await plugin.close()

    logger.info(f"Admin {admin.id} uninstalled plugin {plugin.system_name}")
    return PluginActionResponse(system_name=plugin.system_name, message="Plugin uninstalled")
