"""
PayPal Direct API Routes

Admin:
- Configuration page (store scoped)

Checkout:
- Payment form model
- Payment form validation
- Payment processing
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.configuration import render_configuration, save_configuration
from storefront.api.deps import get_active_store_scope, get_current_admin, get_current_customer
from storefront.core.database import get_db
from storefront.models.customer import Customer
from storefront.plugins.payments.paypal_direct.processor import PayPalDirectPaymentProcessor
from storefront.plugins.payments.paypal_direct.schemas import (
    ConfigurationModel,
    PaymentInfoModel,
    ProcessPaymentBody,
    ValidatePaymentFormResponse,
)
from storefront.plugins.payments.paypal_direct.settings import PayPalDirectPaymentSettings
from storefront.schemas.common import ConfigurationResponse
from storefront.schemas.payments import ProcessPaymentResult

logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/admin/plugins/payments/paypal-direct", tags=["admin-plugins"])
router = APIRouter(prefix="/payments/paypal-direct", tags=["payments"])


# ==================== Admin ====================


@admin_router.get("/configure", response_model=ConfigurationResponse)
async def get_configuration(
    store_scope: int = Depends(get_active_store_scope),
    db: AsyncSession = Depends(get_db),
    admin: Customer = Depends(get_current_admin),
):
    """PayPal Direct settings for the active store scope with override flags."""
    return await render_configuration(db, ConfigurationModel, PayPalDirectPaymentSettings, store_scope)


@admin_router.post("/configure", response_model=ConfigurationResponse)
async def post_configuration(
    payload: Dict[str, Any] = Body(...),
    store_scope: int = Depends(get_active_store_scope),
    db: AsyncSession = Depends(get_db),
    admin: Customer = Depends(get_current_admin),
):
    """Save PayPal Direct settings for the active store scope."""
    logger.info(f"Admin {admin.id} saving PayPal Direct settings for store scope {store_scope}")
    return await save_configuration(db, ConfigurationModel, PayPalDirectPaymentSettings, store_scope, payload)


# ==================== Checkout ====================


@router.post("/payment-info", response_model=PaymentInfoModel)
async def get_payment_info_model(
    form: Dict[str, Any] = Body(default={}),
    store_id: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Credit card form with card types, expiry months and years."""
    processor = await PayPalDirectPaymentProcessor.create(db, store_id)
    try:
        return await processor.get_payment_info_model(form)
    finally:
        await processor.close()


@router.post("/validate", response_model=ValidatePaymentFormResponse)
async def validate_payment_form(
    form: Dict[str, Any] = Body(...),
    store_id: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """All problems with a submitted credit card form."""
    processor = await PayPalDirectPaymentProcessor.create(db, store_id)
    try:
        return ValidatePaymentFormResponse(warnings=await processor.validate_payment_form(form))
    finally:
        await processor.close()


@router.post("/process", response_model=ProcessPaymentResult)
async def process_payment(
    body: ProcessPaymentBody,
    db: AsyncSession = Depends(get_db),
    customer: Customer = Depends(get_current_customer),
):
    """Validate the credit card form and charge it through PayPal."""
    processor = await PayPalDirectPaymentProcessor.create(db, body.store_id)
    try:
        warnings = await processor.validate_payment_form(body.form)
        if warnings:
            return ProcessPaymentResult(errors=warnings)

        request = processor.get_payment_info(body.form)
        request.store_id = body.store_id
        request.customer_id = customer.id
        request.order_guid = body.order_guid
        request.currency_code = body.currency_code
        request.order_total = body.order_total + await processor.get_additional_handling_fee(body.order_total)

        return await processor.process_payment(request)
    finally:
        await processor.close()
