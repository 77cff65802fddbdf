"""
storefront/routers/payment.py
Payment gateway endpoints.

- POST /payment/pay     → creates a gateway payment for a pending order, returns the redirect URL
- GET  /payment/verify  → gateway callback (Authority, Status); marks the order paid or failed
"""
from fastapi import APIRouter, Depends, Query

from storefront.core.auth import get_identity
from storefront.deps import get_payment_service
from storefront.schemas.payment import PaymentLinkOut, PaymentVerifiedOut, PayBody
from storefront.schemas.principal import Identity
from storefront.services.payments import PaymentService

router = APIRouter(prefix="/payment", tags=["Payment"])


@router.post("/pay", response_model=PaymentLinkOut)
def create_payment_link(
    payload: PayBody,
    identity: Identity = Depends(get_identity),
    svc: PaymentService = Depends(get_payment_service),
):
    link = svc.start_payment(identity, payload.order_id, payload.description)
    return PaymentLinkOut(payment_url=link.payment_url, authority=link.authority)


@router.get("/verify", response_model=PaymentVerifiedOut)
def verify_payment(
    authority: str = Query(..., alias="Authority", min_length=1, description="Authority code returned by the gateway"),
    status: str = Query(..., alias="Status", description='"OK" for successful, "NOK" for failed/canceled'),
    identity: Identity = Depends(get_identity),
    svc: PaymentService = Depends(get_payment_service),
):
    order = svc.confirm_payment(identity, authority, status)
    return PaymentVerifiedOut(ref_id=order.payment_ref_id, order_id=order.id)
