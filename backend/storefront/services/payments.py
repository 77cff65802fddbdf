"""
storefront/services/payments.py - Binds gateway outcomes to order status.

start_payment:   pending order → gateway link; the authority is added to the order.
confirm_payment: callback (Authority, Status) → order looked up by any authority issued for it, then
                 Status != OK or gateway rejection → failed,
                 gateway confirmation                 → paid (+ ref id),
                 transport failure                    → order untouched.
The gateway is only asked to verify (capture) while the order is still pending.
"""
import logging
from typing import Optional

from storefront.core.errors import NotFoundError, OrderStateError, PaymentError, PaymentErrorKind
from storefront.core.security import authorize_owner
from storefront.integrations.payment import PaymentGateway, PaymentLink
from storefront.repositories import Stores
from storefront.schemas.order import Order, OrderStatus
from storefront.schemas.principal import Identity

logger = logging.getLogger("storefront.payments")


def _gateway_amount(order: Order) -> int:
    # the gateway takes whole currency units; a fractional total is never rounded away
    amount = order.total_amount
    if amount != amount.to_integral_value():
        raise OrderStateError(f"Order total {amount} is not a whole amount and cannot be charged")
    return int(amount)


class PaymentService:
    def __init__(self, stores: Stores, gateway: PaymentGateway):
        self.stores = stores
        self.gateway = gateway

    def start_payment(self, identity: Identity, order_id: str, description: Optional[str] = None) -> PaymentLink:
        order = self.stores.orders.get(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        authorize_owner(identity, order.user_id)
        if order.status is not OrderStatus.PENDING:
            raise OrderStateError(f"Order is {order.status.value}; only pending orders can be paid")
        amount = _gateway_amount(order)

        link = self.gateway.request_payment(amount, description or f"Payment for order #{order.id}")
        self.stores.orders.set_authority(order.id, link.authority)
        logger.info("payment requested for order %s (authority %s)", order.id, link.authority)
        return link

    def confirm_payment(self, identity: Identity, authority: str, status: str) -> Order:
        order = self.stores.orders.find_by_authority(authority)
        if order is None:
            raise NotFoundError("No order matches this payment authority")
        authorize_owner(identity, order.user_id)

        if status != "OK":
            self._mark_failed(order)
            raise PaymentError(PaymentErrorKind.GATEWAY_REJECTED, "Payment failed or canceled")

        if order.status is OrderStatus.PAID:
            return order
        if order.status is not OrderStatus.PENDING:
            raise OrderStateError(f"Order is {order.status.value}; payment was not verified")

        try:
            ref_id = self.gateway.verify_payment(authority, _gateway_amount(order))
        except PaymentError as exc:
            if exc.kind is PaymentErrorKind.GATEWAY_REJECTED:
                self._mark_failed(order)
            raise

        paid = self.stores.orders.transition(order.id, OrderStatus.PAID, payment_ref_id=ref_id)
        logger.info("order %s paid (ref %s)", order.id, ref_id)
        return paid

    def _mark_failed(self, order: Order) -> None:
        if order.status is OrderStatus.PENDING:
            self.stores.orders.transition(order.id, OrderStatus.FAILED)
            logger.info("order %s payment failed", order.id)
