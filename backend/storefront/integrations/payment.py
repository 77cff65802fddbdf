"""
storefront/integrations/payment.py - Payment gateway (Zarinpal) integration.

Two operations cross the boundary:
- request_payment(amount, description) → PaymentLink (authority + redirect URL)
- verify_payment(authority, amount)     → gateway reference id

`ZarinpalGateway` talks to the Zarinpal v4 JSON API with `requests`.
`FakeGateway` is used when no merchant id is configured (development) and by
the tests; it never leaves the process.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from uuid import uuid4

import requests

from storefront.config import Settings
from storefront.core.errors import PaymentError, PaymentErrorKind

logger = logging.getLogger("storefront.payment")

# 100: success, 101: already verified (repeat callback)
_OK_CODES = {100, 101}


@dataclass(frozen=True)
class PaymentLink:
    authority: str
    payment_url: str


class PaymentGateway(ABC):
    @abstractmethod
    def request_payment(self, amount: int, description: str) -> PaymentLink:
        ...

    @abstractmethod
    def verify_payment(self, authority: str, amount: int) -> str:
        """Return the gateway reference id or raise PaymentError."""
        ...


class ZarinpalGateway(PaymentGateway):
    def __init__(self, merchant_id: str, base_url: str, callback_url: str, timeout: int = 15):
        self.merchant_id = merchant_id
        self.base_url = base_url.rstrip("/")
        self.callback_url = callback_url
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "ZarinpalGateway":
        return cls(
            merchant_id=settings.zarinpal_merchant_id,
            base_url=settings.zarinpal_base_url,
            callback_url=settings.payment_callback_url,
            timeout=settings.payment_timeout,
        )

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/v4/payment/{path}"
        try:
            resp = requests.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json", "Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Zarinpal %s unreachable: %s", path, e)
            raise PaymentError(PaymentErrorKind.NETWORK_FAILURE, "Server error", upstream=str(e))
        try:
            body = resp.json()
        except ValueError:
            logger.error("Zarinpal %s returned non-JSON (%s)", path, resp.status_code)
            raise PaymentError(
                PaymentErrorKind.NETWORK_FAILURE,
                "Server error",
                upstream={"status_code": resp.status_code, "body": resp.text[:500]},
            )
        return body if isinstance(body, dict) else {"data": body}

    @staticmethod
    def _data(body: Dict[str, Any]) -> Dict[str, Any]:
        # On failure Zarinpal sends `data: []` and fills `errors`
        data = body.get("data")
        return data if isinstance(data, dict) else {}

    def request_payment(self, amount: int, description: str) -> PaymentLink:
        body = self._post(
            "request.json",
            {
                "merchant_id": self.merchant_id,
                "amount": amount,
                "description": description,
                "callback_url": self.callback_url,
            },
        )
        data = self._data(body)
        if data.get("code") == 100 and data.get("authority"):
            authority = data["authority"]
            return PaymentLink(authority=authority, payment_url=f"{self.base_url}/StartPay/{authority}")
        logger.warning("Zarinpal payment request rejected: %s", body.get("errors") or data)
        raise PaymentError(
            PaymentErrorKind.GATEWAY_REJECTED,
            "Error in payment request",
            upstream=body.get("errors") or data,
        )

    def verify_payment(self, authority: str, amount: int) -> str:
        body = self._post(
            "verify.json",
            {"merchant_id": self.merchant_id, "amount": amount, "authority": authority},
        )
        data = self._data(body)
        if data.get("code") in _OK_CODES and data.get("ref_id") is not None:
            return str(data["ref_id"])
        logger.warning("Zarinpal verification rejected for %s: %s", authority, body.get("errors") or data)
        raise PaymentError(
            PaymentErrorKind.GATEWAY_REJECTED,
            "Payment verification failed",
            upstream=body.get("errors") or data,
        )


class FakeGateway(PaymentGateway):
    """Configurable in-process gateway: succeeds by default, records every call."""

    def __init__(self, base_url: str = "https://sandbox.zarinpal.com/pg") -> None:
        self.base_url = base_url
        self.should_succeed: bool = True
        self.failure: Optional[PaymentErrorKind] = None
        self.calls: List[Dict[str, Any]] = []

    def configure(self, should_succeed: bool, failure: PaymentErrorKind = PaymentErrorKind.GATEWAY_REJECTED) -> None:
        self.should_succeed = should_succeed
        self.failure = None if should_succeed else failure

    def _fail(self, message: str) -> None:
        if self.failure is PaymentErrorKind.NETWORK_FAILURE:
            raise PaymentError(PaymentErrorKind.NETWORK_FAILURE, "Server error", upstream="connection refused")
        raise PaymentError(PaymentErrorKind.GATEWAY_REJECTED, message, upstream={"code": -9, "message": "rejected"})

    def request_payment(self, amount: int, description: str) -> PaymentLink:
        self.calls.append({"method": "request_payment", "amount": amount, "description": description})
        if not self.should_succeed:
            self._fail("Error in payment request")
        authority = f"A{uuid4().hex[:35]}"
        return PaymentLink(authority=authority, payment_url=f"{self.base_url}/StartPay/{authority}")

    def verify_payment(self, authority: str, amount: int) -> str:
        self.calls.append({"method": "verify_payment", "authority": authority, "amount": amount})
        if not self.should_succeed:
            self._fail("Payment verification failed")
        return str(uuid4().int)[:12]


def build_gateway(settings: Settings) -> PaymentGateway:
    if not settings.zarinpal_merchant_id:
        logger.warning("ZARINPAL_MERCHANT_ID not set - using the fake payment gateway (no real charge).")
        return FakeGateway(base_url=settings.zarinpal_base_url)
    return ZarinpalGateway.from_settings(settings)
