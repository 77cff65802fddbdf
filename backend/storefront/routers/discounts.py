"""
storefront/routers/discounts.py - Admin: discount code management.
Codes are unique; an empty `code` gets a generated UUID. Codes are stored only,
order totals do not apply them.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends, Response, status

from storefront.core.errors import NotFoundError
from storefront.core.security import require_admin
from storefront.deps import get_stores
from storefront.repositories import Stores
from storefront.schemas.discount import DiscountCode, DiscountCreate, DiscountOut

router = APIRouter(
    prefix="/discounts",
    tags=["Discounts"],
    dependencies=[Depends(require_admin)],
)


def _to_out(d: DiscountCode) -> DiscountOut:
    return DiscountOut(code=d.code, percentage=d.percentage, expires_at=d.expires_at, expired=d.is_expired())


@router.post("", response_model=DiscountOut, status_code=status.HTTP_201_CREATED)
def create_discount(payload: DiscountCreate, stores: Stores = Depends(get_stores)):
    discount = DiscountCode(
        code=(payload.code or "").strip() or str(uuid.uuid4()),
        percentage=payload.percentage,
        expires_at=payload.expires_at,
    )
    return _to_out(stores.discounts.create(discount))


@router.get("", response_model=List[DiscountOut])
def list_discounts(stores: Stores = Depends(get_stores)):
    return [_to_out(d) for d in stores.discounts.list()]


@router.delete("/{code}", status_code=status.HTTP_204_NO_CONTENT)
def delete_discount(code: str, stores: Stores = Depends(get_stores)):
    if not stores.discounts.delete(code):
        raise NotFoundError("Discount code not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
