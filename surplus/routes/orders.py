"""routes/orders.py – /api/orders: place, list mine, update status"""
from fastapi import APIRouter, Depends

from ..core.errors import Forbidden
from ..deps import current_principal, get_identity, get_ledger
from ..models import OrderOut, PlacedOrder, PlaceOrderRequest, Principal, StatusUpdated, StatusUpdateRequest

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.post("", response_model=PlacedOrder, status_code=201)
async def place_order(body: PlaceOrderRequest, principal: Principal = Depends(current_principal)):
    """Atomic decrement + order record. 400 when the listing can't cover `quantity`."""
    if not principal.role.can_place_orders:
        raise Forbidden("Only students can order")
    return await get_ledger().place_order(body.listing_id, principal.user_id, body.quantity)


@router.get("/user", response_model=list[OrderOut])
async def my_orders(principal: Principal = Depends(current_principal)):
    user = await get_identity().get_user(principal.user_id)
    return await get_ledger().list_orders_for(user.id, user.role)


@router.put("/{order_id}/status", response_model=StatusUpdated)
async def update_status(
    order_id: str,
    body: StatusUpdateRequest,
    principal: Principal = Depends(current_principal),
):
    if not principal.role.can_manage_orders:
        raise Forbidden("Only restaurants can update status")
    modified = await get_ledger().update_order_status(order_id, principal.user_id, body.status)
    return StatusUpdated(modified_count=modified)
