# backend/routes/orders.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

import logging
from database import get_db
from models.order import Order
from models.users import User
from schemas.common import ApiResponse
from schemas.order import OrderOut, OrderCreatePayload, OrderPayPayload, OrderStatusPatch
from services import checkout, orders as order_service
from utils.audit import write_log, client_ip
from utils.errors import ApiError
from utils.tokenJWT import get_current_user, admin_required

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)

# Map Order model to OrderOut schema
def _order_to_out(order: Order) -> OrderOut:
    return OrderOut.model_validate(order)

# Place an order from the caller's cart
@router.post("", response_model=ApiResponse[OrderOut], status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreatePayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    shipping = payload.shipping_address.model_dump() if payload.shipping_address else None
    try:
        order = checkout.place_order(db, current_user.id, shipping, payload.payment_method)
    except ApiError as e:
        logger.warning("Checkout rejected for user %s: %s", current_user.id, e.message)
        write_log(db, user_id=current_user.id, action="ORDER_CREATE", resource="orders", status="FAIL",
                  ip=client_ip(request), meta={"reason": e.message})
        raise

    out = _order_to_out(order)
    write_log(db, user_id=current_user.id, action="ORDER_CREATE", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": out.id, "total": out.total, "items": len(out.items)})
    return ApiResponse(message="Order placed successfully.", data=out)


# Orders of the caller, newest first
@router.get("/my-orders", response_model=ApiResponse[List[OrderOut]])
def list_my_orders(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    rows = order_service.list_user_orders(db, current_user.id)
    return ApiResponse(data=[_order_to_out(o) for o in rows])


# Every order in the store, newest first (Admin only)
@router.get("", response_model=ApiResponse[List[OrderOut]])
def list_orders(
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required)
):
    rows = order_service.list_all_orders(db)
    return ApiResponse(data=[_order_to_out(o) for o in rows])


# Get details of a specific order (owner or admin)
@router.get("/{order_id}", response_model=ApiResponse[OrderOut])
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return ApiResponse(data=_order_to_out(order_service.get_order_for(db, order_id, current_user)))


# Mock payment confirmation (owner or admin)
@router.put("/{order_id}/pay", response_model=ApiResponse[OrderOut])
def pay_order(
    order_id: int,
    request: Request,
    payload: Optional[OrderPayPayload] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    payload = payload or OrderPayPayload()
    order = order_service.mark_paid(db, order_id, current_user, payload.id, payload.status)
    out = _order_to_out(order)
    write_log(db, user_id=current_user.id, action="ORDER_PAY", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": out.id, "payment_status": out.payment_info.status})
    return ApiResponse(message="Order marked as paid.", data=out)


# Overwrite order status (Admin only)
@router.put("/{order_id}/status", response_model=ApiResponse[OrderOut])
def update_order_status(
    order_id: int,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required)
):
    order = order_service.set_status(db, order_id, payload.status)
    out = _order_to_out(order)
    write_log(db, user_id=current_user.id, action="ORDER_STATUS_CHANGE", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": out.id, "new": out.status})
    return ApiResponse(message="Order status updated successfully.", data=out)
