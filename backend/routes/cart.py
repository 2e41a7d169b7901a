# backend/routes/cart.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from models.cart import Cart
from models.users import User
from schemas.cart import CartAddItem, CartUpdateItem, CartOut, CartItemOut
from schemas.common import ApiResponse
from services import cart as cart_service
from utils.audit import write_log, client_ip
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/cart", tags=["Cart"])

def _cart_to_out(cart: Cart) -> CartOut:
    totals = cart_service.compute_cart_totals(cart)
    items = [CartItemOut.model_validate(it) for it in cart.items]
    return CartOut(
        id=cart.id,
        user_id=cart.user_id,
        items=items,
        items_count=totals["items_count"],
        subtotal=totals["subtotal"],
        updated_at=cart.updated_at,
    )

def _log(db: Session, request: Request, user: User, action: str, out: CartOut, **meta):
    write_log(
        db,
        user_id=user.id,
        action=action,
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={**meta, "items_count": out.items_count, "subtotal": out.subtotal},
    )

@router.get("", response_model=ApiResponse[CartOut])
def get_cart(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = cart_service.load_cart_with_product_details(db, current_user.id)
    return ApiResponse(data=_cart_to_out(cart))

@router.post("/items", response_model=ApiResponse[CartOut])
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = cart_service.add_item(db, current_user.id, payload.product_id, payload.quantity)
    out = _cart_to_out(cart)
    _log(db, request, current_user, "CART_ADD", out, product_id=payload.product_id, quantity=payload.quantity)
    return ApiResponse(message="Item added to cart.", data=out)

@router.put("/items/{product_id}", response_model=ApiResponse[CartOut])
def update_cart_item(
    product_id: int,
    payload: CartUpdateItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = cart_service.set_item_quantity(db, current_user.id, product_id, payload.quantity)
    out = _cart_to_out(cart)
    _log(db, request, current_user, "CART_UPDATE", out, product_id=product_id, quantity=payload.quantity)
    return ApiResponse(message="Cart item updated.", data=out)

@router.delete("/items/{product_id}", response_model=ApiResponse[CartOut])
def delete_cart_item(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = cart_service.remove_item(db, current_user.id, product_id)
    out = _cart_to_out(cart)
    _log(db, request, current_user, "CART_DELETE", out, product_id=product_id)
    return ApiResponse(message="Item removed from cart.", data=out)

@router.delete("/clear", response_model=ApiResponse[CartOut])
def clear_cart(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = cart_service.clear_cart(db, current_user.id)
    out = _cart_to_out(cart)
    _log(db, request, current_user, "CART_CLEAR", out)
    return ApiResponse(message="Cart cleared.", data=out)
