# backend/services/checkout.py
"""
Turns a user's cart into an order.

Order creation, stock decrements and emptying the cart share one database
transaction: stock is only decremented where enough remains, and if any
product falls short the whole unit of work is rolled back, leaving no order,
untouched stock and the cart as it was.
"""
import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from config import settings
from models.order import Order, OrderItem, OrderStatus
from services.cart import load_cart_with_product_details
from services.catalog import bulk_decrement_stock
from utils.errors import ValidationError, InvalidState, InsufficientStock

logger = logging.getLogger(__name__)

REQUIRED_ADDRESS_FIELDS = ("address", "city", "postal_code", "country")


def calculate_order_total(items: Iterable) -> dict:
    """Subtotal, shipping fee, tax and total for line items exposing `price` and `quantity`."""
    subtotal = sum(item.price * item.quantity for item in items)
    shipping_fee = 0 if subtotal > settings.FREE_SHIPPING_THRESHOLD else settings.SHIPPING_FEE
    tax = round(subtotal * settings.TAX_RATE, 2)
    total = round(subtotal + shipping_fee + tax, 2)
    return {"subtotal": subtotal, "shipping_fee": shipping_fee, "tax": tax, "total": total}


def _validate_shipping_address(shipping_address: Optional[dict]) -> dict:
    shipping_address = shipping_address or {}
    values = {field: str(shipping_address.get(field) or "").strip() for field in REQUIRED_ADDRESS_FIELDS}
    if not all(values.values()):
        raise ValidationError("Complete shipping address is required.")
    return values


def initial_payment_status(payment_method: str) -> str:
    return "PENDING" if payment_method == "cod" else "INITIATED"


def place_order(db: Session, user_id: int, shipping_address: Optional[dict], payment_method: str = "cod") -> Order:
    address = _validate_shipping_address(shipping_address)
    payment_method = (payment_method or "cod").strip() or "cod"

    cart = load_cart_with_product_details(db, user_id)
    if not cart.items:
        raise InvalidState("Cart is empty. Add items before placing order.")

    snapshots = []
    quantities = {}
    for cart_item in cart.items:
        product = cart_item.product
        if product is None:
            raise InvalidState("Cart has invalid product references. Please refresh cart.")
        if product.stock < cart_item.quantity:
            raise InsufficientStock(f"Insufficient stock for {product.title}.")

        snapshots.append(OrderItem(
            product_id=product.id,
            title=product.title,
            quantity=cart_item.quantity,
            price=product.price,
            image=product.image or "",
        ))
        quantities[product.id] = cart_item.quantity

    totals = calculate_order_total(snapshots)

    order = Order(
        user_id=user_id,
        items=snapshots,
        total=totals["total"],
        status=OrderStatus.PENDING.value,
        payment_method=payment_method,
        payment_status=initial_payment_status(payment_method),
        shipping_address_line=address["address"],
        shipping_city=address["city"],
        shipping_postal_code=address["postal_code"],
        shipping_country=address["country"],
    )
    db.add(order)
    db.flush()

    if not bulk_decrement_stock(db, quantities):
        db.rollback()
        raise InsufficientStock("Insufficient stock for one or more items. Please review your cart.")

    cart.items.clear()
    db.commit()
    db.refresh(order)

    logger.info(
        "Order %s placed by user %s: %d line(s), total %.2f",
        order.id, user_id, len(order.items), order.total,
    )
    return order
