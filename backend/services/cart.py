# backend/services/cart.py
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from models.cart import Cart, CartItem
from models.product import Product
from services.catalog import find_product_by_id
from utils.errors import NotFound, InsufficientStock

logger = logging.getLogger(__name__)


def get_or_create_cart(db: Session, user_id: int) -> Cart:
    # carts.user_id is unique; a concurrent insert for the same user loses and re-reads
    cart = db.query(Cart).filter(Cart.user_id == user_id).first()
    if cart:
        return cart

    cart = Cart(user_id=user_id)
    db.add(cart)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Cart for user %s created concurrently, reusing it", user_id)
        return db.query(Cart).filter(Cart.user_id == user_id).one()
    db.refresh(cart)
    return cart


def load_cart_with_product_details(db: Session, user_id: int) -> Cart:
    """Cart with every line's product loaded; lines whose product was deleted keep product=None."""
    get_or_create_cart(db, user_id)
    return (
        db.query(Cart)
        .populate_existing()
        .options(joinedload(Cart.items).joinedload(CartItem.product))
        .filter(Cart.user_id == user_id)
        .one()
    )


def compute_cart_totals(cart: Cart) -> dict:
    items_count = 0
    subtotal = 0.0
    for item in cart.items:
        unit_price = item.product.price if item.product is not None else 0
        items_count += item.quantity
        subtotal += unit_price * item.quantity
    return {"items_count": items_count, "subtotal": round(subtotal, 2)}


def _clamp_quantity(requested: int, product: Product) -> int:
    if product.stock < 1:
        raise InsufficientStock(f"{product.title} is out of stock.")
    return min(max(1, requested), product.stock)


def _find_item(cart: Cart, product_id: int) -> Optional[CartItem]:
    for item in cart.items:
        if item.product_id == product_id:
            return item
    return None


def _load_product(db: Session, product_id: int) -> Product:
    product = find_product_by_id(db, product_id)
    if not product:
        raise NotFound("Product not found.")
    return product


def add_item(db: Session, user_id: int, product_id: int, quantity: int = 1) -> Cart:
    product = _load_product(db, product_id)
    cart = get_or_create_cart(db, user_id)
    requested = max(1, quantity)

    item = _find_item(cart, product_id)
    if item:
        item.quantity = _clamp_quantity(item.quantity + requested, product)
    else:
        cart.items.append(CartItem(product_id=product.id, quantity=_clamp_quantity(requested, product)))

    db.commit()
    return load_cart_with_product_details(db, user_id)


def set_item_quantity(db: Session, user_id: int, product_id: int, quantity: int) -> Cart:
    product = _load_product(db, product_id)
    cart = get_or_create_cart(db, user_id)

    item = _find_item(cart, product_id)
    if not item:
        raise NotFound("Item not present in cart.")

    item.quantity = _clamp_quantity(quantity, product)
    db.commit()
    return load_cart_with_product_details(db, user_id)


def remove_item(db: Session, user_id: int, product_id: int) -> Cart:
    cart = get_or_create_cart(db, user_id)
    item = _find_item(cart, product_id)
    if item:
        cart.items.remove(item)
        db.commit()
    return load_cart_with_product_details(db, user_id)


def clear_cart(db: Session, user_id: int) -> Cart:
    cart = get_or_create_cart(db, user_id)
    cart.items.clear()
    db.commit()
    return load_cart_with_product_details(db, user_id)
