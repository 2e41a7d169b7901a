# backend/services/catalog.py
"""
Catalog queries and stock bookkeeping.

The checkout workflow depends on `find_product_by_id` and
`bulk_decrement_stock`; routes depend on the listing and CRUD helpers.
"""
import logging
import math
import re
from typing import Dict, Optional, Tuple, List

from sqlalchemy import func, or_, update
from sqlalchemy.orm import Session, joinedload

from models.category import Category
from models.product import Product
from schemas.product import ProductInput
from utils.errors import ValidationError, NotFound

logger = logging.getLogger(__name__)

SORT_ORDERS = {
    "newest": (Product.created_at.desc(), Product.id.desc()),
    "oldest": (Product.created_at.asc(), Product.id.asc()),
    "priceAsc": (Product.price.asc(), Product.id.asc()),
    "priceDesc": (Product.price.desc(), Product.id.asc()),
    "titleAsc": (Product.title.asc(), Product.id.asc()),
    "nameAsc": (Product.title.asc(), Product.id.asc()),
}
DEFAULT_SORT = "newest"


def _resolve_category_id(db: Session, category: str) -> Optional[int]:
    """Accepts a numeric id or a name/slug such as "dairy-eggs"."""
    if category.isdigit():
        return int(category)
    normalized = re.sub(r"[-_]", " ", category).strip().lower()
    row = db.query(Category.id).filter(func.lower(Category.name) == normalized).first()
    return row[0] if row else None


def list_products(
    db: Session,
    keyword: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    sort: str = DEFAULT_SORT,
    page: int = 1,
    limit: int = 12,
) -> Tuple[List[Product], dict]:
    page = max(1, page)
    limit = max(1, limit)

    query = db.query(Product).options(joinedload(Product.category))

    if keyword:
        like = f"%{keyword}%"
        query = query.filter(or_(Product.title.ilike(like), Product.description.ilike(like)))

    if category:
        category_id = _resolve_category_id(db, category)
        # Unknown category names give an empty page rather than an unfiltered one
        if category_id is None:
            return [], {"total": 0, "page": page, "pages": 1, "limit": limit}
        query = query.filter(Product.category_id == category_id)

    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)

    total = query.count()
    items = (
        query.order_by(*SORT_ORDERS.get(sort, SORT_ORDERS[DEFAULT_SORT]))
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    pagination = {"total": total, "page": page, "pages": max(1, math.ceil(total / limit)), "limit": limit}
    return items, pagination


def find_product_by_id(db: Session, product_id: int) -> Optional[Product]:
    return db.get(Product, product_id)


def get_product_or_404(db: Session, product_id: int) -> Product:
    product = db.query(Product).options(joinedload(Product.category)).filter(Product.id == product_id).first()
    if not product:
        raise NotFound("Product not found.")
    return product


def _ensure_category(db: Session, category_id: int) -> None:
    if db.get(Category, category_id) is None:
        raise ValidationError("Category not found.")


def create_product(db: Session, payload: ProductInput) -> Product:
    title = payload.resolved_title()
    image = payload.resolved_image()
    if (
        not title
        or not payload.description
        or payload.category_id is None
        or payload.price is None
        or payload.stock is None
        or not image
    ):
        raise ValidationError("title, description, category, price, stock, and image are required.")

    _ensure_category(db, payload.category_id)

    product = Product(
        title=title.strip(),
        description=payload.description,
        category_id=payload.category_id,
        price=payload.price,
        stock=payload.stock,
        image=image,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def update_product(db: Session, product: Product, payload: ProductInput) -> Product:
    fields = payload.model_fields_set

    if "category_id" in fields:
        if payload.category_id is None:
            raise ValidationError("Invalid category id.")
        _ensure_category(db, payload.category_id)
        product.category_id = payload.category_id

    title = payload.resolved_title()
    if title is not None:
        product.title = title.strip()
    if payload.description is not None:
        product.description = payload.description
    if payload.price is not None:
        product.price = payload.price
    if payload.stock is not None:
        product.stock = payload.stock
    image = payload.resolved_image()
    if image is not None:
        product.image = image

    db.commit()
    db.refresh(product)
    return product


def bulk_decrement_stock(db: Session, quantities: Dict[int, int]) -> bool:
    """
    Decrements stock for every product in ``quantities`` without committing.

    Each decrement only applies when enough stock remains, so concurrent
    checkouts can never push stock below zero. Returns False as soon as one
    product cannot be decremented; the caller must roll the session back to
    undo the decrements already applied.
    """
    for product_id, qty in quantities.items():
        result = db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= qty)
            .values(stock=Product.stock - qty)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning("Conditional stock decrement failed for product %s (qty=%s)", product_id, qty)
            return False
    return True
