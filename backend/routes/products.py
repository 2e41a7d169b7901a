# backend/routes/products.py
from typing import Optional, List
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.common import ApiResponse, MessageResponse, Pagination
from schemas.product import ProductInput, ProductOut
from services import catalog
from utils.audit import write_log, client_ip
from utils.tokenJWT import admin_required

router = APIRouter(prefix="/products", tags=["Products"])


# =========================
# PRODUCT LISTING
# =========================
@router.get("", response_model=ApiResponse[List[ProductOut]])
def list_products(
    keyword: Optional[str] = Query(None, description="Search in title and description"),
    category: Optional[str] = Query(None, description="Category id, name or slug"),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    sort: str = Query(catalog.DEFAULT_SORT),
    page: int = Query(1),
    limit: int = Query(12, le=100),
    db: Session = Depends(get_db),
):
    items, pagination = catalog.list_products(
        db, keyword=keyword, category=category, min_price=min_price, max_price=max_price,
        sort=sort, page=page, limit=limit,
    )
    return ApiResponse(
        data=[ProductOut.model_validate(p) for p in items],
        pagination=Pagination(**pagination),
    )


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/{product_id}", response_model=ApiResponse[ProductOut])
def get_product(product_id: int, db: Session = Depends(get_db)):
    return ApiResponse(data=ProductOut.model_validate(catalog.get_product_or_404(db, product_id)))


# =========================
# ADMIN CRUD
# =========================
@router.post("", response_model=ApiResponse[ProductOut], status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductInput,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    product = catalog.create_product(db, payload)
    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
              status="SUCCESS", ip=client_ip(request), meta={"id": product.id, "title": product.title})
    return ApiResponse(
        message="Product created successfully.",
        data=ProductOut.model_validate(catalog.get_product_or_404(db, product.id)),
    )


@router.put("/{product_id}", response_model=ApiResponse[ProductOut])
def update_product(
    product_id: int,
    payload: ProductInput,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    product = catalog.get_product_or_404(db, product_id)
    product = catalog.update_product(db, product, payload)
    write_log(db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
              status="SUCCESS", ip=client_ip(request), meta={"id": product.id, "stock": product.stock})
    return ApiResponse(
        message="Product updated successfully.",
        data=ProductOut.model_validate(catalog.get_product_or_404(db, product.id)),
    )


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    product = catalog.get_product_or_404(db, product_id)
    db.delete(product)
    db.commit()
    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              status="SUCCESS", ip=client_ip(request), meta={"id": product_id})
    return MessageResponse(message="Product deleted successfully.")
