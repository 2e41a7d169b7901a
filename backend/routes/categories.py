# backend/routes/categories.py
from typing import List
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.category import Category
from models.product import Product
from models.users import User
from schemas.category import CategoryCreate, CategoryUpdate, CategoryOut
from schemas.common import ApiResponse, MessageResponse
from utils.audit import write_log, client_ip
from utils.errors import Conflict, NotFound, ValidationError
from utils.tokenJWT import admin_required

router = APIRouter(prefix="/categories", tags=["Categories"])


def _get_category_or_404(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if not category:
        raise NotFound("Category not found.")
    return category


def _name_taken(db: Session, name: str, exclude_id: int = None) -> bool:
    query = db.query(Category).filter(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first() is not None


@router.get("", response_model=ApiResponse[List[CategoryOut]])
def list_categories(db: Session = Depends(get_db)):
    categories = db.query(Category).order_by(Category.created_at.desc(), Category.id.desc()).all()
    return ApiResponse(data=[CategoryOut.model_validate(c) for c in categories])


@router.get("/{category_id}", response_model=ApiResponse[CategoryOut])
def get_category(category_id: int, db: Session = Depends(get_db)):
    return ApiResponse(data=CategoryOut.model_validate(_get_category_or_404(db, category_id)))


@router.post("", response_model=ApiResponse[CategoryOut], status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    name = payload.name.strip()
    if not name:
        raise ValidationError("Category name is required.")
    if _name_taken(db, name):
        raise Conflict("Category with this name already exists.")

    category = Category(name=name, description=payload.description or "")
    db.add(category)
    db.commit()
    db.refresh(category)

    write_log(db, user_id=current_user.id, action="CATEGORY_CREATE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category.id, "name": category.name})
    return ApiResponse(message="Category created successfully.", data=CategoryOut.model_validate(category))


@router.put("/{category_id}", response_model=ApiResponse[CategoryOut])
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    category = _get_category_or_404(db, category_id)

    if payload.name is not None:
        name = payload.name.strip()
        if _name_taken(db, name, exclude_id=category.id):
            raise Conflict("Category with this name already exists.")
        category.name = name
    if payload.description is not None:
        category.description = payload.description

    db.commit()
    db.refresh(category)

    write_log(db, user_id=current_user.id, action="CATEGORY_UPDATE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category.id})
    return ApiResponse(message="Category updated successfully.", data=CategoryOut.model_validate(category))


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    category = _get_category_or_404(db, category_id)

    linked = db.query(func.count(Product.id)).filter(Product.category_id == category.id).scalar()
    if linked:
        raise ValidationError("Cannot delete category that is linked to products.")

    db.delete(category)
    db.commit()

    write_log(db, user_id=current_user.id, action="CATEGORY_DELETE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category_id})
    return MessageResponse(message="Category deleted successfully.")
