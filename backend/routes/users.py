# backend/routes/users.py
from typing import List
from fastapi import APIRouter, Depends, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.cart import Cart
from models.order import Order
from models.users import User
from schemas.common import ApiResponse, MessageResponse
from schemas.user import UserResponse, UserAdminUpdate
from utils.audit import write_log, client_ip
from utils.errors import NotFound, Conflict, ValidationError
from utils.tokenJWT import admin_required

router = APIRouter(prefix="/users", tags=["Users"])


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found.")
    return user


# List every account, newest first (Admin only)
@router.get("", response_model=ApiResponse[List[UserResponse]])
def list_users(db: Session = Depends(get_db), current_user: User = Depends(admin_required)):
    users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
    return ApiResponse(data=[UserResponse.model_validate(u) for u in users])


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(admin_required)):
    return ApiResponse(data=UserResponse.model_validate(_get_user_or_404(db, user_id)))


# Update user details or role (Admin only)
@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(
    user_id: int,
    payload: UserAdminUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    user = _get_user_or_404(db, user_id)

    if payload.email is not None:
        email = payload.email.strip().lower()
        clash = db.query(User).filter(func.lower(User.email) == email, User.id != user.id).first()
        if clash:
            raise Conflict("User already exists with this email.")
        user.email = email
    if payload.name is not None:
        user.name = payload.name
    if payload.role is not None:
        user.role = payload.role
    if payload.phone is not None:
        user.phone = payload.phone
    if payload.address is not None:
        user.address = payload.address.model_dump()

    db.commit()
    db.refresh(user)

    write_log(db, user_id=current_user.id, action="USER_UPDATE", resource="users", status="SUCCESS",
              ip=client_ip(request), meta={"id": user.id, "role": user.role})
    return ApiResponse(message="User updated successfully.", data=UserResponse.model_validate(user))


# Delete a user account (Admin only)
@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    user = _get_user_or_404(db, user_id)

    # Prevent self-deletion
    if user.id == current_user.id:
        raise ValidationError("You cannot delete your own account.")

    cart = db.query(Cart).filter(Cart.user_id == user.id).first()
    if cart:
        db.delete(cart)
    # Order history is kept without an owner
    db.query(Order).filter(Order.user_id == user.id).update({Order.user_id: None}, synchronize_session=False)
    db.delete(user)
    db.commit()

    write_log(db, user_id=current_user.id, action="USER_DELETE", resource="users", status="SUCCESS",
              ip=client_ip(request), meta={"id": user_id})
    return MessageResponse(message="User deleted successfully.")
