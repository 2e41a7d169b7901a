# backend/routes/auth.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.users import User, Role
from schemas.common import ApiResponse
from schemas.user import UserCreate, UserLogin, UserResponse, ProfileUpdate, AuthData
from utils.audit import write_log, client_ip
from utils.errors import Conflict, Unauthenticated
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import generate_token, get_current_user

router = APIRouter(prefix="/auth", tags=["Auth"])

def _find_by_email(db: Session, email: str):
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

# Register a new user and issue a token
@router.post("/register", response_model=ApiResponse[AuthData], status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, request: Request, db: Session = Depends(get_db)):
    normalized_email = payload.email.strip().lower()

    if _find_by_email(db, normalized_email):
        write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": normalized_email, "reason": "Email exists"})
        raise Conflict("User already exists with this email.")

    user = User(
        name=payload.name.strip(),
        email=normalized_email,
        password_hash=get_password_hash(payload.password),
        role=Role.USER.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    write_log(db, user_id=user.id, action="REGISTER", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"email": user.email})

    return ApiResponse(
        message="Registration successful.",
        data=AuthData(user=UserResponse.model_validate(user), token=generate_token(user)),
    )


# Authenticate user and issue JWT token
@router.post("/login", response_model=ApiResponse[AuthData])
def login(payload: UserLogin, request: Request, db: Session = Depends(get_db)):
    user = _find_by_email(db, payload.email)

    # Validate credentials and log failure on error
    if not user or not verify_password(payload.password, user.password_hash):
        write_log(db, user_id=(user.id if user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": payload.email})
        raise Unauthenticated("Invalid email or password.")

    write_log(db, user_id=user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": user.email})

    return ApiResponse(
        message="Login successful.",
        data=AuthData(user=UserResponse.model_validate(user), token=generate_token(user)),
    )


@router.get("/profile", response_model=ApiResponse[UserResponse])
def get_profile(current_user: User = Depends(get_current_user)):
    return ApiResponse(data=UserResponse.model_validate(current_user))


@router.put("/profile", response_model=ApiResponse[UserResponse])
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if payload.name is not None:
        current_user.name = payload.name
    if payload.phone is not None:
        current_user.phone = payload.phone
    if payload.address is not None:
        current_user.address = payload.address.model_dump()
    if payload.password is not None and payload.password.strip():
        current_user.password_hash = get_password_hash(payload.password)

    db.commit()
    db.refresh(current_user)
    return ApiResponse(message="Profile updated successfully.", data=UserResponse.model_validate(current_user))
