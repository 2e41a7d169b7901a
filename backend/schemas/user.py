from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime

from schemas.common import ORMBase

# Address block stored on the user profile
class AddressSchema(ORMBase):
    address: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""

# Schema for user authentication credentials
class UserLogin(ORMBase):
    email: EmailStr
    password: str

# Schema for user registration requests
class UserCreate(ORMBase):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)

# Self-service profile update
class ProfileUpdate(ORMBase):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[AddressSchema] = None
    password: Optional[str] = Field(default=None, max_length=72)

# Admin-side user update
class UserAdminUpdate(ORMBase):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[str] = Field(default=None, pattern="^(admin|user)$")
    phone: Optional[str] = None
    address: Optional[AddressSchema] = None

# Output schema for user profile details
class UserResponse(ORMBase):
    id: int
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    address: AddressSchema
    created_at: Optional[datetime] = None

# Minimal user reference embedded in orders
class UserSummary(ORMBase):
    id: int
    name: str
    email: str

# Login / registration payload
class AuthData(ORMBase):
    user: UserResponse
    token: str
