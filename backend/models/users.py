# backend/models/users.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from database import Base

# Closed set of roles recognised by the route guards
class Role(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"

# Represents a shopper or administrator account
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.USER.value)
    phone = Column(String, nullable=True)

    # Profile address used to prefill checkout
    address_line = Column(String, nullable=True)
    address_city = Column(String, nullable=True)
    address_state = Column(String, nullable=True)
    address_postal_code = Column(String, nullable=True)
    address_country = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Cart is looked up through carts.user_id, nothing is stored on the user row
    cart = relationship("Cart", uselist=False, viewonly=True)

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == Role.ADMIN.value

    @property
    def address(self) -> dict:
        return {
            "address": self.address_line or "",
            "city": self.address_city or "",
            "state": self.address_state or "",
            "postal_code": self.address_postal_code or "",
            "country": self.address_country or "",
        }

    @address.setter
    def address(self, value: dict):
        value = value or {}
        self.address_line = value.get("address", self.address_line)
        self.address_city = value.get("city", self.address_city)
        self.address_state = value.get("state", self.address_state)
        self.address_postal_code = value.get("postal_code", self.address_postal_code)
        self.address_country = value.get("country", self.address_country)
