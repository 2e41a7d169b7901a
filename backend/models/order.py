import enum
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    # Orders outlive deleted accounts; the owner link is cleared instead
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(String, nullable=False, default=OrderStatus.PENDING.value)
    total = Column(Float, CheckConstraint("total >= 0"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Payment details (mocked, no gateway)
    payment_method = Column(String, nullable=False, default="cod")
    payment_status = Column(String, nullable=False, default="")
    payment_transaction_id = Column(String, nullable=False, default="")
    paid_at = Column(DateTime(timezone=True), nullable=True)

    # Shipping address captured at checkout
    shipping_address_line = Column(String, nullable=False)
    shipping_city = Column(String, nullable=False)
    shipping_postal_code = Column(String, nullable=False)
    shipping_country = Column(String, nullable=False)

    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )
    user = relationship("User")

    @property
    def payment_info(self) -> dict:
        return {
            "method": self.payment_method,
            "transaction_id": self.payment_transaction_id or "",
            "status": self.payment_status or "",
            "paid_at": self.paid_at,
        }

    @property
    def shipping_address(self) -> dict:
        return {
            "address": self.shipping_address_line,
            "city": self.shipping_city,
            "postal_code": self.shipping_postal_code,
            "country": self.shipping_country,
        }

# Snapshot of a purchased product; never updated after the order is placed
class OrderItem(Base):
    __tablename__ = "order_items"
    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    title = Column(String, nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity >= 1"), nullable=False)
    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    image = Column(String, nullable=False, default="")

    order = relationship("Order", back_populates="items")
