from pydantic import Field, computed_field
from typing import List, Literal, Optional
from datetime import datetime

from schemas.common import ORMBase
from schemas.user import UserSummary

OrderStatusValue = Literal["pending", "processing", "shipped", "delivered", "cancelled"]


# Address the order ships to; every field is required at checkout
class ShippingAddress(ORMBase):
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


# Input schema for placing an order from the current cart
class OrderCreatePayload(ORMBase):
    shipping_address: Optional[ShippingAddress] = None
    payment_method: str = "cod"


# Mock payment confirmation; `id` is the gateway transaction id
class OrderPayPayload(ORMBase):
    id: Optional[str] = None
    status: Optional[str] = None


# Schema for updating order status
class OrderStatusPatch(ORMBase):
    status: OrderStatusValue


class PaymentInfoOut(ORMBase):
    method: str
    transaction_id: str = ""
    status: str = ""
    paid_at: Optional[datetime] = None


# Output schema for a line-item snapshot; `name` and `qty` are legacy spellings
class OrderItemOut(ORMBase):
    product_id: Optional[int] = None
    title: str
    quantity: int
    price: float
    image: str = ""

    @computed_field
    @property
    def name(self) -> str:
        return self.title

    @computed_field
    @property
    def qty(self) -> int:
        return self.quantity


# Output schema representing the full order details
class OrderOut(ORMBase):
    id: int
    user_id: Optional[int] = None
    user: Optional[UserSummary] = None
    items: List[OrderItemOut]
    total: float
    status: str
    payment_info: PaymentInfoOut
    shipping_address: ShippingAddress
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field(alias="orderItems")
    @property
    def order_items(self) -> List[OrderItemOut]:
        return self.items

    @computed_field(alias="totalPrice")
    @property
    def total_price(self) -> float:
        return self.total

    @computed_field(alias="paymentResult")
    @property
    def payment_result(self) -> PaymentInfoOut:
        return self.payment_info

    @computed_field(alias="isPaid")
    @property
    def is_paid(self) -> bool:
        return self.payment_info.status == "COMPLETED"

    @computed_field(alias="paidAt")
    @property
    def paid_at(self) -> Optional[datetime]:
        return self.payment_info.paid_at
