from pydantic import AliasChoices, Field
from typing import List, Optional
from datetime import datetime

from schemas.common import ORMBase
from schemas.product import CartProductOut

# Request schema for adding an item to the cart
class CartAddItem(ORMBase):
    product_id: int = Field(validation_alias=AliasChoices("productId", "product", "product_id"))
    quantity: int = Field(default=1, validation_alias=AliasChoices("quantity", "qty"))

# Request schema for updating cart item quantity
class CartUpdateItem(ORMBase):
    quantity: int = Field(default=1, validation_alias=AliasChoices("quantity", "qty"))

# Response schema for a single cart line item; product is None when it was deleted
class CartItemOut(ORMBase):
    product_id: int
    product: Optional[CartProductOut] = None
    quantity: int

# Response schema for the cart merged with its totals
class CartOut(ORMBase):
    id: int
    user_id: int
    items: List[CartItemOut]
    items_count: int
    subtotal: float
    updated_at: Optional[datetime] = None
