# backend/schemas/product.py
from pydantic import Field, computed_field
from typing import Optional, List
from datetime import datetime

from schemas.common import ORMBase


# Shape accepted by create and update. Legacy clients send `name` instead
# of `title` and an `images` list instead of `image`
class ProductInput(ORMBase):
    title: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = Field(default=None, alias="category")
    price: Optional[float] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    image: Optional[str] = None
    images: Optional[List[str]] = None

    def resolved_title(self) -> Optional[str]:
        return self.name if self.title is None else self.title

    def resolved_image(self) -> Optional[str]:
        if self.image is not None:
            return self.image
        if self.images:
            return self.images[0]
        return None


class CategoryRef(ORMBase):
    id: int
    name: str


# Full product representation
class ProductOut(ORMBase):
    id: int
    title: str
    description: str
    category: Optional[CategoryRef] = None
    price: float
    stock: int
    image: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def name(self) -> str:
        return self.title

    @computed_field
    @property
    def images(self) -> List[str]:
        return [self.image] if self.image else []


# Product fields needed to render a cart line
class CartProductOut(ORMBase):
    id: int
    title: str
    price: float
    image: str = ""
    stock: int
