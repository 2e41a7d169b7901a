from typing import Optional
from datetime import datetime
from pydantic import Field

from schemas.common import ORMBase


class CategoryCreate(ORMBase):
    name: str = Field(min_length=1)
    description: str = ""


class CategoryUpdate(ORMBase):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None


class CategoryOut(ORMBase):
    id: int
    name: str
    description: str = ""
    created_at: Optional[datetime] = None
