# backend/schemas/common.py
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


# Base configuration: ORM compatibility and camelCase JSON keys
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


# Pagination block returned next to listing data
class Pagination(ORMBase):
    total: int
    page: int
    pages: int
    limit: int


# Envelope shared by every endpoint
class ApiResponse(ORMBase, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    pagination: Optional[Pagination] = None


class MessageResponse(ORMBase):
    success: bool = True
    message: Optional[str] = None
