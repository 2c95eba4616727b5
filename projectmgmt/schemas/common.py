# projectmgmt/schemas/common.py
from math import ceil
from typing import Any, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Uniform envelope wrapped around every API response
class ApiResponse(BaseModel, Generic[T]):
    success: bool
    message: Optional[str] = None
    data: Optional[T] = None


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    return {"success": True, "message": message, "data": data}


def error(message: str, data: Any = None) -> dict:
    return {"success": False, "message": message, "data": data}


# Zero-based page request; offset/limit derive from it
class PageRequest(BaseModel):
    page: int = Field(0, ge=0)
    page_size: int = Field(10, ge=1, le=100)
    sort_by: str = "id"
    order: Literal["asc", "desc"] = "asc"

    @property
    def offset(self) -> int:
        return self.page * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


# Schema for paginated list responses
class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def build(cls, items: List[T], total: int, request: PageRequest) -> "Page[T]":
        return cls(
            items=items,
            total=total,
            page=request.page,
            page_size=request.page_size,
            total_pages=ceil(total / request.page_size) if total else 0,
        )
