from datetime import date
from math import ceil
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional

from .round import Round


class RoundFilters(BaseModel):
    """Round list query: owner-scoped, optional date range and course, paged."""
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    course_id: Optional[str] = None

    @model_validator(mode='after')
    def validate_range(self):
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("'from' must not be after 'to'")
        return self

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, filters: RoundFilters, total: int) -> "Pagination":
        return cls(
            page=filters.page,
            limit=filters.limit,
            total=total,
            total_pages=ceil(total / filters.limit),
        )


class RoundPage(BaseModel):
    items: List[Round]
    pagination: Pagination
