from __future__ import annotations
from datetime import date, datetime, time
from typing import Any, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator


class TransactionDoc(BaseModel):
    """A product transaction as stored in the transactions index."""

    id: Optional[int] = None          # upstream identifier, reused as the document id
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    dateOfSale: Optional[datetime] = None
    category: Optional[str] = None
    sold: Optional[bool] = None
    image: Optional[str] = None

    model_config = {
        "extra": "ignore",
    }

    @field_validator("dateOfSale", mode="before")
    @classmethod
    def _accept_plain_dates(cls, value: Any) -> Any:
        # "2023-03-05" is a valid sale date; widen it to midnight
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time.min)
        if isinstance(value, str) and len(value.strip()) == 10:
            return datetime.combine(date.fromisoformat(value.strip()), time.min)
        return value

    def to_source(self) -> dict[str, Any]:
        """Document body for the store: ISO-8601 dates, no None values."""
        body = self.model_dump(mode="json", exclude_none=True)
        if self.dateOfSale is not None:
            # keeps the YYYY-MM-DD prefix the month filter matches on
            body["dateOfSale"] = self.dateOfSale.isoformat()
        return body


class Statistics(BaseModel):
    totalSaleAmount: float = 0
    totalSoldItems: int = 0
    totalUnsoldItems: int = 0

    @field_serializer("totalSaleAmount")
    def _whole_amounts_as_int(self, value: float):
        # the store sums into a double; 150.0 goes out as 150
        return int(value) if float(value).is_integer() else value


class PriceRangeCount(BaseModel):
    range: str
    count: int


class CategoryCount(BaseModel):
    category: Optional[str] = None
    count: int


class CombinedView(BaseModel):
    statistics: Statistics
    priceRange: list[PriceRangeCount] = Field(default_factory=list)
    categoryBreakdown: list[CategoryCount] = Field(default_factory=list)
