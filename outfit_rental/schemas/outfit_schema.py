"""Outfit catalog data model."""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from outfit_rental.config import settings
from outfit_rental.schemas.booking_schema import coerce_size


class Outfit(BaseModel):
    """An outfit design with its sizes and per-size stock."""

    id: str
    code: Optional[str] = None
    name: str = ""
    sizes: list[str] = Field(default_factory=list)
    size_quantities: dict[str, int] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("size_quantities", "sizeQuantities"),
    )
    rental_price: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("rental_price", "price")
    )
    status: str = "Available"

    @field_validator("sizes", mode="before")
    @classmethod
    def _normalize_sizes(cls, value: Any) -> list[str]:
        sizes = [coerce_size(size) for size in (value or [])]
        return [size for size in dict.fromkeys(sizes) if size]

    @field_validator("size_quantities", mode="before")
    @classmethod
    def _normalize_quantities(cls, value: Any) -> dict[str, Any]:
        normalized: dict[str, Any] = {}
        for size, quantity in (value or {}).items():
            key = coerce_size(size)
            if key:
                normalized[key] = quantity or 0
        return normalized

    @property
    def is_archived(self) -> bool:
        return self.status.lower() == "archived"

    @property
    def all_sizes(self) -> list[str]:
        """Configured sizes in display order, plus any stocked-only sizes."""
        extra = [size for size in self.size_quantities if size not in self.sizes]
        return self.sizes + extra

    def quantity_for(self, size: str) -> int:
        """Physical units of a size. Missing or zero quantities mean one unit."""
        return self.size_quantities.get(size) or settings.rental.default_size_quantity
