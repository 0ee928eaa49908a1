"""Entity: Product."""

from typing import Any

from pydantic import BaseModel, Field


class Product(BaseModel):
    """Product entity as exchanged over the API.

    The identifier is assigned by the store on insert and is ``None`` for a
    product that has not been persisted yet.
    """

    id: int | None = Field(default=None, description="Store-assigned identifier")
    name: str = Field(min_length=1, max_length=200, description="Product name")
    price: float = Field(ge=0, description="Unit price")
    description: str | None = Field(default=None, description="Free-form description")

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Product):
            return False

        return (
            self.id == other.id
            and self.name == other.name
            and self.price == other.price
            and self.description == other.description
        )

    def __hash__(self) -> int:
        return hash((self.id, self.name, self.price, self.description))
