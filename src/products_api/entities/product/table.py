"""Product database table model."""

from sqlmodel import Field, SQLModel


class ProductTable(SQLModel, table=True):
    """Database persistence model for products.

    This represents how the Product entity is stored in the database.
    It's separate from the domain entity so the API shape and the row
    shape can evolve independently.
    """

    __tablename__ = "products"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=200)
    price: float
    description: str | None = None
