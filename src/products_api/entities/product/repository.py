"""Product repository: data access for the products table."""

from enum import Enum

from loguru import logger
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from sqlmodel import Session, select

from .entity import Product
from .table import ProductTable


class StoreResult(str, Enum):
    """Outcome of a write against the products table."""

    OK = "ok"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORAGE_FAULT = "storage_fault"


class ProductStoreError(Exception):
    """A write failed with an outcome the caller cannot recover from."""

    def __init__(self, outcome: StoreResult, product_id: int | None = None) -> None:
        self.outcome = outcome
        self.product_id = product_id
        super().__init__(f"Product store write failed: {outcome.value} (id={product_id})")


# Signed 64-bit range of the integer primary key
MIN_PRODUCT_ID = -(2**63)
MAX_PRODUCT_ID = 2**63 - 1


def is_storable_id(product_id: int | None) -> bool:
    """Whether an id can be sent to the database as a key value."""
    return product_id is not None and MIN_PRODUCT_ID <= product_id <= MAX_PRODUCT_ID


def to_entity(row: ProductTable) -> Product:
    return Product.model_validate(row, from_attributes=True)


def to_row(product: Product) -> ProductTable:
    """Build a new row from a product; the id is left for the store to assign."""
    return ProductTable.model_validate(product.model_dump(exclude={"id"}))


def to_row_values(product: Product) -> dict:
    """Column values for a whole-record replace, excluding the key."""
    return product.model_dump(exclude={"id"})


class ProductRepository:
    """Data-access layer for products.

    Every mutating method commits immediately. Writes report their outcome
    as a StoreResult instead of raising.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_all(self) -> list[Product]:
        rows = self._session.exec(select(ProductTable).order_by(ProductTable.id)).all()
        return [to_entity(row) for row in rows]

    def get(self, product_id: int) -> Product | None:
        if not is_storable_id(product_id):
            return None
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return None
        return to_entity(row)

    def exists(self, product_id: int) -> bool:
        if not is_storable_id(product_id):
            return False
        statement = select(ProductTable.id).where(ProductTable.id == product_id)
        return self._session.exec(statement).first() is not None

    def save(self) -> StoreResult:
        """Commit pending changes, rolling back and classifying any failure."""
        try:
            self._session.commit()
        except StaleDataError as exc:
            self._session.rollback()
            logger.warning("Concurrent modification detected on commit", error=str(exc))
            return StoreResult.CONFLICT
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error(
                "Database write failed",
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            return StoreResult.STORAGE_FAULT
        return StoreResult.OK

    def create(self, product: Product) -> Product:
        row = to_row(product)
        self._session.add(row)
        outcome = self.save()
        if outcome is not StoreResult.OK:
            raise ProductStoreError(outcome)
        self._session.refresh(row)
        logger.debug("Product created", product_id=row.id)
        return to_entity(row)

    def update(self, product: Product) -> StoreResult:
        """Replace every column of the row keyed by ``product.id``."""
        if not is_storable_id(product.id):
            return StoreResult.NOT_FOUND
        statement = (
            update(ProductTable)
            .where(ProductTable.id == product.id)
            .values(**to_row_values(product))
        )
        try:
            result = self._session.execute(statement)
        except StaleDataError:
            self._session.rollback()
            return self._resolve_conflict(product.id)
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error(
                "Database write failed",
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            return StoreResult.STORAGE_FAULT

        # No row matched: it was never there or vanished before the write
        if result.rowcount == 0:
            self._session.rollback()
            return self._resolve_conflict(product.id)

        outcome = self.save()
        if outcome is StoreResult.CONFLICT:
            return self._resolve_conflict(product.id)
        return outcome

    def delete(self, product_id: int) -> StoreResult:
        if not is_storable_id(product_id):
            return StoreResult.NOT_FOUND
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return StoreResult.NOT_FOUND
        self._session.delete(row)
        return self.save()

    def _resolve_conflict(self, product_id: int | None) -> StoreResult:
        if product_id is None or not self.exists(product_id):
            logger.info("Product missing at write time", product_id=product_id)
            return StoreResult.NOT_FOUND
        logger.warning("Product changed during write", product_id=product_id)
        return StoreResult.CONFLICT
