"""Product API router with CRUD operations."""

from fastapi import APIRouter, Depends, Request, Response, status
from loguru import logger

from src.products_api.api.http.deps import get_product_repository
from src.products_api.entities.product import (
    Product,
    ProductRepository,
    ProductStoreError,
    StoreResult,
)

router = APIRouter(prefix="/api/products", tags=["products"])


def _status_response(outcome: StoreResult, product_id: int) -> Response:
    """Map a write outcome to an empty-bodied response.

    Conflicts and storage faults are not recoverable here and propagate as
    server errors.
    """
    if outcome is StoreResult.OK:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    if outcome is StoreResult.NOT_FOUND:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    raise ProductStoreError(outcome, product_id)


@router.get("", response_model=list[Product])
def list_products(
    repository: ProductRepository = Depends(get_product_repository),
) -> list[Product]:
    """List all products."""
    return repository.list_all()


@router.get("/{product_id}", response_model=Product)
def get_product(
    product_id: int,
    repository: ProductRepository = Depends(get_product_repository),
) -> Product | Response:
    """Get a product by ID."""
    product = repository.get(product_id)
    if product is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return product


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(
    product: Product,
    request: Request,
    response: Response,
    repository: ProductRepository = Depends(get_product_repository),
) -> Product:
    """Create a new product. Any identifier in the body is ignored."""
    created = repository.create(product)
    response.headers["Location"] = str(
        request.url_for("list_products").include_query_params(id=created.id)
    )
    logger.info("Product created", product_id=created.id)
    return created


@router.put(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def update_product(
    product_id: int,
    product: Product,
    repository: ProductRepository = Depends(get_product_repository),
) -> Response:
    """Replace a product. The body identifier must match the path."""
    if product.id != product_id:
        logger.warning(
            "Product id mismatch", path_id=product_id, body_id=product.id
        )
        return Response(status_code=status.HTTP_400_BAD_REQUEST)

    outcome = repository.update(product)
    logger.info("Product update finished", product_id=product_id, outcome=outcome.value)
    return _status_response(outcome, product_id)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def delete_product(
    product_id: int,
    repository: ProductRepository = Depends(get_product_repository),
) -> Response:
    """Delete a product."""
    outcome = repository.delete(product_id)
    logger.info("Product delete finished", product_id=product_id, outcome=outcome.value)
    return _status_response(outcome, product_id)
