"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.products_api.api.http.app_data import ApplicationDependencies
from src.products_api.entities.product import ProductRepository


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    """Get the application-wide dependencies wired at startup."""
    return request.app.state.app_dependencies


def get_db_session(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> Iterator[Session]:
    """Open a database session scoped to the current request."""
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_product_repository(db: Session = Depends(get_db_session)) -> ProductRepository:
    return ProductRepository(db)
