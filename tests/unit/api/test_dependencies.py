"""Unit tests for the FastAPI dependency providers."""

from types import SimpleNamespace

from sqlalchemy.engine import Engine
from sqlmodel import Session

from src.products_api.api.http.app_data import ApplicationDependencies
from src.products_api.api.http.deps import (
    get_app_dependencies,
    get_db_session,
    get_product_repository,
)
from src.products_api.core.services import DbSessionService
from src.products_api.entities.product import ProductRepository


def _request_with(deps: ApplicationDependencies):
    app = SimpleNamespace(state=SimpleNamespace(app_dependencies=deps))
    return SimpleNamespace(app=app)


class TestDependencies:
    def test_get_app_dependencies_reads_app_state(self, engine: Engine):
        deps = ApplicationDependencies(database_service=DbSessionService(engine=engine))

        assert get_app_dependencies(_request_with(deps)) is deps

    def test_db_session_is_closed_after_request(self, engine: Engine, monkeypatch):
        deps = ApplicationDependencies(database_service=DbSessionService(engine=engine))
        closed = []

        generator = get_db_session(deps)
        session = next(generator)
        monkeypatch.setattr(session, "close", lambda: closed.append(True))

        assert isinstance(session, Session)
        assert session.bind is engine

        generator.close()
        assert closed == [True]

    def test_each_request_gets_its_own_session(self, engine: Engine):
        deps = ApplicationDependencies(database_service=DbSessionService(engine=engine))

        first = next(get_db_session(deps))
        second = next(get_db_session(deps))

        assert first is not second

    def test_repository_wraps_session(self, session: Session):
        repository = get_product_repository(session)

        assert isinstance(repository, ProductRepository)
        assert repository.list_all() == []
