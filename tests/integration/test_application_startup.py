"""Integration tests for application wiring: lifecycle, middleware, docs, health."""

import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.products_api.api.http.app import app, install_middleware, shutdown, startup
from src.products_api.api.http.app_data import ApplicationDependencies
from src.products_api.core.services import DbSessionService
from src.products_api.runtime.config.config_data import ConfigData
from src.products_api.runtime.context import with_context


class TestApplicationStartup:
    def test_startup_wires_database_and_creates_tables(self):
        test_config = ConfigData()
        test_config.database.url = "sqlite://"
        test_config.database.create_tables = True

        with with_context(test_config):
            asyncio.run(startup())
        try:
            deps = app.state.app_dependencies
            assert isinstance(deps, ApplicationDependencies)
            assert deps.database_service.health_check() is True

            from sqlalchemy import inspect

            assert "products" in inspect(deps.database_service.engine).get_table_names()
        finally:
            asyncio.run(shutdown())
            del app.state.app_dependencies

    def test_shutdown_without_startup_is_harmless(self):
        asyncio.run(shutdown())


class TestMiddleware:
    def test_request_id_is_generated(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.headers["x-request-id"]

    def test_request_id_is_echoed(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "abc-123"})

        assert response.headers["x-request-id"] == "abc-123"

    def test_security_headers(self, client: TestClient):
        response = client.get("/health")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
        assert "strict-transport-security" not in response.headers

    def test_cors_preflight_from_front_end(self, client: TestClient):
        response = client.options(
            "/api/products",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "DELETE",
                "Access-Control-Request-Headers": "X-Custom-Header",
            },
        )

        assert response.status_code == 200
        assert (
            response.headers["access-control-allow-origin"] == "http://localhost:5173"
        )
        assert "DELETE" in response.headers["access-control-allow-methods"]

    def test_cors_rejects_other_origins(self, client: TestClient):
        response = client.get(
            "/api/products", headers={"Origin": "http://evil.example.com"}
        )

        assert response.status_code == 200
        assert "access-control-allow-origin" not in response.headers



def _bare_app(config: ConfigData) -> FastAPI:
    application = FastAPI()

    @application.get("/ping")
    def ping():
        return {"ok": True}

    install_middleware(application, config)
    return application


class TestInstallMiddleware:
    def test_https_redirect_when_enabled(self):
        config = ConfigData()
        config.app.https_redirect = True
        client = TestClient(_bare_app(config), follow_redirects=False)

        response = client.get("/ping?x=1")

        assert response.status_code == 307
        assert response.headers["location"] == "https://testserver/ping?x=1"

    def test_no_redirect_by_default(self):
        client = TestClient(_bare_app(ConfigData()), follow_redirects=False)

        assert client.get("/ping").status_code == 200

    def test_hsts_in_production(self):
        config = ConfigData()
        config.app.environment = "production"
        client = TestClient(_bare_app(config))

        response = client.get("/ping")

        assert "max-age=31536000" in response.headers["strict-transport-security"]

    def test_wildcard_origin_with_credentials_is_rejected(self):
        config = ConfigData()
        config.app.cors.origins = ["*"]
        config.app.cors.allow_credentials = True

        with pytest.raises(RuntimeError, match="CORS misconfigured"):
            install_middleware(FastAPI(), config)


class TestDocs:
    def test_openapi_lists_product_routes(self, client: TestClient):
        response = client.get("/openapi.json")

        assert response.status_code == 200
        paths = response.json()["paths"]
        assert set(paths["/api/products"]) == {"get", "post"}
        assert set(paths["/api/products/{product_id}"]) == {"get", "put", "delete"}

    def test_swagger_ui_served(self, client: TestClient):
        assert client.get("/docs").status_code == 200


class TestHealth:
    def test_liveness(self, client: TestClient):
        response = client.get("/health")

        assert response.json() == {"status": "healthy", "service": "products-api"}

    def test_readiness_with_database(self, client: TestClient):
        response = client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["checks"]["database"]["status"] == "healthy"

    def test_readiness_when_database_down(self, client: TestClient, monkeypatch):
        deps: ApplicationDependencies = app.state.app_dependencies
        monkeypatch.setattr(deps.database_service, "health_check", lambda: False)

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"


def test_db_session_service_accepts_engine(engine):
    service = DbSessionService(engine=engine)

    assert service.engine is engine
    with service.session_scope() as session:
        assert session.bind is engine
