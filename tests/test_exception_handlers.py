import asyncio

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from orders_api.core import config
from orders_api.core.errors import (
    DomainValidationError,
    DuplicateEmailError,
    OrderCreationCancelledError,
    ProductNotFoundError,
)
from orders_api.core.exception_handlers import (
    collect_validation_errors,
    register_exception_handlers,
    status_code_for,
)
from orders_api.middleware.observability import ObservabilityMiddleware


def _build_client() -> TestClient:
    app = FastAPI()
    app.add_middleware(ObservabilityMiddleware)
    register_exception_handlers(app)

    @app.get("/domain-error")
    def domain_error():
        raise DomainValidationError("items required")

    @app.get("/integrity-error")
    def integrity_error():
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    @app.get("/timeout")
    def timeout():
        raise TimeoutError("database did not answer")

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    @app.get("/cancelled")
    async def cancelled():
        await asyncio.sleep(0)
        raise OrderCreationCancelledError()

    return TestClient(app)


def test_status_code_for_walks_the_hierarchy():
    assert status_code_for(DuplicateEmailError("a@b.com")) == 409
    assert status_code_for(ProductNotFoundError([1, 2])) == 404
    assert status_code_for(OrderCreationCancelledError()) == 499
    assert status_code_for(DomainValidationError("x")) == 400


def test_collect_validation_errors_groups_messages_by_field():
    errors = [
        {"loc": ("body", "items", 0, "quantity"), "msg": "Input should be greater than 0"},
        {"loc": ("body", "items"), "msg": "Value error, items required"},
        {"loc": ("query", "pageSize"), "msg": "too big"},
        {"loc": ("body", "items", 0, "quantity"), "msg": "second"},
    ]

    assert collect_validation_errors(errors) == {
        "items.0.quantity": ["Input should be greater than 0", "second"],
        "items": ["items required"],
        "pageSize": ["too big"],
    }


def test_domain_validation_error_maps_to_problem_details():
    response = _build_client().get("/domain-error")

    assert response.status_code == 400
    assert response.json() == {
        "type": "https://httpstatuses.io/400",
        "title": "One or more validation errors occurred.",
        "status": 400,
        "detail": "items required",
        "errors": {"request": ["items required"]},
    }


def test_integrity_error_maps_to_conflict():
    response = _build_client().get("/integrity-error")

    assert response.status_code == 409


def test_timeout_maps_to_service_unavailable():
    response = _build_client().get("/timeout")

    assert response.status_code == 503


def test_cancelled_order_maps_to_499():
    assert _build_client().get("/cancelled").status_code == 499


def test_unhandled_error_shows_detail_outside_production():
    response = _build_client().get("/boom")

    assert response.status_code == 500
    assert response.json()["title"] == "An unexpected error occurred."
    assert response.json()["detail"] == "kaboom"
    assert response.headers["X-Request-ID"]


def test_unhandled_error_hides_detail_in_production(monkeypatch):
    monkeypatch.setattr(config, "IS_PROD", True)

    response = _build_client().get("/boom")

    assert response.status_code == 500
    assert response.json()["detail"] is None


def test_unknown_route_uses_problem_details():
    response = _build_client().get("/missing")

    assert response.status_code == 404
    assert response.json()["title"] == "Not Found"
