import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api.routes import register_error_handlers, routers


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    for router in routers:
        app.include_router(router, prefix="/api")
    return TestClient(app)


@pytest.fixture()
def as_customer(customer):
    return {"X-Account-Id": str(customer.id)}


@pytest.fixture()
def as_admin(admin):
    return {"X-Account-Id": str(admin.id)}
