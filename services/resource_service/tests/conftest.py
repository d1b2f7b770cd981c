import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from services.resource_service.main import Settings, create_app

ALLOWED_ORIGIN = "http://localhost:5173"


@pytest.fixture
def database():
    """In-memory MongoDB database, fresh for every test."""
    return AsyncMongoMockClient()["shop_test"]


@pytest.fixture
def settings() -> Settings:
    return Settings(mongodb_uri="mongodb://unused:27017", allowed_origins=[ALLOWED_ORIGIN])


@pytest.fixture
def test_client(settings: Settings, database) -> TestClient:
    """Client for the owner-scoped API."""
    return TestClient(create_app(settings, database=database))


@pytest.fixture
def legacy_client(database) -> TestClient:
    """Client for the unscoped address API."""
    legacy = Settings(mongodb_uri="mongodb://unused:27017", allowed_origins=[ALLOWED_ORIGIN], owner_scoped=False)
    return TestClient(create_app(legacy, database=database))


@pytest.fixture
def create_address(test_client: TestClient):
    """Create an address for a user and return the response body."""

    def _create(user_id: str, **fields) -> dict:
        body = {"street": "12 High St", "city": "Chennai", "pincode": "600001", **fields, "userId": user_id}
        response = test_client.post("/api/address", json=body)
        assert response.status_code == 201
        return response.json()

    return _create


@pytest.fixture
def add_to_cart(test_client: TestClient):
    """Post a product to a user's cart and return the raw response."""

    def _add(user_id: str, product_id: str, quantity=None, **fields):
        body = {"productId": product_id, "userId": user_id, **fields}
        if quantity is not None:
            body["quantity"] = quantity
        return test_client.post("/api/cart", json=body)

    return _add
