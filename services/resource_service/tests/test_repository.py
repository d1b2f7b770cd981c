import asyncio

import pytest
from bson import ObjectId

from services.resource_service.errors import ValidationError
from services.resource_service.repository import AddressRepository, CartRepository, serialize, to_object_id


def run(coro):
    return asyncio.run(coro)


class TestHelpers:

    def test_to_object_id_rejects_garbage(self):
        with pytest.raises(ValidationError) as exc_info:
            to_object_id("123")

        assert exc_info.value.message == "Invalid id: 123"
        assert exc_info.value.status_code == 400

    def test_serialize_renders_id_as_string(self):
        oid = ObjectId()

        assert serialize({"_id": oid, "city": "Chennai"}) == {"_id": str(oid), "city": "Chennai"}
        assert serialize(None) is None


class TestDocumentRepository:

    def test_scoped_lookup_requires_matching_owner(self, database):
        repo = AddressRepository(database)

        async def scenario():
            created = await repo.create({"street": "A"}, "u1")
            wrong_owner = await repo.update(created["_id"], {"street": "B"}, "u2")
            right_owner = await repo.update(created["_id"], {"street": "B"}, "u1")
            return wrong_owner, right_owner

        wrong_owner, right_owner = run(scenario())

        assert wrong_owner is None
        assert right_owner["street"] == "B"

    def test_unscoped_repository_ignores_owner(self, database):
        repo = AddressRepository(database, owner_scoped=False)

        async def scenario():
            created = await repo.create({"street": "A"})
            deleted = await repo.delete(created["_id"], "anyone")
            remaining = await repo.find_all()
            return created, deleted, remaining

        created, deleted, remaining = run(scenario())

        assert "userId" not in created
        assert deleted is True
        assert remaining == []


class TestCartRepository:

    def test_add_item_reports_creation_then_increment(self, database):
        repo = CartRepository(database)

        async def scenario():
            first = await repo.add_item("u1", "p1", 2, {"title": "Mug", "price": 12.5, "image": None})
            second = await repo.add_item("u1", "p1", 3, {"title": "Mug", "price": 12.5, "image": None})
            return first, second

        (first_item, first_created), (second_item, second_created) = run(scenario())

        assert first_created is True
        assert second_created is False
        assert second_item["_id"] == first_item["_id"]
        assert second_item["quantity"] == 5

    def test_ensure_indexes_creates_unique_compound_index(self, database):
        repo = CartRepository(database)

        async def scenario():
            await repo.ensure_indexes()
            return await repo.collection.index_information()

        indexes = run(scenario())

        assert indexes["productId_userId_unique"]["unique"] is True
        assert indexes["productId_userId_unique"]["key"] == [("productId", 1), ("userId", 1)]
