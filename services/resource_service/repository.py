"""
Document repositories for the resource service.

DocumentRepository implements the CRUD operations shared by every resource over
one MongoDB collection. When ``owner_scoped`` is set, every lookup is filtered by
the owning ``userId`` as well as by ``_id``, so a caller can only see and modify
its own documents. The legacy address API runs the same code unscoped.

All methods are coroutines around a single store call (the cart upsert also
reads back the document it touched). PyMongoError propagates to the caller,
which decides the HTTP status.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument

from .errors import ValidationError

logger = logging.getLogger(__name__)


def to_object_id(document_id: str) -> ObjectId:
    """Parse a path identifier, rejecting anything that is not an ObjectId."""
    if not ObjectId.is_valid(document_id):
        raise ValidationError(f"Invalid id: {document_id}")
    return ObjectId(document_id)


def serialize(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Render the ObjectId as a hex string so the document is JSON friendly."""
    if document is None:
        return None
    doc = dict(document)
    doc["_id"] = str(doc["_id"])
    return doc


class DocumentRepository:
    """CRUD over one collection, optionally scoped to an owning user."""

    collection_name: str = ""
    owner_field = "userId"

    def __init__(self, database: Any, owner_scoped: bool = True):
        self.collection = database[self.collection_name]
        self.owner_scoped = owner_scoped

    def _match(self, document_id: str, user_id: Optional[str]) -> Dict[str, Any]:
        query: Dict[str, Any] = {"_id": to_object_id(document_id)}
        if self.owner_scoped:
            query[self.owner_field] = user_id
        return query

    async def find_all(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        query = {self.owner_field: user_id} if self.owner_scoped else {}
        documents = await self.collection.find(query).to_list(length=None)
        return [serialize(doc) for doc in documents]

    async def create(self, fields: Dict[str, Any], user_id: Optional[str] = None) -> Dict[str, Any]:
        document = dict(fields)
        if self.owner_scoped:
            document[self.owner_field] = user_id
        result = await self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        logger.info(f"Created {self.collection_name} document {result.inserted_id} for user {user_id}")
        return serialize(document)

    async def update(
        self, document_id: str, fields: Dict[str, Any], user_id: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Set ``fields`` on the matching document. Returns None if nothing matched."""
        updated = await self.collection.find_one_and_update(
            self._match(document_id, user_id),
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            logger.warning(f"No {self.collection_name} document {document_id} for user {user_id}")
        else:
            logger.info(f"Updated {self.collection_name} document {document_id}")
        return serialize(updated)

    async def delete(self, document_id: str, user_id: Optional[str] = None) -> bool:
        """Delete the matching document. Returns True if one was removed."""
        deleted = await self.collection.find_one_and_delete(self._match(document_id, user_id))
        if deleted is None:
            logger.warning(f"No {self.collection_name} document {document_id} for user {user_id}")
            return False
        logger.info(f"Deleted {self.collection_name} document {document_id}")
        return True


class AddressRepository(DocumentRepository):
    """Shipping addresses, collection ``addresses``."""

    collection_name = "addresses"


class CartRepository(DocumentRepository):
    """Cart items, collection ``cartitems``. One document per (productId, userId)."""

    collection_name = "cartitems"

    async def ensure_indexes(self) -> None:
        await self.collection.create_index(
            [("productId", ASCENDING), (self.owner_field, ASCENDING)],
            unique=True,
            name="productId_userId_unique",
        )
        logger.info("Ensured unique productId/userId index on cartitems")

    async def add_item(
        self,
        user_id: str,
        product_id: str,
        quantity: int = 1,
        details: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Optional[Dict[str, Any]], bool]:
        """Add ``quantity`` of a product to the user's cart.

        Increments the existing line if there is one, otherwise inserts a new
        line carrying ``details`` (title, price, image). The increment and the
        insert are a single atomic upsert.

        Returns the resulting document and whether it was newly created.
        """
        query = {"productId": product_id, self.owner_field: user_id}
        update: Dict[str, Any] = {"$inc": {"quantity": quantity}}
        if details:
            update["$setOnInsert"] = details

        result = await self.collection.update_one(query, update, upsert=True)
        created = result.upserted_id is not None

        item = await self.collection.find_one(query)
        if created:
            logger.info(f"Added cart item {product_id} for user {user_id} with quantity {quantity}")
        else:
            logger.info(f"Incremented cart item {product_id} for user {user_id} by {quantity}")
        return serialize(item), created
