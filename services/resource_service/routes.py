import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from .errors import MissingUserId, NotFoundOrUnauthorized, StoreError, ValidationError
from .repository import AddressRepository, CartRepository
from .schemas import (
    AddressRequest,
    AddressResponse,
    CartItemRequest,
    CartItemResponse,
    MessageResponse,
    OwnerRequest,
    UpdateQuantityRequest,
)

logger = logging.getLogger(__name__)

ADDRESS_NOT_FOUND = "Address not found or unauthorized"
CART_ITEM_NOT_FOUND = "Cart item not found or unauthorized"


def get_address_repository(request: Request) -> AddressRepository:
    return AddressRepository(request.app.state.database, owner_scoped=request.app.state.settings.owner_scoped)


def get_cart_repository(request: Request) -> CartRepository:
    return CartRepository(request.app.state.database)


def require_user_id(user_id: Optional[str]) -> str:
    """Reject the request before touching the store when no userId was sent."""
    if not user_id:
        raise MissingUserId()
    return user_id


def build_address_router(owner_scoped: bool = True) -> APIRouter:
    """Address routes. Unscoped routes list every address and ignore userId."""
    router = APIRouter(prefix="/address", tags=["address"])

    def owner_of(user_id: Optional[str]) -> Optional[str]:
        return require_user_id(user_id) if owner_scoped else None

    @router.post("", status_code=status.HTTP_201_CREATED, response_model=AddressResponse)
    async def create_address(
        request: AddressRequest, repo: AddressRepository = Depends(get_address_repository)
    ) -> AddressResponse:
        """Add a new address."""
        user_id = owner_of(request.user_id)
        try:
            address = await repo.create(request.fields(), user_id)
        except PyMongoError as e:
            logger.error(f"Error creating address: {e}")
            raise ValidationError(str(e))
        return AddressResponse(**address)

    async def _list(repo: AddressRepository, user_id: Optional[str]) -> List[AddressResponse]:
        try:
            addresses = await repo.find_all(user_id)
        except PyMongoError as e:
            logger.exception("Error listing addresses")
            raise StoreError(str(e))
        return [AddressResponse(**address) for address in addresses]

    if owner_scoped:

        @router.get("/{user_id}", response_model=List[AddressResponse])
        async def list_addresses(
            user_id: str, repo: AddressRepository = Depends(get_address_repository)
        ) -> List[AddressResponse]:
            """Fetch addresses for a specific user."""
            return await _list(repo, user_id)

    else:

        @router.get("", response_model=List[AddressResponse])
        async def list_all_addresses(
            repo: AddressRepository = Depends(get_address_repository),
        ) -> List[AddressResponse]:
            """Fetch every address."""
            return await _list(repo, None)

    @router.put("/{address_id}", response_model=AddressResponse)
    async def update_address(
        address_id: str,
        request: AddressRequest,
        repo: AddressRepository = Depends(get_address_repository),
    ) -> AddressResponse:
        """Replace all address fields."""
        user_id = owner_of(request.user_id)
        try:
            updated = await repo.update(address_id, request.fields(), user_id)
        except PyMongoError as e:
            logger.error(f"Error updating address {address_id}: {e}")
            raise ValidationError(str(e))
        if updated is None:
            raise NotFoundOrUnauthorized(ADDRESS_NOT_FOUND)
        return AddressResponse(**updated)

    @router.delete("/{address_id}", response_model=MessageResponse)
    async def delete_address(
        address_id: str,
        request: Optional[OwnerRequest] = None,
        repo: AddressRepository = Depends(get_address_repository),
    ) -> MessageResponse:
        """Remove an address."""
        user_id = owner_of(request.user_id if request else None)
        try:
            deleted = await repo.delete(address_id, user_id)
        except PyMongoError as e:
            logger.exception(f"Error deleting address {address_id}")
            raise StoreError(str(e))
        if not deleted:
            raise NotFoundOrUnauthorized(ADDRESS_NOT_FOUND)
        return MessageResponse(message="Address deleted successfully")

    return router


def build_cart_router() -> APIRouter:
    """Cart routes. Always scoped to the caller's userId."""
    router = APIRouter(prefix="/cart", tags=["cart"])

    @router.post(
        "",
        response_model=CartItemResponse,
        responses={status.HTTP_201_CREATED: {"model": CartItemResponse}},
    )
    async def add_item(request: CartItemRequest, repo: CartRepository = Depends(get_cart_repository)):
        """Add item to cart or increase its quantity. 201 when created, 200 when incremented."""
        user_id = require_user_id(request.user_id)
        if not request.product_id:
            raise ValidationError("productId is required")

        quantity = 1 if request.quantity is None else request.quantity
        details = {"title": request.title, "price": request.price, "image": request.image}
        try:
            item, created = await repo.add_item(user_id, request.product_id, quantity, details)
        except PyMongoError as e:
            logger.error(f"Error adding item to cart: {e}")
            raise ValidationError(str(e))
        if item is None:
            # Removed by a concurrent delete between the upsert and the read back
            raise NotFoundOrUnauthorized(CART_ITEM_NOT_FOUND)

        body = CartItemResponse(**item).model_dump(mode="json", by_alias=True)
        return JSONResponse(
            status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
            content=body,
        )

    @router.get("/{user_id}", response_model=List[CartItemResponse])
    async def get_cart(user_id: str, repo: CartRepository = Depends(get_cart_repository)) -> List[CartItemResponse]:
        """Fetch cart items for a user."""
        try:
            items = await repo.find_all(user_id)
        except PyMongoError as e:
            logger.exception("Error getting cart")
            raise StoreError(str(e))
        return [CartItemResponse(**item) for item in items]

    @router.put("/{item_id}", response_model=CartItemResponse)
    async def update_item_quantity(
        item_id: str, request: UpdateQuantityRequest, repo: CartRepository = Depends(get_cart_repository)
    ) -> CartItemResponse:
        """Overwrite the quantity of a cart item."""
        user_id = require_user_id(request.user_id)
        if request.quantity is None:
            raise ValidationError("quantity is required")
        try:
            updated = await repo.update(item_id, {"quantity": request.quantity}, user_id)
        except PyMongoError as e:
            logger.error(f"Error updating cart item {item_id}: {e}")
            raise ValidationError(str(e))
        if updated is None:
            raise NotFoundOrUnauthorized(CART_ITEM_NOT_FOUND)
        return CartItemResponse(**updated)

    @router.delete("/{item_id}", response_model=MessageResponse)
    async def remove_item(
        item_id: str,
        request: Optional[OwnerRequest] = None,
        repo: CartRepository = Depends(get_cart_repository),
    ) -> MessageResponse:
        """Remove an item from the cart."""
        user_id = require_user_id(request.user_id if request else None)
        try:
            deleted = await repo.delete(item_id, user_id)
        except PyMongoError as e:
            logger.exception(f"Error removing cart item {item_id}")
            raise StoreError(str(e))
        if not deleted:
            raise NotFoundOrUnauthorized(CART_ITEM_NOT_FOUND)
        return MessageResponse(message="Item removed from cart")

    return router
