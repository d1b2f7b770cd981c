from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

ADDRESS_FIELDS = ("street", "landmark", "area", "address", "pincode", "city")


def _address_field(name: str):
    # Older front-ends post the address fields prefixed with "new"
    legacy_name = "new" + name[0].upper() + name[1:]
    return Field(None, validation_alias=AliasChoices(name, legacy_name))


class AddressRequest(BaseModel):
    """Request body for creating or replacing an address."""

    street: Optional[str] = _address_field("street")
    landmark: Optional[str] = _address_field("landmark")
    area: Optional[str] = _address_field("area")
    address: Optional[str] = _address_field("address")
    pincode: Optional[str] = _address_field("pincode")
    city: Optional[str] = _address_field("city")
    user_id: Optional[str] = Field(None, alias="userId")

    def fields(self) -> Dict[str, Any]:
        """The six address fields, None for the ones not supplied."""
        return {name: getattr(self, name) for name in ADDRESS_FIELDS}


class OwnerRequest(BaseModel):
    """Body of DELETE requests: only the caller's userId."""

    user_id: Optional[str] = Field(None, alias="userId")


class CartItemRequest(BaseModel):
    """Request model for adding an item to the cart."""

    product_id: Optional[str] = Field(None, alias="productId")
    title: Optional[str] = None
    price: Optional[float] = None
    image: Optional[str] = None
    quantity: Optional[int] = None
    user_id: Optional[str] = Field(None, alias="userId")


class UpdateQuantityRequest(BaseModel):
    """Request model for updating item quantity."""

    quantity: Optional[int] = None
    user_id: Optional[str] = Field(None, alias="userId")


class AddressResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    street: Optional[str] = None
    landmark: Optional[str] = None
    area: Optional[str] = None
    address: Optional[str] = None
    pincode: Optional[str] = None
    city: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="userId")


class CartItemResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    product_id: str = Field(alias="productId")
    title: Optional[str] = None
    price: Optional[float] = None
    image: Optional[str] = None
    quantity: int
    user_id: str = Field(alias="userId")


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    service: str
    version: str
    database: str
