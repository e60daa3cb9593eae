from typing import Any, List, Optional
from datetime import datetime
from pydantic import AliasChoices, BaseModel, Field


# Quantities are passed through unconverted; CartService.validate_quantity
# rejects anything that is not a positive JSON integer with InvalidQuantity.
class AddToCartRequest(BaseModel):
    """Schema for adding a product to cart."""
    product_id: str = Field(validation_alias=AliasChoices("product_id", "productId", "productRef"))
    quantity: Any = 1

    class Config:
        json_schema_extra = {
            "example": {
                "product_id": "65a1f0c2e4b0a1b2c3d4e5f6",
                "quantity": 2
            }
        }


class UpdateCartItemRequest(BaseModel):
    """Schema for updating cart item quantity."""
    quantity: Any

    class Config:
        json_schema_extra = {
            "example": {
                "quantity": 3
            }
        }


class CartProductResponse(BaseModel):
    """Current catalog detail for a product in the cart."""
    id: str
    name: str
    price: float
    stock: int
    category: Optional[str] = None
    image: Optional[str] = None  # First of `images`
    images: List[str] = Field(default_factory=list)


class CartItemResponse(BaseModel):
    """Schema for cart item response."""
    id: str
    product_id: str
    quantity: int
    unit_price: float
    subtotal: float
    price_changed: bool = False
    stock_warning: bool = False
    product: Optional[CartProductResponse] = None  # None once the product is deleted

    class Config:
        from_attributes = True


class CartResponse(BaseModel):
    """Schema for cart response."""
    id: str
    owner_id: str
    items: List[CartItemResponse]
    total: float
    total_items: int
    version: int
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
