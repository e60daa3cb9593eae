from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from storefront.utils.helpers import get_current_timestamp


class CartItem(BaseModel):
    """Line item in a shopping cart."""
    id: Optional[str] = Field(None, alias="_id")
    product_id: str
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)  # Price snapshot taken when the item was added
    added_at: datetime = Field(default_factory=get_current_timestamp)

    class Config:
        populate_by_name = True


class Cart(BaseModel):
    """Shopping cart model for MongoDB."""
    id: Optional[str] = Field(None, alias="_id")
    owner_id: str
    items: List[CartItem] = Field(default_factory=list)
    total: float = Field(default=0.0, ge=0)
    version: int = Field(default=0, ge=0)  # Optimistic concurrency token
    created_at: datetime = Field(default_factory=get_current_timestamp)
    updated_at: datetime = Field(default_factory=get_current_timestamp)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "owner_id": "user123",
                "items": [
                    {
                        "_id": "65a1f0c2e4b0a1b2c3d4e5f6",
                        "product_id": "prod123",
                        "quantity": 2,
                        "unit_price": 10.0,
                        "added_at": "2024-01-01T00:00:00"
                    }
                ],
                "total": 20.0,
                "version": 1,
                "created_at": "2024-01-01T00:00:00",
                "updated_at": "2024-01-01T00:00:00"
            }
        }
