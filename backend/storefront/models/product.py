from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from storefront.utils.helpers import get_current_timestamp


class Product(BaseModel):
    """Catalog product model for MongoDB (read-only for the cart)."""
    id: Optional[str] = Field(None, alias="_id")
    name: str
    description: str = ""
    price: float = Field(ge=0)
    stock: int = Field(ge=0)
    category: Optional[str] = None
    images: List[str] = Field(default_factory=list)  # Upload paths, first one is the cover
    created_at: datetime = Field(default_factory=get_current_timestamp)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "name": "Wireless Mouse",
                "description": "Ergonomic 2.4GHz mouse",
                "price": 10.0,
                "stock": 5,
                "category": "electronics",
                "images": ["/uploads/product_1700000000000.jpg"]
            }
        }
