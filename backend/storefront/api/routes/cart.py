from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from storefront.api.deps import get_db, get_current_user_id
from storefront.schemas.cart import (
    AddToCartRequest,
    UpdateCartItemRequest,
    CartResponse
)
from storefront.services.cart_service import CartService

router = APIRouter()


@router.get("", response_model=CartResponse)
async def get_cart(
    user_id: str = Depends(get_current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Get the current user's cart with full product details.

    The cart is created empty on first access.
    """
    cart = await CartService.get_or_create_cart(user_id, db)
    return await CartService.get_cart_with_details(cart, db)


@router.post("/add", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Add a product to the cart.

    Validates:
    - Quantity is a positive integer
    - Product exists
    - Sufficient stock available

    If product already in cart, increases quantity.
    """
    cart = await CartService.add_item(
        owner_id=user_id,
        product_id=request.product_id,
        quantity=request.quantity,
        db=db
    )
    return await CartService.get_cart_with_details(cart, db)


@router.put("/update/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: str,
    request: UpdateCartItemRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Update the quantity of an item in the cart.
    """
    cart = await CartService.update_item_quantity(
        owner_id=user_id,
        line_item_id=item_id,
        quantity=request.quantity,
        db=db
    )
    return await CartService.get_cart_with_details(cart, db)


@router.delete("/remove/{item_id}", response_model=CartResponse)
async def remove_from_cart(
    item_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Remove an item from the cart.
    """
    cart = await CartService.remove_item(user_id, item_id, db)
    return await CartService.get_cart_with_details(cart, db)
