import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from storefront.core.config import settings
from storefront.core.exceptions import (
    CartNotFound,
    InsufficientStock,
    InvalidQuantity,
    ItemNotFound,
    ProductNotFound,
)
from storefront.models.cart import Cart, CartItem
from storefront.schemas.cart import CartItemResponse, CartProductResponse
from storefront.services.cart_repository import CartRepository
from storefront.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _to_money(value: Decimal) -> float:
    return float(value.quantize(CENT, rounding=ROUND_HALF_UP))


class CartService:
    """Service for cart operations."""

    @staticmethod
    def compute_total(items: List[dict]) -> float:
        """Sum of unit_price * quantity over the line items, rounded to the cent."""
        total = sum(
            (Decimal(str(item["unit_price"])) * item["quantity"] for item in items),
            Decimal("0")
        )
        return _to_money(total)

    @staticmethod
    def validate_quantity(quantity) -> None:
        """Raise InvalidQuantity unless quantity is an integer >= 1."""
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidQuantity()

    @staticmethod
    def find_line_item(cart: dict, line_item_id: str) -> Optional[dict]:
        """Find a line item by its id."""
        for item in cart["items"]:
            if str(item.get("_id")) == line_item_id:
                return item
        return None

    @staticmethod
    async def get_or_create_cart(owner_id: str, db: AsyncIOMotorDatabase) -> dict:
        """Get or create a cart for a user."""
        cart = await CartRepository.find_by_owner(owner_id, db)
        if cart:
            return cart

        cart_data = Cart(owner_id=owner_id).model_dump(exclude={"id"})
        cart = await CartRepository.insert(cart_data, db)
        logger.info(f"Created cart for owner {owner_id}")
        return cart

    @staticmethod
    async def add_item(
        owner_id: str,
        product_id: str,
        quantity: int,
        db: AsyncIOMotorDatabase
    ) -> dict:
        """
        Add a product to the cart.

        An existing line for the same product has its quantity increased;
        otherwise a new line is appended with the current catalog price as
        its price snapshot. Stock is checked against the requested quantity
        only, since carts do not reserve inventory.
        """
        CartService.validate_quantity(quantity)

        product = await CatalogService.lookup_product(product_id, db)
        if not product:
            raise ProductNotFound()

        if product.stock < quantity:
            raise InsufficientStock(f"Insufficient stock. Available: {product.stock}")

        cart = await CartService.get_or_create_cart(owner_id, db)
        product_ref = product.id

        # Merge into an existing line for this product
        for item in cart["items"]:
            if item["product_id"] == product_ref:
                item["quantity"] += quantity
                break
        else:
            line = CartItem(
                product_id=product_ref,
                quantity=quantity,
                unit_price=product.price
            ).model_dump(exclude={"id"})
            cart["items"].append({"_id": ObjectId(), **line})

        cart["total"] = CartService.compute_total(cart["items"])
        await CartRepository.save(cart, db)

        logger.info(f"Added {quantity} x {product_ref} to cart of owner {owner_id}")
        return cart

    @staticmethod
    async def update_item_quantity(
        owner_id: str,
        line_item_id: str,
        quantity: int,
        db: AsyncIOMotorDatabase
    ) -> dict:
        """Set the quantity of a line item."""
        removes_line = (
            settings.CART_ZERO_QUANTITY_REMOVES_ITEM
            and isinstance(quantity, int)
            and not isinstance(quantity, bool)
            and quantity == 0
        )
        if not removes_line:
            CartService.validate_quantity(quantity)

        cart = await CartRepository.find_by_owner(owner_id, db)
        if not cart:
            raise CartNotFound()

        item = CartService.find_line_item(cart, line_item_id)
        if item is None:
            raise ItemNotFound()

        if removes_line:
            return await CartService._pull_line_item(cart, line_item_id, db)

        if settings.CART_UPDATE_CHECKS_STOCK:
            product = await CatalogService.lookup_product(item["product_id"], db)
            if not product:
                raise ProductNotFound()
            if product.stock < quantity:
                raise InsufficientStock(f"Insufficient stock. Available: {product.stock}")

        item["quantity"] = quantity
        cart["total"] = CartService.compute_total(cart["items"])
        await CartRepository.save(cart, db)

        logger.info(f"Set quantity of item {line_item_id} to {quantity} for owner {owner_id}")
        return cart

    @staticmethod
    async def remove_item(
        owner_id: str,
        line_item_id: str,
        db: AsyncIOMotorDatabase
    ) -> dict:
        """Remove a line item from the cart. Removing an absent item is a no-op."""
        cart = await CartRepository.find_by_owner(owner_id, db)
        if not cart:
            raise CartNotFound()

        cart = await CartService._pull_line_item(cart, line_item_id, db)
        logger.info(f"Removed item {line_item_id} from cart of owner {owner_id}")
        return cart

    @staticmethod
    async def _pull_line_item(cart: dict, line_item_id: str, db: AsyncIOMotorDatabase) -> dict:
        cart["items"] = [item for item in cart["items"] if str(item.get("_id")) != line_item_id]
        cart["total"] = CartService.compute_total(cart["items"])
        return await CartRepository.pull_item(cart, line_item_id, db)

    @staticmethod
    async def get_cart_with_details(cart: dict, db: AsyncIOMotorDatabase) -> Dict:
        """Expand a cart with current product details."""
        products = await CatalogService.get_products_by_ids(
            [item["product_id"] for item in cart["items"]],
            db
        )

        items_response = []
        for item in cart["items"]:
            unit_price = item["unit_price"]
            subtotal = _to_money(Decimal(str(unit_price)) * item["quantity"])

            product_response = None
            price_changed = False
            stock_warning = False

            product = products.get(item["product_id"])
            if product:
                product_response = CartProductResponse(
                    id=product.id,
                    name=product.name,
                    price=product.price,
                    stock=product.stock,
                    category=product.category,
                    image=product.images[0] if product.images else None,
                    images=product.images
                )
                price_changed = abs(product.price - unit_price) > 0.01
                stock_warning = product.stock < item["quantity"]

            items_response.append(CartItemResponse(
                id=str(item["_id"]),
                product_id=item["product_id"],
                quantity=item["quantity"],
                unit_price=unit_price,
                subtotal=subtotal,
                price_changed=price_changed,
                stock_warning=stock_warning,
                product=product_response
            ))

        return {
            "id": str(cart["_id"]),
            "owner_id": cart["owner_id"],
            "items": items_response,
            "total": CartService.compute_total(cart["items"]),
            "total_items": len(items_response),
            "version": cart.get("version", 0),
            "updated_at": cart.get("updated_at")
        }
