"""
MongoDB persistence for carts.

One document per owner in the `carts` collection. Writes are guarded by the
document's `version` field: a write based on a stale read matches nothing
and raises Conflict instead of silently overwriting the newer cart.
"""
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from storefront.core.exceptions import Conflict, PersistenceFailure
from storefront.utils.helpers import get_current_timestamp, parse_object_id

logger = logging.getLogger(__name__)


def _version_filter(cart: dict) -> dict:
    expected = cart.get("version", 0)
    if expected == 0:
        # Documents written before versioning have no field at all
        return {"_id": cart["_id"], "version": {"$in": [0, None]}}
    return {"_id": cart["_id"], "version": expected}


class CartRepository:
    """Keyed storage for one cart document per owner."""

    @staticmethod
    async def ensure_indexes(db: AsyncIOMotorDatabase):
        """Create the unique owner index that backs one-cart-per-user."""
        await db.carts.create_index("owner_id", unique=True)

    @staticmethod
    async def find_by_owner(owner_id: str, db: AsyncIOMotorDatabase) -> Optional[dict]:
        """Fetch the cart for an owner, or None."""
        try:
            cart = await db.carts.find_one({"owner_id": owner_id})
        except PyMongoError as e:
            logger.error(f"Failed to fetch cart for owner {owner_id}: {str(e)}")
            raise PersistenceFailure()

        if cart is not None:
            cart.setdefault("version", 0)
        return cart

    @staticmethod
    async def insert(cart: dict, db: AsyncIOMotorDatabase) -> dict:
        """
        Insert a new cart.

        If another request created the owner's cart first, the unique index
        rejects this insert and the existing cart is returned instead.
        """
        try:
            result = await db.carts.insert_one(cart)
        except DuplicateKeyError:
            logger.info(f"Cart for owner {cart['owner_id']} created concurrently, re-reading")
            existing = await CartRepository.find_by_owner(cart["owner_id"], db)
            if existing is None:
                raise Conflict()
            return existing
        except PyMongoError as e:
            logger.error(f"Failed to create cart for owner {cart['owner_id']}: {str(e)}")
            raise PersistenceFailure()

        cart["_id"] = result.inserted_id
        return cart

    @staticmethod
    async def save(cart: dict, db: AsyncIOMotorDatabase) -> dict:
        """Write items and total back, guarded by the cart's version."""
        now = get_current_timestamp()
        try:
            result = await db.carts.update_one(
                _version_filter(cart),
                {
                    "$set": {
                        "items": cart["items"],
                        "total": cart["total"],
                        "updated_at": now
                    },
                    "$inc": {"version": 1}
                }
            )
        except PyMongoError as e:
            logger.error(f"Failed to save cart {cart['_id']}: {str(e)}")
            raise PersistenceFailure()

        if result.matched_count == 0:
            logger.warning(f"Stale write rejected for cart {cart['_id']} at version {cart.get('version', 0)}")
            raise Conflict()

        cart["version"] = cart.get("version", 0) + 1
        cart["updated_at"] = now
        return cart

    @staticmethod
    async def pull_item(cart: dict, line_item_id: str, db: AsyncIOMotorDatabase) -> dict:
        """
        Remove a line item with $pull and store the cart's recomputed total.

        The caller has already dropped the line from `cart["items"]` and
        recomputed `cart["total"]`. Pulling an id that is not in the array
        is a no-op on the items.
        """
        now = get_current_timestamp()
        update = {
            "$set": {"total": cart["total"], "updated_at": now},
            "$inc": {"version": 1}
        }
        oid = parse_object_id(line_item_id)
        if oid is not None:
            update["$pull"] = {"items": {"_id": oid}}

        try:
            result = await db.carts.update_one(_version_filter(cart), update)
        except PyMongoError as e:
            logger.error(f"Failed to remove item {line_item_id} from cart {cart['_id']}: {str(e)}")
            raise PersistenceFailure()

        if result.matched_count == 0:
            logger.warning(f"Stale write rejected for cart {cart['_id']} at version {cart.get('version', 0)}")
            raise Conflict()

        cart["version"] = cart.get("version", 0) + 1
        cart["updated_at"] = now
        return cart
