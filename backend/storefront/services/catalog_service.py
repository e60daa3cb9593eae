"""
Catalog lookup used by the cart engine.

Products are owned elsewhere; this module only reads them. Documents that
do not parse as a Product are treated like deleted products.
"""
import logging
from typing import Dict, Iterable, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from storefront.core.exceptions import PersistenceFailure
from storefront.models.product import Product
from storefront.utils.helpers import parse_object_id

logger = logging.getLogger(__name__)


def _to_product(document: dict) -> Optional[Product]:
    try:
        return Product.model_validate({**document, "_id": str(document["_id"])})
    except ValidationError as e:
        logger.warning(f"Ignoring malformed product {document['_id']}: {e.error_count()} invalid field(s)")
        return None


class CatalogService:
    """Read-only access to the product catalog."""

    @staticmethod
    async def lookup_product(product_id: str, db: AsyncIOMotorDatabase) -> Optional[Product]:
        """Return the product, or None if the id is unknown, malformed or the document is invalid."""
        oid = parse_object_id(product_id)
        if oid is None:
            return None

        try:
            document = await db.products.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error(f"Catalog lookup failed for product {product_id}: {str(e)}")
            raise PersistenceFailure()

        if not document:
            return None
        return _to_product(document)

    @staticmethod
    async def get_products_by_ids(
        product_ids: Iterable[str],
        db: AsyncIOMotorDatabase
    ) -> Dict[str, Product]:
        """Batch-fetch products, keyed by their string id. Unknown or invalid ones are omitted."""
        object_ids = []
        for product_id in set(product_ids):
            oid = parse_object_id(product_id)
            if oid is not None:
                object_ids.append(oid)

        if not object_ids:
            return {}

        try:
            cursor = db.products.find({"_id": {"$in": object_ids}})
            documents = await cursor.to_list(length=len(object_ids))
        except PyMongoError as e:
            logger.error(f"Catalog batch lookup failed: {str(e)}")
            raise PersistenceFailure()

        products = {}
        for document in documents:
            product = _to_product(document)
            if product is not None:
                products[product.id] = product
        return products
