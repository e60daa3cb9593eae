"""
Shared fixtures.

`fake_db` is a MagicMock database whose `carts` and `products` collections
keep real state in dicts, so multi-step cart scenarios can run without a
MongoDB server.
"""
import copy
import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-storefront-suite")

import pytest
from unittest.mock import AsyncMock, MagicMock
from datetime import datetime
from bson import ObjectId


def _as_stored(value):
    """Copy a value the way BSON stores it: datetimes keep milliseconds only."""
    if isinstance(value, datetime):
        return value.replace(microsecond=value.microsecond // 1000 * 1000)
    if isinstance(value, dict):
        return {key: _as_stored(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_as_stored(item) for item in value]
    return copy.deepcopy(value)


def _version_matches(document: dict, expected) -> bool:
    current = document.get("version")
    if isinstance(expected, dict):
        return current in expected["$in"]
    return current == expected


class FakeCarts:
    """Dict-backed stand-in for the `carts` collection."""

    def __init__(self):
        self.documents = {}

    def find_one(self, query):
        for document in self.documents.values():
            if all(document.get(key) == value for key, value in query.items()):
                return copy.deepcopy(document)
        return None

    def insert_one(self, document):
        document.setdefault("_id", ObjectId())
        self.documents[document["_id"]] = _as_stored(document)
        return MagicMock(inserted_id=document["_id"])

    def update_one(self, query, update):
        document = self.documents.get(query["_id"])
        if document is None or not _version_matches(document, query.get("version")):
            return MagicMock(matched_count=0, modified_count=0)

        for key, value in update.get("$set", {}).items():
            document[key] = _as_stored(value)
        for key, value in update.get("$inc", {}).items():
            document[key] = document.get(key, 0) + value
        for key, condition in update.get("$pull", {}).items():
            document[key] = [
                element for element in document[key]
                if not all(element.get(k) == v for k, v in condition.items())
            ]
        return MagicMock(matched_count=1, modified_count=1)


class FakeProducts:
    """Dict-backed stand-in for the `products` collection."""

    def __init__(self):
        self.documents = {}

    def add(self, name: str, price: float, stock: int, **extra) -> str:
        product_id = ObjectId()
        self.documents[product_id] = {
            "_id": product_id,
            "name": name,
            "price": price,
            "stock": stock,
            **extra
        }
        return str(product_id)

    def find_one(self, query):
        document = self.documents.get(query["_id"])
        return copy.deepcopy(document) if document else None

    def find(self, query):
        ids = query["_id"]["$in"]
        found = [copy.deepcopy(self.documents[oid]) for oid in ids if oid in self.documents]
        cursor = MagicMock()
        cursor.to_list = AsyncMock(return_value=found)
        return cursor


@pytest.fixture
def fake_db():
    carts = FakeCarts()
    products = FakeProducts()

    db = MagicMock()
    db.carts.find_one = AsyncMock(side_effect=carts.find_one)
    db.carts.insert_one = AsyncMock(side_effect=carts.insert_one)
    db.carts.update_one = AsyncMock(side_effect=carts.update_one)
    db.carts.create_index = AsyncMock(return_value="owner_id_1")
    db.products.find_one = AsyncMock(side_effect=products.find_one)
    db.products.find = MagicMock(side_effect=products.find)

    db.fake_carts = carts
    db.fake_products = products
    return db
