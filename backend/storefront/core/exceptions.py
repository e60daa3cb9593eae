"""
Cart error taxonomy.

Every error is an HTTPException so routes and services can raise it
directly; `error` carries a stable machine-readable kind for clients.
"""
from fastapi import HTTPException, status


class CartError(HTTPException):
    """Base class for cart engine failures."""
    error = "CartError"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Cart operation failed"

    def __init__(self, detail: str = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class InvalidQuantity(CartError):
    error = "InvalidQuantity"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Quantity must be a positive integer"


class ProductNotFound(CartError):
    error = "ProductNotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Product not found"


class InsufficientStock(CartError):
    error = "InsufficientStock"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Insufficient stock"


class CartNotFound(CartError):
    error = "CartNotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Cart not found"


class ItemNotFound(CartError):
    error = "ItemNotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Item not found in cart"


class Conflict(CartError):
    """The cart changed between read and write."""
    error = "Conflict"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Cart was modified concurrently, retry the request"


class PersistenceFailure(CartError):
    """Transient storage failure; the caller may retry the whole operation."""
    error = "PersistenceFailure"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Cart storage is unavailable"
