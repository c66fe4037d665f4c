"""
Domain Layer - Business Entities

This layer contains Pydantic models representing business entities.
These models enforce type safety and validation across the application.

Author: TM3
Date: 2025-10-17
"""
from app.domain.actor import Actor
from app.domain.product import Product
from app.domain.cart import CartLine, CartSummary, DeletedCartItem
from app.domain.order import (
    Order,
    OrderLine,
    OrderRequest,
    OrderConfirmation,
    OrderError,
    OrderErrorKind,
    UnavailableProduct,
    UnavailableReason,
)

__all__ = [
    'Actor',
    'Product',
    'CartLine',
    'CartSummary',
    'DeletedCartItem',
    'Order',
    'OrderLine',
    'OrderRequest',
    'OrderConfirmation',
    'OrderError',
    'OrderErrorKind',
    'UnavailableProduct',
    'UnavailableReason',
]
