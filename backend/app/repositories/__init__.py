"""
Repository Layer - Data Access

This layer handles all store queries and returns domain models.
Every method receives the session explicitly so callers decide the
transaction boundary.

Author: TM3
Date: 2025-10-17
"""
from app.repositories.user_repository import UserRepository
from app.repositories.product_repository import ProductRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.cart_repository import CartRepository

__all__ = [
    'UserRepository',
    'ProductRepository',
    'OrderRepository',
    'CartRepository'
]
