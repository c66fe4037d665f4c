"""
Database models
"""
from .user import User
from .product import Category, Product
from .cart import CartItem
from .order import Order, OrderItem

__all__ = [
    "User",
    "Category",
    "Product",
    "CartItem",
    "Order",
    "OrderItem",
]
