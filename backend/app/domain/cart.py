"""
Cart Domain Models

Read models for the cart view returned after cart operations.
"""
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Optional
from decimal import Decimal


class CartLineMeta(BaseModel):
    adjusted: bool = False
    original_quantity: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CartLine(BaseModel):
    """
    A cart entry joined with its product

    quantity is clamped to the product's current stock; meta.adjusted
    tells the client when that happened.
    """
    id: int
    product_id: int
    product_name: str
    price: Decimal
    quantity: int
    stock: int
    subtotal: Decimal
    meta: CartLineMeta

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CartSummary(BaseModel):
    cart_count: int = 0
    cart_total: Decimal = Decimal("0")
    cart: List[CartLine] = Field(default_factory=list)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @property
    def has_adjustments(self) -> bool:
        return any(line.meta.adjusted for line in self.cart)


class DeletedCartItem(BaseModel):
    id: int
    product_name: Optional[str] = None
    quantity: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
