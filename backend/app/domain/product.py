"""
Product Domain Model

Represents a catalog product as seen by checkout and cart.

Author: TM3
Date: 2025-10-17
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from decimal import Decimal


class Product(BaseModel):
    """
    Product domain model

    Fields:
        id: Internal product ID (primary key)
        name: Product name
        price: Authoritative unit price
        stock: Units available for sale
        sold: Units sold so far
        is_active: Whether product can be ordered
        category_name: Name of the product category (optional)
    """

    id: int = Field(..., description="Internal product ID")
    name: str = Field(..., description="Product name")
    price: Decimal = Field(..., description="Unit price", ge=0)
    stock: int = Field(0, description="Units in stock", ge=0)
    sold: int = Field(0, description="Units sold", ge=0)
    is_active: bool = Field(True, description="Whether product is active")
    category_name: Optional[str] = Field(None, description="Category name")

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_out_of_stock(self) -> bool:
        """Check if product is out of stock"""
        return self.stock <= 0

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion"""
        data = self.model_dump()
        data['price'] = float(data['price'])
        data['is_out_of_stock'] = self.is_out_of_stock
        return data
