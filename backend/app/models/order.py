"""
Order models - immutable once created by checkout
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, DECIMAL, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Order(Base):
    """
    Main orders table
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(32), nullable=False, unique=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), index=True, nullable=False)

    # Payment
    payment_type = Column(String(50), nullable=False)
    payment_account_number = Column(String(100), nullable=False)
    payment_account_name = Column(String(255), nullable=False)
    is_cash_payment = Column(Boolean, nullable=False, default=False)
    payment_status = Column(String(50), nullable=False, index=True)

    total_amount = Column(DECIMAL(12, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Relationships
    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    """
    Order lines - product data captured at order time
    """
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)

    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(DECIMAL(12, 2), nullable=False)
    category = Column(String(100))

    # Relationships
    order = relationship("Order", back_populates="items")
