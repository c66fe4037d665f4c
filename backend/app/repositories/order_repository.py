"""
Order Repository - Data Access Layer for Orders

Creates orders and returns Order domain models.

Author: TM3
Date: 2025-10-17
"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from app.domain.order import Order, OrderLine, PaymentInfo
from app.models.order import Order as OrderModel, OrderItem as OrderItemModel


class OrderRepository:
    """
    Repository for Order data access

    Orders are written once, at checkout, and never updated here.
    """

    @staticmethod
    def generate_order_number() -> str:
        """ORD-YYYYMMDD-XXXXXXXX"""
        today = datetime.now(timezone.utc).strftime("%Y%m%d")
        return f"ORD-{today}-{uuid.uuid4().hex[:8].upper()}"

    def create(
        self,
        session: Session,
        user_id: str,
        lines: List[OrderLine],
        payment_info: PaymentInfo,
        payment_status: str,
        total_amount: Decimal,
        order_number: Optional[str] = None
    ) -> Order:
        """
        Insert an order with its lines

        Args:
            session: Active session (transaction handle)
            user_id: Owner account
            lines: Normalized order lines
            payment_info: Validated, normalized payment info
            payment_status: Initial payment status
            total_amount: Order total
            order_number: Explicit order number (generated if omitted)

        Returns:
            The created Order
        """
        order = OrderModel(
            order_number=order_number or self.generate_order_number(),
            user_id=user_id,
            payment_type=payment_info.type_payment,
            payment_account_number=payment_info.payment_account_number,
            payment_account_name=payment_info.payment_account_name,
            is_cash_payment=payment_info.is_cash_payment,
            payment_status=payment_status,
            total_amount=total_amount,
            items=[
                OrderItemModel(
                    product_id=line.product_id,
                    name=line.name,
                    quantity=line.quantity,
                    price=line.price,
                    category=line.category
                )
                for line in lines
            ]
        )
        session.add(order)
        session.flush()

        return Order.model_validate(order)

    def find_by_order_number(self, session: Session, order_number: str) -> Optional[Order]:
        stmt = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.order_number == order_number)
        )
        row = session.execute(stmt).scalar_one_or_none()
        if row is None:
            return None
        return Order.model_validate(row)

    def count_by_user(self, session: Session, user_id: str) -> int:
        stmt = select(func.count()).select_from(OrderModel).where(OrderModel.user_id == user_id)
        return session.execute(stmt).scalar_one()
