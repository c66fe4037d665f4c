"""
Order Placement Service
Turns a checkout request into an order in one atomic store transaction

Author: TM3
Date: 2025-10-17
"""
import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import (
    DisconnectionError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.core.database import run_in_transaction
from app.domain.actor import Actor
from app.domain.order import (
    Order,
    OrderConfirmation,
    OrderError,
    OrderErrorKind,
    OrderItemRequest,
    OrderLine,
    OrderRequest,
    OrderResult,
    OrderValidationError,
    PAYMENT_STATUS_PENDING_CASH,
    PAYMENT_STATUS_UNPAID,
    UnavailableProduct,
    UnavailableReason,
)
from app.domain.product import Product
from app.repositories.cart_repository import CartRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)

# PostgreSQL deadlock_detected, serialization_failure
TRANSACTION_CONFLICT_PGCODES = ("40P01", "40001")


class StockRaceLost(Exception):
    """A guarded stock update found less stock than was verified; rolls back the transaction"""

    def __init__(self, unavailable: List[UnavailableProduct]):
        super().__init__("Stock changed during checkout")
        self.unavailable = unavailable


class OrderPlacementService:
    """
    Service for placing orders

    Handles:
    - Account and request validation (before touching the store)
    - Stock, activity and price checks under row locks
    - Stock decrement, order creation and cart cleanup in one transaction
    - Mapping store failures to TRANSACTION_FAILED with full rollback
    """

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        product_repository: Optional[ProductRepository] = None,
        order_repository: Optional[OrderRepository] = None,
        cart_repository: Optional[CartRepository] = None
    ):
        self.session_factory = session_factory
        self.products = product_repository or ProductRepository()
        self.orders = order_repository or OrderRepository()
        self.carts = cart_repository or CartRepository()

    def place_order(self, actor: Actor, payload: Any, client_ip: Optional[str] = None) -> OrderResult:
        """
        Place an order for actor

        Steps:
        1. Reject suspended accounts (AUTH_FAILED)
        2. Validate payload (VALIDATION_ERROR), normalizing CASH payment info
        3. In one transaction: check every line, then decrement stock,
           create the order and delete the actor's referenced cart entries
        4. Map lost stock races to STOCK_ERROR and store errors to TRANSACTION_FAILED

        Args:
            actor: Authenticated account
            payload: Raw checkout body (dict) or an OrderRequest
            client_ip: Caller address, for the audit log only

        Returns:
            OrderConfirmation or OrderError
        """
        if not actor.is_active:
            logger.warning(f"Inactive user attempting to place order: {actor.email}")
            return OrderError(
                kind=OrderErrorKind.AUTH_FAILED,
                code="ACCOUNT_SUSPENDED",
                message="Account suspended. Cannot place orders"
            )

        try:
            request = OrderRequest.from_payload(payload)
        except OrderValidationError as e:
            return OrderError(
                kind=OrderErrorKind.VALIDATION_ERROR,
                code=e.code,
                message=e.message,
                details=e.details
            )

        correlation_id = uuid.uuid4().hex

        try:
            outcome = run_in_transaction(
                lambda session: self._place_in_transaction(session, actor, request),
                self.session_factory
            )
        except StockRaceLost as e:
            outcome = OrderError.stock(e.unavailable)
        except Exception as e:
            # Already rolled back
            return self._transaction_failed(e, actor, correlation_id)

        if isinstance(outcome, OrderError):
            logger.warning(
                f"Order failed due to stock issues: user={actor.id} "
                f"unavailable={[p.model_dump(exclude_none=True) for p in outcome.unavailable_products]}"
            )
            return outcome

        order: Order = outcome
        payment = request.payment_info

        logger.info(
            f"Security event - Order created: user={actor.id} email={actor.email} "
            f"order={order.order_number} total={order.total_amount} "
            f"payment_type={payment.type_payment} cash={payment.is_cash_payment} "
            f"status={order.payment_status} items={len(order.items)} ip={client_ip or 'unknown'}"
        )

        return OrderConfirmation(
            order_number=order.order_number,
            payment_status=order.payment_status,
            is_cash_payment=order.is_cash_payment,
            total_amount=order.total_amount,
            message=(
                "Order placed successfully - Cash payment on pickup"
                if order.is_cash_payment
                else "Order placed successfully"
            )
        )

    def _place_in_transaction(self, session: Session, actor: Actor, request: OrderRequest):
        """
        Transaction body

        Returns the created Order, or an OrderError when any line is
        unavailable (in which case nothing has been written).
        """
        accepted, unavailable = self._check_items(session, actor, request.order_items)

        if unavailable:
            return OrderError.stock(unavailable)

        for item, product in accepted:
            if not self.products.decrement_stock(session, product.id, item.quantity):
                current = self.products.find_by_id(session, product.id)
                raise StockRaceLost([
                    UnavailableProduct(
                        id=product.id,
                        name=product.name,
                        reason=UnavailableReason.INSUFFICIENT_STOCK,
                        stock=current.stock if current else 0,
                        requested=item.quantity
                    )
                ])

        lines = [
            OrderLine(
                product_id=product.id,
                name=product.name,
                quantity=item.quantity,
                price=product.price,
                category=product.category_name
            )
            for item, product in accepted
        ]
        total_amount = sum((line.total for line in lines), Decimal("0"))

        payment_status = (
            PAYMENT_STATUS_PENDING_CASH if request.payment_info.is_cash_payment else PAYMENT_STATUS_UNPAID
        )

        order = self.orders.create(
            session,
            user_id=actor.id,
            lines=lines,
            payment_info=request.payment_info,
            payment_status=payment_status,
            total_amount=total_amount
        )

        cleared = self.carts.delete_owned(session, actor.id, request.cart_ids)
        if cleared:
            logger.info(f"Cleared {cleared} items from cart for user {actor.id}")

        return order

    def _check_items(
        self,
        session: Session,
        actor: Actor,
        items: List[OrderItemRequest]
    ) -> Tuple[List[Tuple[OrderItemRequest, Product]], List[UnavailableProduct]]:
        """
        Check every requested line against the locked product rows

        All requested rows are locked up front, in id order.

        Checks run in order: not_found, product_inactive, insufficient_stock,
        price_mismatch. Lines for the same product draw on the same stock.
        """
        accepted: List[Tuple[OrderItemRequest, Product]] = []
        unavailable: List[UnavailableProduct] = []
        reserved: Dict[int, int] = {}

        locked = self.products.lock_many(session, [item.product_id for item in items])

        for item in items:
            product = locked.get(item.product_id)

            if product is None:
                unavailable.append(UnavailableProduct(
                    id=item.product_id,
                    name="Product not found",
                    reason=UnavailableReason.NOT_FOUND
                ))
                continue

            if not product.is_active:
                unavailable.append(UnavailableProduct(
                    id=product.id,
                    name=product.name,
                    reason=UnavailableReason.PRODUCT_INACTIVE
                ))
                continue

            available = product.stock - reserved.get(product.id, 0)
            if available < item.quantity:
                unavailable.append(UnavailableProduct(
                    id=product.id,
                    name=product.name,
                    reason=UnavailableReason.INSUFFICIENT_STOCK,
                    stock=available,
                    requested=item.quantity
                ))
                continue

            if abs(product.price - item.price) > settings.PRICE_TOLERANCE:
                logger.warning(
                    f"Price mismatch detected: product={product.id} expected={product.price} "
                    f"provided={item.price} user={actor.id}"
                )
                unavailable.append(UnavailableProduct(
                    id=product.id,
                    name=product.name,
                    reason=UnavailableReason.PRICE_MISMATCH,
                    expected=float(product.price),
                    provided=float(item.price)
                ))
                continue

            reserved[product.id] = reserved.get(product.id, 0) + item.quantity
            accepted.append((item, product))

        return accepted, unavailable

    def _transaction_failed(self, error: Exception, actor: Actor, correlation_id: str) -> OrderError:
        """
        Log a failed transaction and build the caller-facing error (no internals)

        Only store errors are classified as TIMEOUT or DB_CONNECTION_ERROR.
        Deadlocks, serialization failures and anything that is not a store
        error are TRANSACTION_FAILED.
        """
        text = str(error).lower()
        pgcode = getattr(getattr(error, "orig", None), "pgcode", None)

        if not isinstance(error, SQLAlchemyError) or pgcode in TRANSACTION_CONFLICT_PGCODES:
            code, message = "TRANSACTION_FAILED", "Transaction failed. No charges were made"
        elif isinstance(error, PoolTimeoutError) or "timeout" in text or "canceling statement" in text:
            code, message = "TIMEOUT", "Request timeout. Please try again"
        elif isinstance(error, (OperationalError, DisconnectionError)) or getattr(error, "connection_invalidated", False):
            code, message = "DB_CONNECTION_ERROR", "Database connection error. Please try again"
        else:
            code, message = "TRANSACTION_FAILED", "Transaction failed. No charges were made"

        logger.exception(f"[{correlation_id}] Transaction failed for user {actor.id}: {code}")

        return OrderError(
            kind=OrderErrorKind.TRANSACTION_FAILED,
            code=code,
            message=message,
            correlation_id=correlation_id,
            details=[{"error": str(error)}] if settings.is_development else []
        )
