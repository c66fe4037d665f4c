"""
Order Domain Models

Represents checkout requests, placed orders, and the outcome of placing one.
Outcomes are values: OrderConfirmation on success, OrderError otherwise.

Author: TM3
Date: 2025-10-17
"""
from pydantic import BaseModel, Field, ConfigDict, ValidationError, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError
from typing import Any, List, Literal, Optional, Union
from datetime import datetime
from decimal import Decimal
from enum import Enum

from app.core.config import settings


CASH_PAYMENT_TYPE = "CASH"

PAYMENT_STATUS_PENDING_CASH = "pending_cash"
PAYMENT_STATUS_UNPAID = "unpaid"

# Store column limits (INTEGER ids, payment column widths)
MAX_DB_INT = 2_147_483_647
MAX_PRICE = Decimal("9999999999.99")
MAX_PAYMENT_TYPE_LENGTH = 50
MAX_ACCOUNT_NUMBER_LENGTH = 100
MAX_ACCOUNT_NAME_LENGTH = 255


class PaymentMethod(str, Enum):
    CASH = "CASH"
    ACCOUNT = "ACCOUNT"


class OrderErrorKind(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    STOCK_ERROR = "STOCK_ERROR"
    TRANSACTION_FAILED = "TRANSACTION_FAILED"
    AUTH_FAILED = "AUTH_FAILED"


class UnavailableReason(str, Enum):
    NOT_FOUND = "not_found"
    PRODUCT_INACTIVE = "product_inactive"
    INSUFFICIENT_STOCK = "insufficient_stock"
    PRICE_MISMATCH = "price_mismatch"


class OrderValidationError(Exception):
    """Raised when a checkout payload is malformed"""

    def __init__(self, code: str, message: str, details: Optional[List[dict]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or []


# =============================================================================
# Request
# =============================================================================

class OrderItemRequest(BaseModel):
    """
    A requested line item

    price is the unit price the client believes it is paying. It is only
    compared against the stored price, never persisted.
    """
    product_id: int = Field(..., alias="product", gt=0, le=MAX_DB_INT, description="Product ID")
    quantity: int = Field(..., gt=0, le=MAX_DB_INT, description="Units requested")
    price: Decimal = Field(..., ge=0, le=MAX_PRICE, description="Claimed unit price")
    cart_id: Optional[int] = Field(None, gt=0, le=MAX_DB_INT, description="Cart entry this line comes from")
    name: Optional[str] = Field(None, description="Product name as displayed to the client")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaymentInfo(BaseModel):
    """
    Payment details

    CASH orders (type_payment == "CASH" or is_cash_payment) are normalized to
    the cash sentinels whatever account fields the client sent. Any other
    payment type requires both account fields.
    """
    type_payment: str = Field(..., min_length=1, max_length=MAX_PAYMENT_TYPE_LENGTH)
    payment_account_number: Optional[str] = None
    payment_account_name: Optional[str] = None
    is_cash_payment: bool = False

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="after")
    def normalize_cash(self):
        if self.type_payment == CASH_PAYMENT_TYPE or self.is_cash_payment:
            self.payment_account_number = settings.CASH_ACCOUNT_NUMBER
            self.payment_account_name = settings.CASH_ACCOUNT_NAME
            self.is_cash_payment = True
        elif not self.payment_account_number or not self.payment_account_name:
            raise PydanticCustomError(
                "missing_account_info",
                "Account information required for non-cash payments"
            )
        elif (
            len(self.payment_account_number) > MAX_ACCOUNT_NUMBER_LENGTH
            or len(self.payment_account_name) > MAX_ACCOUNT_NAME_LENGTH
        ):
            # Client account fields only reach the store for non-cash payments
            raise PydanticCustomError(
                "account_info_too_long",
                "Account number must be at most {number} characters and account name at most {name}",
                {"number": MAX_ACCOUNT_NUMBER_LENGTH, "name": MAX_ACCOUNT_NAME_LENGTH}
            )
        return self

    @property
    def method(self) -> PaymentMethod:
        return PaymentMethod.CASH if self.is_cash_payment else PaymentMethod.ACCOUNT


def _first_present(data: dict, *keys: str) -> Any:
    for key in keys:
        if data.get(key):
            return data[key]
    return None


class OrderRequest(BaseModel):
    """Schema for placing an order"""
    order_items: List[OrderItemRequest] = Field(..., min_length=1)
    payment_info: PaymentInfo

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @property
    def cart_ids(self) -> List[int]:
        return [item.cart_id for item in self.order_items if item.cart_id is not None]

    @classmethod
    def from_payload(cls, payload: Any) -> "OrderRequest":
        """
        Validate a raw checkout payload

        Accepts camelCase (wire format) or snake_case keys.

        Raises:
            OrderValidationError: with a machine-readable code
        """
        if isinstance(payload, cls):
            return payload
        if not isinstance(payload, dict):
            raise OrderValidationError("INVALID_BODY", "Invalid request body")

        if not _first_present(payload, "orderItems", "order_items"):
            raise OrderValidationError("EMPTY_ORDER", "Order must contain at least one item")

        payment = _first_present(payload, "paymentInfo", "payment_info")
        if not payment:
            raise OrderValidationError("MISSING_PAYMENT_INFO", "Payment information is required")
        if not isinstance(payment, dict) or not _first_present(payment, "typePayment", "type_payment"):
            raise OrderValidationError("MISSING_PAYMENT_TYPE", "Payment type is required")

        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            errors = e.errors()
            for error in errors:
                if error["type"] == "missing_account_info":
                    raise OrderValidationError("MISSING_ACCOUNT_INFO", error["msg"])
            details = [
                {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
                for error in errors
            ]
            raise OrderValidationError("INVALID_ORDER_DATA", "Invalid order data", details)


# =============================================================================
# Placed order
# =============================================================================

class OrderLine(BaseModel):
    """Order line as persisted (authoritative name and price)"""
    product_id: int
    name: str
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)
    category: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def total(self) -> Decimal:
        return self.price * self.quantity


class Order(BaseModel):
    """
    Order domain model

    Fields:
        id: Internal order ID
        order_number: Public unique order number
        user_id: Owner account
        items: Order lines
        payment_type: Payment type as requested (CASH, bank name, ...)
        payment_account_number / payment_account_name: Normalized account data
        is_cash_payment: Cash on pickup/delivery
        payment_status: pending_cash or unpaid at creation
        total_amount: Sum of line totals
        created_at: Creation timestamp
    """
    id: int
    order_number: str
    user_id: str
    items: List[OrderLine] = Field(default_factory=list)
    payment_type: str
    payment_account_number: str
    payment_account_name: str
    is_cash_payment: bool
    payment_status: str
    total_amount: Decimal
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def total_quantity(self) -> int:
        """Total quantity of all items"""
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['total_amount'] = float(self.total_amount)
        data['total_quantity'] = self.total_quantity
        for item in data['items']:
            item['price'] = float(item['price'])
        if self.created_at:
            data['created_at'] = self.created_at.isoformat()
        return data


# =============================================================================
# Outcomes
# =============================================================================

class UnavailableProduct(BaseModel):
    """Diagnostic for a line that blocked the order"""
    id: Optional[int] = None
    name: str
    reason: UnavailableReason
    stock: Optional[int] = None
    requested: Optional[int] = None
    expected: Optional[float] = None
    provided: Optional[float] = None

    model_config = ConfigDict(use_enum_values=True)


class OrderConfirmation(BaseModel):
    success: Literal[True] = True
    order_number: str
    payment_status: str
    is_cash_payment: bool
    total_amount: Decimal
    message: str


class OrderError(BaseModel):
    success: Literal[False] = False
    kind: OrderErrorKind
    code: str
    message: str
    unavailable_products: List[UnavailableProduct] = Field(default_factory=list)
    details: List[dict] = Field(default_factory=list)
    correlation_id: Optional[str] = None

    @classmethod
    def stock(cls, unavailable: List[UnavailableProduct]) -> "OrderError":
        return cls(
            kind=OrderErrorKind.STOCK_ERROR,
            code="STOCK_ERROR",
            message="Some products are unavailable",
            unavailable_products=unavailable
        )


OrderResult = Union[OrderConfirmation, OrderError]
