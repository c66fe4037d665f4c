"""
Orders API Endpoints
Checkout: turns a cart/checkout request into an order

Author: TM3
Date: 2025-10-03
Updated: 2025-10-17 (refactor: delegate to OrderPlacementService)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.core.auth import get_current_actor
from app.domain.actor import Actor
from app.domain.order import OrderError, OrderErrorKind
from app.services.order_placement_service import OrderPlacementService

logger = logging.getLogger(__name__)

router = APIRouter()

# HTTP status per OrderError.code (validation errors are always 400)
STATUS_BY_CODE = {
    "ACCOUNT_SUSPENDED": 403,
    "STOCK_ERROR": 409,
    "DB_CONNECTION_ERROR": 503,
    "TIMEOUT": 504,
    "TRANSACTION_FAILED": 500,
}


def get_order_service() -> OrderPlacementService:
    """FastAPI dependency for the order placement service"""
    return OrderPlacementService()


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def error_status(error: OrderError) -> int:
    if error.kind == OrderErrorKind.VALIDATION_ERROR:
        return 400
    return STATUS_BY_CODE.get(error.code, 500)


def error_body(error: OrderError) -> dict:
    body = {
        "success": False,
        "message": error.message,
        "code": error.code,
    }
    if error.kind == OrderErrorKind.STOCK_ERROR:
        body["unavailableProducts"] = [
            product.model_dump(exclude_none=True) for product in error.unavailable_products
        ]
    if error.details:
        body["details"] = error.details
    if error.correlation_id:
        body["correlationId"] = error.correlation_id
    return body


@router.post("", status_code=201)
async def place_order(
    request: Request,
    actor: Actor = Depends(get_current_actor),
    service: OrderPlacementService = Depends(get_order_service)
):
    """
    Place an order

    Body:
        orderItems: [{product, quantity, price, cartId?, name?}]
        paymentInfo: {typePayment, paymentAccountNumber?, paymentAccountName?, isCashPayment?}

    Returns:
        201 with the order number and payment status, or the error body with
        400 (validation), 403 (suspended account), 409 (unavailable products),
        500/503/504 (store failure, nothing persisted)
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    result = await run_in_threadpool(
        service.place_order, actor, payload, client_ip=client_ip(request)
    )

    if isinstance(result, OrderError):
        return JSONResponse(status_code=error_status(result), content=error_body(result))

    return {
        "success": True,
        "id": result.order_number,
        "orderNumber": result.order_number,
        "message": result.message,
        "isCashPayment": result.is_cash_payment,
        "paymentStatus": result.payment_status,
        "totalAmount": float(result.total_amount),
    }
