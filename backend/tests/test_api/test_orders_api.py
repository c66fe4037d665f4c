"""
API tests for POST /api/v1/orders

Author: TM3
Date: 2025-10-17
"""
from datetime import timedelta
from unittest.mock import Mock

import pytest

from app.api.orders import get_order_service
from app.domain.order import OrderError, OrderErrorKind
from app.main import app

ORDERS_URL = "/api/v1/orders"


class TestPlaceOrderEndpoint:
    """Test the checkout endpoint end to end"""

    def test_success(self, client, auth_headers, order_payload, product_state):
        # Act
        response = client.post(ORDERS_URL, json=order_payload, headers=auth_headers())

        # Assert
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["orderNumber"].startswith("ORD-")
        assert body["id"] == body["orderNumber"]
        assert body["paymentStatus"] == "unpaid"
        assert body["isCashPayment"] is False
        assert body["totalAmount"] == pytest.approx(59.99)
        assert product_state(1) == (8, 2)

    def test_cash_order(self, client, auth_headers):
        payload = {
            "orderItems": [{"product": 4, "quantity": 1, "price": 59.90}],
            "paymentInfo": {"typePayment": "CASH"},
        }

        response = client.post(ORDERS_URL, json=payload, headers=auth_headers())

        assert response.status_code == 201
        assert response.json()["paymentStatus"] == "pending_cash"
        assert response.json()["message"] == "Order placed successfully - Cash payment on pickup"

    def test_stock_error(self, client, auth_headers):
        """Test unavailable products come back as 409 with diagnostics"""
        payload = {
            "orderItems": [{"product": 2, "quantity": 5, "price": 9.99}],
            "paymentInfo": {"typePayment": "CASH"},
        }

        response = client.post(ORDERS_URL, json=payload, headers=auth_headers())

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "STOCK_ERROR"
        assert body["unavailableProducts"] == [
            {"id": 2, "name": "USB-C Cable", "reason": "insufficient_stock", "stock": 3, "requested": 5}
        ]

    def test_price_mismatch(self, client, auth_headers, order_payload):
        order_payload["orderItems"][0]["price"] = 1.00

        response = client.post(ORDERS_URL, json=order_payload, headers=auth_headers())

        assert response.status_code == 409
        mismatch = response.json()["unavailableProducts"][0]
        assert mismatch["reason"] == "price_mismatch"
        assert mismatch["expected"] == 25.0
        assert mismatch["provided"] == 1.0

    def test_empty_order(self, client, auth_headers):
        response = client.post(
            ORDERS_URL,
            json={"orderItems": [], "paymentInfo": {"typePayment": "CASH"}},
            headers=auth_headers()
        )

        assert response.status_code == 400
        assert response.json()["code"] == "EMPTY_ORDER"

    def test_body_is_not_json(self, client, auth_headers):
        headers = {**auth_headers(), "Content-Type": "application/json"}

        response = client.post(ORDERS_URL, content="not json", headers=headers)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_BODY"

    def test_missing_account_info(self, client, auth_headers):
        payload = {
            "orderItems": [{"product": 1, "quantity": 1, "price": 25.00}],
            "paymentInfo": {"typePayment": "WAAFI"},
        }

        response = client.post(ORDERS_URL, json=payload, headers=auth_headers())

        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_ACCOUNT_INFO"


class TestPlaceOrderAuth:
    """Test authentication and account checks"""

    def test_requires_token(self, client, order_payload):
        response = client.post(ORDERS_URL, json=order_payload)

        assert response.status_code == 401
        assert response.json()["code"] == "AUTH_FAILED"

    def test_auth_error_body_matches_order_errors(self, client, order_payload):
        """Test auth failures use the same flat body as checkout errors"""
        response = client.post(ORDERS_URL, json=order_payload)

        assert response.json() == {
            "success": False,
            "message": "Authentication required",
            "code": "AUTH_FAILED",
        }
        assert response.headers["www-authenticate"] == "Bearer"

    def test_expired_token(self, client, make_token, order_payload):
        token = make_token(expires_in=timedelta(minutes=-5))

        response = client.post(ORDERS_URL, json=order_payload, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Token has expired"

    def test_token_signed_with_other_secret(self, client, make_token, order_payload):
        token = make_token(secret="not-the-server-secret")

        response = client.post(ORDERS_URL, json=order_payload, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    def test_unknown_account(self, client, auth_headers, order_payload):
        response = client.post(ORDERS_URL, json=order_payload, headers=auth_headers("ghost", "ghost@example.com"))

        assert response.status_code == 404
        assert response.json()["code"] == "USER_NOT_FOUND"

    def test_suspended_account(self, client, auth_headers, order_payload, order_count):
        response = client.post(ORDERS_URL, json=order_payload, headers=auth_headers("user-3", "carol@example.com"))

        assert response.status_code == 403
        assert response.json()["code"] == "ACCOUNT_SUSPENDED"
        assert order_count() == 0


class TestPlaceOrderStoreFailures:
    """Test store failure codes map to HTTP statuses"""

    @pytest.mark.parametrize("code, status_code", [
        ("DB_CONNECTION_ERROR", 503),
        ("TIMEOUT", 504),
        ("TRANSACTION_FAILED", 500),
    ])
    def test_status_by_code(self, client, auth_headers, order_payload, code, status_code):
        # Arrange
        service = Mock()
        service.place_order.return_value = OrderError(
            kind=OrderErrorKind.TRANSACTION_FAILED,
            code=code,
            message="Store unavailable",
            correlation_id="abc123"
        )
        app.dependency_overrides[get_order_service] = lambda: service

        # Act
        response = client.post(ORDERS_URL, json=order_payload, headers=auth_headers())

        # Assert
        assert response.status_code == status_code
        body = response.json()
        assert body["code"] == code
        assert body["correlationId"] == "abc123"
        assert "unavailableProducts" not in body

    def test_forwards_client_ip(self, client, auth_headers, order_payload):
        service = Mock()
        service.place_order.return_value = OrderError(
            kind=OrderErrorKind.TRANSACTION_FAILED, code="TRANSACTION_FAILED", message="failed"
        )
        app.dependency_overrides[get_order_service] = lambda: service

        client.post(ORDERS_URL, json=order_payload, headers={**auth_headers(), "X-Forwarded-For": "203.0.113.7, 10.0.0.1"})

        assert service.place_order.call_args.kwargs["client_ip"] == "203.0.113.7"
