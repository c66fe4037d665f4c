"""
Cart API Endpoints
View the cart and remove entries from it
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.api.orders import client_ip
from app.core.auth import get_current_actor
from app.core.database import get_db
from app.domain.actor import Actor
from app.domain.cart import CartSummary
from app.services.cart_service import CartService, CartItemNotFound, CartOwnershipError

router = APIRouter()


def cart_data(summary: CartSummary) -> dict:
    """Serialize the cart view (camelCase keys, money as float)"""
    data = summary.model_dump(by_alias=True)
    data["cartTotal"] = float(summary.cart_total)
    for line in data["cart"]:
        line["price"] = float(line["price"])
        line["subtotal"] = float(line["subtotal"])
    return data


@router.get("")
def get_cart(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    """Get the current user's cart (available products only, quantities clamped to stock)"""
    summary = CartService().get_cart(db, actor.id)
    return {"success": True, "data": cart_data(summary)}


@router.delete("/{cart_item_id}")
def remove_cart_item(
    cart_item_id: int,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    """
    Remove an entry from the current user's cart

    Returns the updated cart. 404 if the entry does not exist, 403 if it
    belongs to another account.
    """
    try:
        deleted, summary = CartService().remove_item(db, actor, cart_item_id, client_ip=client_ip(request))
    except CartItemNotFound:
        raise HTTPException(
            status_code=404,
            detail={"success": False, "message": "Cart item not found", "code": "CART_ITEM_NOT_FOUND"}
        )
    except CartOwnershipError:
        raise HTTPException(
            status_code=403,
            detail={"success": False, "message": "Unauthorized", "code": "UNAUTHORIZED_DELETE"}
        )

    data = cart_data(summary)
    data["deletedItem"] = deleted.model_dump(by_alias=True)
    data["meta"] = {
        "hasAdjustments": summary.has_adjustments,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    return {
        "success": True,
        "message": "Item removed from cart successfully",
        "data": data
    }
