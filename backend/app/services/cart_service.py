"""
Cart Service
Cart view and owner-checked removal of cart entries
"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.domain.actor import Actor
from app.domain.cart import CartLine, CartLineMeta, CartSummary, DeletedCartItem
from app.models.cart import CartItem
from app.repositories.cart_repository import CartRepository

logger = logging.getLogger(__name__)


class CartItemNotFound(Exception):
    pass


class CartOwnershipError(Exception):
    """Raised when an account tries to modify another account's cart entry"""
    pass


class CartService:

    def __init__(self, repository: Optional[CartRepository] = None):
        self.repository = repository or CartRepository()

    @staticmethod
    def build_summary(entries: List[CartItem]) -> CartSummary:
        """
        Shape cart entries into the cart view

        Entries whose product is missing, inactive or out of stock are left
        out. Quantities above current stock are clamped and flagged.
        """
        lines = []
        for entry in entries:
            product = entry.product
            if product is None or product.is_active is False or product.stock <= 0:
                continue

            quantity = min(entry.quantity, product.stock)
            lines.append(CartLine(
                id=entry.id,
                product_id=product.id,
                product_name=product.name,
                price=product.price,
                quantity=quantity,
                stock=product.stock,
                subtotal=product.price * quantity,
                meta=CartLineMeta(adjusted=quantity != entry.quantity, original_quantity=entry.quantity)
            ))

        return CartSummary(
            cart_count=len(lines),
            cart_total=sum((line.subtotal for line in lines), Decimal("0")),
            cart=lines
        )

    def get_cart(self, session: Session, user_id: str) -> CartSummary:
        return self.build_summary(self.repository.find_by_user(session, user_id))

    def remove_item(
        self,
        session: Session,
        actor: Actor,
        cart_item_id: int,
        client_ip: Optional[str] = None
    ) -> Tuple[DeletedCartItem, CartSummary]:
        """
        Delete one of the actor's cart entries

        Raises:
            CartItemNotFound: No entry with that id
            CartOwnershipError: The entry belongs to another account

        Returns:
            (deleted entry, updated cart)
        """
        entry = self.repository.find_by_id(session, cart_item_id)
        if entry is None:
            raise CartItemNotFound(f"Cart item {cart_item_id} not found")

        if entry.user_id != actor.id:
            logger.warning(
                f"Unauthorized cart deletion attempt: user={actor.id} cart_item={cart_item_id} "
                f"owner={entry.user_id} ip={client_ip or 'unknown'}"
            )
            raise CartOwnershipError(f"Cart item {cart_item_id} belongs to another account")

        deleted = DeletedCartItem(
            id=entry.id,
            product_name=entry.product.name if entry.product else None,
            quantity=entry.quantity
        )

        self.repository.delete(session, entry)
        session.commit()

        summary = self.get_cart(session, actor.id)

        logger.info(
            f"Security event - Cart item deleted: user={actor.id} cart_item={cart_item_id} "
            f"remaining={summary.cart_count} ip={client_ip or 'unknown'}"
        )

        return deleted, summary
