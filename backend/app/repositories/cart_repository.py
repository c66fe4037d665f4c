"""
Cart Repository - Data Access Layer for cart entries
"""
from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.orm import Session, joinedload

from app.models.cart import CartItem


class CartRepository:
    """
    Repository for cart entries

    Returns ORM rows with their product loaded; shaping into the cart view
    happens in CartService.
    """

    def find_by_id(self, session: Session, cart_item_id: int) -> Optional[CartItem]:
        stmt = (
            select(CartItem)
            .options(joinedload(CartItem.product))
            .where(CartItem.id == cart_item_id)
        )
        return session.execute(stmt).scalar_one_or_none()

    def find_by_user(self, session: Session, user_id: str) -> List[CartItem]:
        """Cart entries of a user, newest first"""
        stmt = (
            select(CartItem)
            .options(joinedload(CartItem.product))
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at.desc(), CartItem.id.desc())
        )
        return list(session.execute(stmt).scalars().all())

    def delete(self, session: Session, cart_item: CartItem) -> None:
        session.delete(cart_item)
        session.flush()

    def delete_owned(self, session: Session, user_id: str, cart_item_ids: List[int]) -> int:
        """
        Delete the given cart entries that belong to user_id

        Entries owned by other accounts are left untouched even when their
        id is listed.

        Returns:
            Number of deleted rows
        """
        if not cart_item_ids:
            return 0

        result = session.execute(
            delete(CartItem)
            .where(CartItem.id.in_(cart_item_ids), CartItem.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
