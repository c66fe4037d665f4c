"""
Product Repository - Data Access Layer for Products

Handles catalog reads and stock writes and returns Product domain models.

Author: TM3
Date: 2025-10-17
"""
from typing import Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.domain.product import Product
from app.models.product import Product as ProductModel


class ProductRepository:
    """
    Repository for Product data access

    Returns Product domain models, not ORM rows.
    """

    @staticmethod
    def _map_row_to_product(row: ProductModel) -> Product:
        """Map ORM row to Product domain model (category flattened to its name)"""
        return Product(
            id=row.id,
            name=row.name,
            price=row.price,
            stock=row.stock,
            sold=row.sold or 0,
            is_active=row.is_active,
            category_name=row.category.name if row.category else None
        )

    def find_by_id(self, session: Session, product_id: int, for_update: bool = False) -> Optional[Product]:
        """
        Find product by ID

        Args:
            session: Active session (transaction handle)
            product_id: Internal product ID
            for_update: Lock the product row until the transaction ends
                (SELECT ... FOR UPDATE). Concurrent checkouts of the same
                product serialize on this lock.

        Returns:
            Product or None if not found
        """
        stmt = (
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()

        row = session.execute(stmt).scalar_one_or_none()
        if row is None:
            return None

        return self._map_row_to_product(row)

    def lock_many(self, session: Session, product_ids: List[int]) -> Dict[int, Product]:
        """
        Lock several product rows at once (SELECT ... FOR UPDATE)

        Rows are locked in ascending id order whatever the order of
        product_ids. Every checkout takes its locks in the same order.

        Returns:
            Products by id; ids with no row are absent
        """
        ids = sorted(set(product_ids))
        if not ids:
            return {}

        stmt = (
            select(ProductModel)
            .where(ProductModel.id.in_(ids))
            .order_by(ProductModel.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        rows = session.execute(stmt).scalars().all()

        return {row.id: self._map_row_to_product(row) for row in rows}

    def decrement_stock(self, session: Session, product_id: int, quantity: int) -> bool:
        """
        Take quantity units out of stock and count them as sold

        The update only applies while stock >= quantity, so stock can never
        go negative even without a prior lock.

        Returns:
            True if the row was updated, False if stock was insufficient
        """
        result = session.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(
                stock=ProductModel.stock - quantity,
                sold=ProductModel.sold + quantity
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
