"""
User Repository - read access to accounts owned by the auth framework
"""
from typing import Optional

from sqlalchemy.orm import Session

from app.domain.actor import Actor
from app.models.user import User as UserModel


class UserRepository:

    def find_by_id(self, session: Session, user_id: str) -> Optional[Actor]:
        """
        Find account by ID

        Returns:
            Actor or None if not found
        """
        row = session.get(UserModel, user_id)
        if row is None:
            return None
        return Actor.model_validate(row)
