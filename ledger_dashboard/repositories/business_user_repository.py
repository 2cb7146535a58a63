"""Repository for BusinessUser model operations."""

from sqlalchemy.orm import Session, joinedload
from ledger_dashboard.models.business_user import BusinessUser


class BusinessUserRepository:
    """Repository for BusinessUser model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_active_memberships(self, user_id: str) -> list[BusinessUser]:
        """
        Get all active memberships for a user with their business loaded.

        Order is creation order, which is the order clients treat as
        "first business" when picking a default.

        Args:
            user_id: User ID

        Returns:
            List of active BusinessUser objects
        """
        return (
            self.db.query(BusinessUser)
            .options(joinedload(BusinessUser.business))
            .filter(
                BusinessUser.user_id == user_id,
                BusinessUser.is_active.is_(True),
            )
            .order_by(BusinessUser.created_at, BusinessUser.id)
            .all()
        )

    def get_active_membership(self, user_id: str, business_id: str) -> BusinessUser | None:
        """
        Get the active membership of a user in a specific business.

        Args:
            user_id: User ID
            business_id: Business ID

        Returns:
            BusinessUser object or None if not a (active) member
        """
        return (
            self.db.query(BusinessUser)
            .options(joinedload(BusinessUser.business))
            .filter(
                BusinessUser.user_id == user_id,
                BusinessUser.business_id == business_id,
                BusinessUser.is_active.is_(True),
            )
            .first()
        )
