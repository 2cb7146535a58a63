from sqlalchemy.orm import Session

from ledger_dashboard.models.user import User
from ledger_dashboard.repositories.business_user_repository import BusinessUserRepository
from ledger_dashboard.schemas.business_schemas import BusinessMembership


class BusinessService:
    """Service layer for business membership lookups"""

    def __init__(self, db: Session):
        self.db = db
        self.membership_repo = BusinessUserRepository(db)

    def list_memberships(self, user: User) -> list[BusinessMembership]:
        """
        List the businesses a user can act on behalf of.

        Only active memberships are returned, in creation order.

        Args:
            user: Authenticated user

        Returns:
            Memberships with business details and the user's role
        """
        return [
            BusinessMembership.model_validate(membership)
            for membership in self.membership_repo.get_active_memberships(user.id)
        ]
