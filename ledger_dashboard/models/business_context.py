"""Business context for request authorization."""

from dataclasses import dataclass
from ledger_dashboard.models.user import User
from ledger_dashboard.models.business import Business
from ledger_dashboard.models.business_user import BusinessUser


@dataclass
class BusinessContext:
    """
    The authenticated user acting inside one business.

    Built by the get_business_context dependency after verifying an
    active membership exists.
    """

    user: User
    business: Business
    membership: BusinessUser

    @property
    def role(self) -> str:
        return self.membership.role

    def __repr__(self) -> str:
        return f"<BusinessContext(user_id={self.user.id}, business_id={self.business.id}, role={self.role})>"
