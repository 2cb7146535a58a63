"""Membership linking users to businesses with a role."""

from sqlalchemy import String, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from ledger_dashboard.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from ledger_dashboard.models.role import BusinessRole

if TYPE_CHECKING:
    from ledger_dashboard.models.user import User
    from ledger_dashboard.models.business import Business


class BusinessUser(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Join table linking users to businesses.

    Role is stored as plain text so roles added later on the server do not
    break older rows. Deactivated memberships (is_active=False) are kept
    for audit but never returned to clients.

    Constraints:
    - Unique(business_id, user_id) - one membership per user per business
    """

    __tablename__ = "business_users"

    business_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(
        String(50), nullable=False, default=BusinessRole.VIEWER.value
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    business: Mapped["Business"] = relationship("Business", back_populates="memberships")
    user: Mapped["User"] = relationship("User", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("business_id", "user_id", name="uq_business_user"),
    )

    def __repr__(self) -> str:
        return f"<BusinessUser(business_id={self.business_id}, user_id={self.user_id}, role={self.role})>"
