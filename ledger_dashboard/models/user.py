from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from ledger_dashboard.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from ledger_dashboard.models.business_user import BusinessUser


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Account that can sign in to the dashboard.

    Credentials live here (salted password hash); profile data passed at
    sign-up is kept in full_name.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Relationships
    memberships: Mapped[list["BusinessUser"]] = relationship(
        "BusinessUser",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
