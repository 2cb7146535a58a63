"""Business model: the tenant boundary of the dashboard."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from ledger_dashboard.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from ledger_dashboard.models.business_user import BusinessUser
    from ledger_dashboard.models.contact import Contact
    from ledger_dashboard.models.invoice import Invoice


class Business(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    An independent accounting entity.

    Contacts and invoices belong to a business, never to a user. Users
    reach a business through BusinessUser memberships.
    """

    __tablename__ = "businesses"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    legal_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    # Relationships
    memberships: Mapped[list["BusinessUser"]] = relationship(
        "BusinessUser",
        back_populates="business",
        cascade="all, delete-orphan",
    )
    contacts: Mapped[list["Contact"]] = relationship(
        "Contact",
        back_populates="business",
        cascade="all, delete-orphan",
    )
    invoices: Mapped[list["Invoice"]] = relationship(
        "Invoice",
        back_populates="business",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Business(id={self.id}, name='{self.name}')>"
