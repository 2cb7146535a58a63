from datetime import date
from enum import Enum as PyEnum
from sqlalchemy import String, Numeric, ForeignKey, Date, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from ledger_dashboard.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from ledger_dashboard.models.business import Business
    from ledger_dashboard.models.contact import Contact


class InvoiceStatus(str, PyEnum):
    """Stored invoice status label"""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class Invoice(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Invoice issued by a business to a contact.

    status is a label maintained by the invoicing workflow; it is not
    recomputed when due_date passes.
    """

    __tablename__ = "invoices"

    business_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    contact_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("contacts.id", ondelete="SET NULL"),
        nullable=True,
    )
    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False)
    total_amount: Mapped[float | None] = mapped_column(
        Numeric(precision=15, scale=2), nullable=True
    )
    balance_due: Mapped[float | None] = mapped_column(
        Numeric(precision=15, scale=2), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InvoiceStatus.DRAFT.value
    )
    invoice_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Relationships
    business: Mapped["Business"] = relationship("Business", back_populates="invoices")
    contact: Mapped["Contact | None"] = relationship("Contact")

    __table_args__ = (
        Index("ix_invoices_business_created", "business_id", "created_at"),
    )
