from ledger_dashboard.models.base import Base
from ledger_dashboard.models.user import User
from ledger_dashboard.models.business import Business
from ledger_dashboard.models.business_user import BusinessUser
from ledger_dashboard.models.contact import Contact
from ledger_dashboard.models.invoice import Invoice, InvoiceStatus
from ledger_dashboard.models.role import BusinessRole

__all__ = [
    "Base",
    "User",
    "Business",
    "BusinessUser",
    "Contact",
    "Invoice",
    "InvoiceStatus",
    "BusinessRole",
]
