from datetime import date
from pydantic import BaseModel


class InvoiceContact(BaseModel):
    """Name fields of the contact an invoice is addressed to"""

    model_config = {"from_attributes": True, "frozen": True}

    company_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class InvoiceSummary(BaseModel):
    """Invoice as consumed by the dashboard (read-only)"""

    model_config = {"from_attributes": True, "frozen": True}

    id: str
    invoice_number: str
    total_amount: float | None = None
    balance_due: float | None = None
    status: str
    invoice_date: date | None = None
    due_date: date | None = None
    contact: InvoiceContact | None = None
