from pydantic import BaseModel, Field

from ledger_dashboard.schemas.invoice_schemas import InvoiceSummary


class RecentInvoice(InvoiceSummary):
    """InvoiceSummary with the customer name resolved for display"""

    customer_name: str


class DashboardMetrics(BaseModel):
    """Derived metrics for one aggregation cycle. Never persisted."""

    model_config = {"frozen": True}

    total_revenue: float = 0.0
    outstanding_balance: float = 0.0
    overdue_count: int = 0
    recent_invoices: list[RecentInvoice] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "DashboardMetrics":
        return cls()
