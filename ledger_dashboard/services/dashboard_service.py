from datetime import datetime

from sqlalchemy.orm import Session

from ledger_dashboard.config import settings
from ledger_dashboard.models.business_context import BusinessContext
from ledger_dashboard.repositories.invoice_repository import InvoiceRepository
from ledger_dashboard.schemas.dashboard_schemas import DashboardMetrics
from ledger_dashboard.schemas.invoice_schemas import InvoiceSummary
from ledger_dashboard.services.dashboard_metrics import compute_dashboard_metrics


class DashboardService:
    """Service layer for the invoice data behind the dashboard"""

    def __init__(self, db: Session):
        self.db = db
        self.invoice_repo = InvoiceRepository(db)

    def get_recent_invoices(
        self, context: BusinessContext, limit: int | None = None
    ) -> list[InvoiceSummary]:
        """
        Most recently created invoices of the context's business.

        Args:
            context: Business context of the requesting member
            limit: Max invoices (defaults to DASHBOARD_RECENT_LIMIT)

        Returns:
            Invoice summaries, newest first, with contact name fields
        """
        invoices = self.invoice_repo.get_recent_for_business(
            context.business.id, limit or settings.DASHBOARD_RECENT_LIMIT
        )
        return [InvoiceSummary.model_validate(invoice) for invoice in invoices]

    def get_metrics(
        self, context: BusinessContext, now: datetime | None = None
    ) -> DashboardMetrics:
        """Dashboard metrics over the recent-invoice batch of the business"""
        return compute_dashboard_metrics(self.get_recent_invoices(context), now=now)
