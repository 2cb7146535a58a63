"""
Reduction of a recent-invoice batch into dashboard metrics.

Shared by the client-side DashboardAggregator and the API's dashboard
endpoint so both report the same numbers for the same batch.
"""

from datetime import date, datetime, time, UTC
from typing import Iterable

from ledger_dashboard.models.invoice import InvoiceStatus
from ledger_dashboard.schemas.dashboard_schemas import DashboardMetrics, RecentInvoice
from ledger_dashboard.schemas.invoice_schemas import InvoiceContact, InvoiceSummary

UNKNOWN_CUSTOMER = "Unknown Customer"


def customer_display_name(contact: InvoiceContact | None) -> str:
    """
    Name to show for an invoice's customer.

    Company name wins; otherwise "first last" with blanks dropped;
    otherwise a placeholder.
    """
    if contact is None:
        return UNKNOWN_CUSTOMER
    if contact.company_name:
        return contact.company_name
    if contact.first_name or contact.last_name:
        return f"{contact.first_name or ''} {contact.last_name or ''}".strip()
    return UNKNOWN_CUSTOMER


def _due_moment(due_date: date) -> datetime:
    # Due from midnight UTC of that day.
    return datetime.combine(due_date, time.min, tzinfo=UTC)


def is_overdue(invoice: InvoiceSummary, now: datetime) -> bool:
    """
    Date-derived overdue check.

    Ignores the stored status label except for "paid", so an invoice
    labelled "sent" whose due date has passed counts, and one labelled
    "overdue" with a future due date does not.
    """
    if invoice.status == InvoiceStatus.PAID.value or invoice.due_date is None:
        return False
    return _due_moment(invoice.due_date) < now


def compute_dashboard_metrics(
    invoices: Iterable[InvoiceSummary], now: datetime | None = None
) -> DashboardMetrics:
    """
    Build DashboardMetrics from one fetched batch.

    Totals cover only the batch given (a recent-activity snapshot), not the
    whole ledger. Missing amounts count as zero.

    Args:
        invoices: Invoices of one aggregation cycle, newest first
        now: Reference moment for the overdue check (defaults to current UTC time)
    """
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    batch = list(invoices)
    return DashboardMetrics(
        total_revenue=sum(float(inv.total_amount or 0) for inv in batch),
        outstanding_balance=sum(float(inv.balance_due or 0) for inv in batch),
        overdue_count=sum(1 for inv in batch if is_overdue(inv, now)),
        recent_invoices=[
            RecentInvoice(
                **inv.model_dump(exclude={"contact"}),
                contact=inv.contact,
                customer_name=customer_display_name(inv.contact),
            )
            for inv in batch
        ],
    )
