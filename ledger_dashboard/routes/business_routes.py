from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ledger_dashboard.config import settings
from ledger_dashboard.database import get_db
from ledger_dashboard.dependencies import get_business_context, get_current_user
from ledger_dashboard.models.business_context import BusinessContext
from ledger_dashboard.models.user import User
from ledger_dashboard.schemas.business_schemas import BusinessMembership
from ledger_dashboard.schemas.dashboard_schemas import DashboardMetrics
from ledger_dashboard.schemas.invoice_schemas import InvoiceSummary
from ledger_dashboard.services.business_service import BusinessService
from ledger_dashboard.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("", response_model=list[BusinessMembership])
async def list_memberships(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List the businesses the authenticated user belongs to.

    Only active memberships are returned, in server order (the first one
    is the client's default active business).
    """
    service = BusinessService(db)
    return service.list_memberships(user)


@router.get("/{business_id}/invoices/recent", response_model=list[InvoiceSummary])
async def list_recent_invoices(
    limit: int = Query(default=settings.DASHBOARD_RECENT_LIMIT, ge=1, le=100),
    context: BusinessContext = Depends(get_business_context),
    db: Session = Depends(get_db),
):
    """
    Most recently created invoices of a business, newest first.

    - **403** if the user is not an active member of the business
    """
    service = DashboardService(db)
    return service.get_recent_invoices(context, limit=limit)


@router.get("/{business_id}/dashboard", response_model=DashboardMetrics)
async def get_dashboard(
    context: BusinessContext = Depends(get_business_context),
    db: Session = Depends(get_db),
):
    """Dashboard metrics computed over the business's recent invoices"""
    service = DashboardService(db)
    return service.get_metrics(context)
