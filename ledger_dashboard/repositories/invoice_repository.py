from sqlalchemy.orm import Session, joinedload

from ledger_dashboard.models.invoice import Invoice


class InvoiceRepository:
    """Repository for Invoice data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_recent_for_business(self, business_id: str, limit: int = 10) -> list[Invoice]:
        """
        Most recently created invoices of a business, newest first.

        Contact is eager-loaded so name fields are available without
        extra queries.

        Args:
            business_id: Business ID
            limit: Max invoices to return

        Returns:
            List of Invoice objects ordered by created_at descending
        """
        return (
            self.db.query(Invoice)
            .options(joinedload(Invoice.contact))
            .filter(Invoice.business_id == business_id)
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
            .limit(limit)
            .all()
        )
