"""
Client-side core of the dashboard.

SessionManager owns who is signed in and which business is active;
DashboardAggregator turns the active business's recent invoices into
metrics. Both talk to the backend only through a DataService.
"""

from ledger_dashboard.client.dashboard_aggregator import DashboardAggregator
from ledger_dashboard.client.data_service import AuthChangeEvent, DataService
from ledger_dashboard.client.http_data_service import HttpDataService
from ledger_dashboard.client.session_manager import SessionManager, SessionState

__all__ = [
    "AuthChangeEvent",
    "DashboardAggregator",
    "DataService",
    "HttpDataService",
    "SessionManager",
    "SessionState",
]
