"""Business role enum for membership-based access."""

from enum import Enum as PyEnum


class BusinessRole(str, PyEnum):
    """
    Roles a user can hold inside a business.

    - OWNER - Full control of the business and its members
    - ADMIN - Manages data and invites members
    - ACCOUNTANT - Works the books (invoices, contacts)
    - VIEWER - Read-only access to dashboards and reports
    """

    OWNER = "owner"
    ADMIN = "admin"
    ACCOUNTANT = "accountant"
    VIEWER = "viewer"
