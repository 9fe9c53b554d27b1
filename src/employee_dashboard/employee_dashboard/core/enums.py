from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Dashboard roles; each one writes to its own operations log."""

    EMPLOYEE = "employee"
    ADMIN = "admin"
    ACCOUNTANT = "accountant"
    MANAGER = "manager"
    CEO = "ceo"
    HR = "hr"


class OperationKind(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LEAVE_PROCESS = "LEAVE_PROCESS"
    STRATEGIC_APPROVAL = "STRATEGIC_APPROVAL"


class ErrorKind(str, Enum):
    """Failure categories carried inside a failed Result."""

    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    STORAGE_ERROR = "STORAGE_ERROR"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ContributionKind(str, Enum):
    EPF = "EPF"
    ETF = "ETF"
