"""
Audit Models for the Finance Tracker

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of registrations, logins and ledger changes
2. Debugging information when things go wrong
3. Ability to reconstruct how a balance got to its current value

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Authentication
    USER_REGISTERED = "user_registered"
    REGISTRATION_REJECTED = "registration_rejected"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"

    # Ledger changes
    ACCOUNT_CREATED = "account_created"
    CATEGORY_CREATED = "category_created"
    BUDGET_CREATED = "budget_created"
    TRANSACTION_RECORDED = "transaction_recorded"
    BALANCE_UPDATED = "balance_updated"

    # Reads
    QUERY_EXECUTED = "query_executed"

    # System events
    DEMO_DATA_SEEDED = "demo_data_seeded"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'user', 'account', 'transaction')"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    user_id: Optional[int] = Field(
        default=None,
        description="User on whose behalf the action ran"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., a transaction and its balance update)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_registered(user_id, username)
        event = AuditEventBuilder.balance_updated(account_id, user_id, old, new, correlation_id)
    """

    @staticmethod
    def user_registered(
        user_id: int,
        username: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"User registered: {username}",
            details={"username": username},
            is_user_action=True,
        )

    @staticmethod
    def registration_rejected(
        username: str,
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            correlation_id=correlation_id,
            description=f"Registration rejected: {reason}",
            details={"username": username, "reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def login_succeeded(
        user_id: int,
        username: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"User logged in: {username}",
            details={"username": username},
            is_user_action=True,
        )

    @staticmethod
    def login_failed(
        username: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            correlation_id=correlation_id,
            description="Login failed: invalid credentials",
            details={"username": username},
            is_user_action=True,
        )

    @staticmethod
    def entity_created(
        entity_type: str,
        entity_id: int,
        user_id: int,
        name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        event_type = {
            "account": AuditEventType.ACCOUNT_CREATED,
            "category": AuditEventType.CATEGORY_CREATED,
            "budget": AuditEventType.BUDGET_CREATED,
        }[entity_type]
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} created: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def transaction_recorded(
        transaction_id: int,
        user_id: int,
        transaction_type: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_RECORDED,
            entity_type="transaction",
            entity_id=transaction_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Transaction recorded: {transaction_type} of {amount}",
            details={
                "type": transaction_type,
                "amount": str(amount),
            },
            is_user_action=True,
        )

    @staticmethod
    def balance_updated(
        account_id: int,
        user_id: int,
        old_balance: Decimal,
        new_balance: Decimal,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_UPDATED,
            entity_type="account",
            entity_id=account_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Balance updated: {old_balance} -> {new_balance}",
            details={
                "old_balance": str(old_balance),
                "new_balance": str(new_balance),
            },
        )

    @staticmethod
    def query_executed(
        user_id: int,
        query_type: str,
        result_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.QUERY_EXECUTED,
            severity=AuditSeverity.DEBUG,
            entity_type="query",
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Query executed: {query_type} returned {result_count} results",
            details={
                "query_type": query_type,
                "result_count": result_count,
            },
        )

    @staticmethod
    def demo_data_seeded(
        user_id: int,
        username: str
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEMO_DATA_SEEDED,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description=f"Demo data seeded for {username}",
            details={"username": username},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
