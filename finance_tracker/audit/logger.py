"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of registrations, logins and ledger changes
2. Debugging capability
3. A history of how each balance was reached

The audit logger:
- Is async so it sits naturally inside the async flows
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_tracker.config import AppSettings, get_settings
from finance_tracker.models.audit import AuditEvent, AuditEventBuilder
from finance_tracker.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_user_registered(
        self,
        user_id: int,
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.user_registered(
            user_id=user_id,
            username=username,
            correlation_id=correlation_id,
        ))

    async def log_registration_rejected(
        self,
        username: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.registration_rejected(
            username=username,
            reason=reason,
            correlation_id=correlation_id,
        ))

    async def log_login_succeeded(
        self,
        user_id: int,
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.login_succeeded(
            user_id=user_id,
            username=username,
            correlation_id=correlation_id,
        ))

    async def log_login_failed(
        self,
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.login_failed(
            username=username,
            correlation_id=correlation_id,
        ))

    async def log_entity_created(
        self,
        entity_type: str,
        entity_id: int,
        user_id: int,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log creation of an account, category or budget."""
        await self.log(AuditEventBuilder.entity_created(
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            name=name,
            correlation_id=correlation_id,
        ))

    async def log_transaction_recorded(
        self,
        transaction_id: int,
        user_id: int,
        transaction_type: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_recorded(
            transaction_id=transaction_id,
            user_id=user_id,
            transaction_type=transaction_type,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_balance_updated(
        self,
        account_id: int,
        user_id: int,
        old_balance: Decimal,
        new_balance: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.balance_updated(
            account_id=account_id,
            user_id=user_id,
            old_balance=old_balance,
            new_balance=new_balance,
            correlation_id=correlation_id,
        ))

    async def log_query_executed(
        self,
        user_id: int,
        query_type: str,
        result_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.query_executed(
            user_id=user_id,
            query_type=query_type,
            result_count=result_count,
            correlation_id=correlation_id,
        ))

    async def log_demo_data_seeded(self, user_id: int, username: str) -> None:
        await self.log(AuditEventBuilder.demo_data_seeded(
            user_id=user_id,
            username=username,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., recording a transaction)
    and pass it through every step that action triggers.
    """
    return uuid4()


def configure_log_level(settings: Optional[AppSettings] = None) -> int:
    """
    Set the stdlib root level that structlog's level filter reads.

    DEBUG in debug mode (so query events show up), INFO otherwise.
    Returns the level applied.
    """
    settings = settings or get_settings().app
    level = logging.DEBUG if settings.debug_mode else logging.INFO
    logging.basicConfig(format="%(message)s")
    logging.getLogger().setLevel(level)
    return level
