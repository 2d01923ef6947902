"""Shared fixtures for the Finance Tracker tests."""

import asyncio

import pytest

from finance_tracker.audit import AuditLogger
from finance_tracker.orchestrator import create_app_components
from finance_tracker.services.auth import PasswordService
from finance_tracker.services.storage import InMemoryAuditStorage, InMemoryFinanceStorage


@pytest.fixture
def run():
    """Run a coroutine to completion."""
    return asyncio.run


@pytest.fixture
def storage():
    return InMemoryFinanceStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def password_service():
    # Lowest bcrypt cost keeps the suite fast
    return PasswordService(rounds=4)


@pytest.fixture
def components(storage, audit_logger, password_service):
    return create_app_components(
        storage=storage,
        audit_logger=audit_logger,
        password_service=password_service,
    )
