"""Shared fixtures: everything runs against an in-memory backend."""

import pytest

from smartexpense.accounts import AccountDirectory, SessionManager
from smartexpense.audit import AuditLogger
from smartexpense.ledger import Ledger
from smartexpense.models.finance import Account
from smartexpense.services.storage import InMemoryBackend, RecordStore


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def store(backend, audit_logger):
    return RecordStore(backend, schema_version="1.0.0", audit_logger=audit_logger)


@pytest.fixture
def directory(store, audit_logger):
    return AccountDirectory(store, audit_logger=audit_logger)


@pytest.fixture
def session(store, directory, audit_logger):
    return SessionManager(
        store,
        directory,
        verification_code="123456",
        audit_logger=audit_logger,
    )


@pytest.fixture
def ledger(store, audit_logger):
    return Ledger(store, audit_logger=audit_logger)


@pytest.fixture
def alice():
    return Account(
        name="Alice Smith",
        username="alice",
        email="alice@example.com",
        password="secret",
    )
