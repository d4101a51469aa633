"""
Tests for SmartExpense models

Test strategy:
1. Unit tests for individual components (models, aggregation, accounts)
2. Flow tests against the in-memory backend
3. No real API calls in tests (fake Gemini model)
"""

import json
from datetime import date, datetime
from decimal import Decimal

import pytest

from smartexpense.models.finance import (
    CATEGORY_COLORS,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    Account,
    Category,
    CategoryTotal,
    FinancialStats,
    Snapshot,
    Transaction,
    TransactionType,
    categories_for,
)
from smartexpense.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestTransactionModel:
    """Tests for the Transaction model."""

    def test_transaction_creation(self):
        """Test defaults are filled in."""
        t = Transaction(
            amount=Decimal("42.50"),
            type=TransactionType.EXPENSE,
            category=Category.FOOD,
            date=date(2024, 3, 1),
        )
        assert t.amount == Decimal("42.50")
        assert t.note == ""
        assert t.id
        assert isinstance(t.created_at, datetime)

    def test_transaction_ids_are_unique(self):
        """Test each transaction gets its own id."""
        kwargs = dict(
            amount=Decimal("1"),
            type=TransactionType.INCOME,
            category=Category.SALARY,
            date=date(2024, 3, 1),
        )
        assert Transaction(**kwargs).id != Transaction(**kwargs).id

    @pytest.mark.parametrize("amount", ["0", "-5"])
    def test_transaction_rejects_non_positive_amount(self, amount):
        """Test that zero and negative amounts are rejected."""
        with pytest.raises(ValueError):
            Transaction(
                amount=Decimal(amount),
                type=TransactionType.EXPENSE,
                category=Category.FOOD,
                date=date(2024, 3, 1),
            )

    def test_income_cannot_use_expense_category(self):
        """Test category must belong to the transaction type."""
        with pytest.raises(ValueError, match="not valid for income"):
            Transaction(
                amount=Decimal("10"),
                type=TransactionType.INCOME,
                category=Category.RENT,
                date=date(2024, 3, 1),
            )

    def test_others_is_valid_for_both_types(self):
        """Test the shared Others category."""
        for transaction_type in TransactionType:
            t = Transaction(
                amount=Decimal("10"),
                type=transaction_type,
                category=Category.OTHERS,
                date=date(2024, 3, 1),
            )
            assert t.category == Category.OTHERS

    def test_transaction_is_immutable(self):
        """Test transactions cannot be edited in place."""
        t = Transaction(
            amount=Decimal("10"),
            type=TransactionType.EXPENSE,
            category=Category.FOOD,
            date=date(2024, 3, 1),
        )
        with pytest.raises(ValueError):
            t.amount = Decimal("20")

    def test_transaction_dumps_camel_case_created_at(self):
        """Test persisted key matches existing storage."""
        t = Transaction(
            amount=Decimal("10"),
            type=TransactionType.EXPENSE,
            category=Category.FOOD,
            date=date(2024, 3, 1),
        )
        data = json.loads(t.model_dump_json(by_alias=True))
        assert "createdAt" in data
        assert data["type"] == "EXPENSE"
        assert data["category"] == "Food"

    def test_long_note_accepted(self):
        """Test notes have no length cap."""
        t = Transaction(
            amount=Decimal("20"),
            type=TransactionType.EXPENSE,
            category=Category.FOOD,
            date=date(2024, 3, 1),
            note="x" * 501,
        )
        assert len(t.note) == 501

    def test_transaction_accepts_stored_json(self):
        """Test loading a record written by an earlier version."""
        t = Transaction.model_validate({
            "id": "k3j9x0a1b",
            "amount": 1200,
            "type": "INCOME",
            "category": "Salary",
            "date": "2024-02-01",
            "createdAt": "2024-02-01T09:30:00",
            "note": "February pay",
        })
        assert t.id == "k3j9x0a1b"
        assert t.amount == Decimal("1200")
        assert t.date == date(2024, 2, 1)


class TestAccountModel:
    """Tests for the Account model."""

    def test_account_strips_identity_fields(self):
        """Test whitespace is removed from name, username and email."""
        account = Account(
            name="  Bob  ",
            username=" bob ",
            email=" bob@example.com ",
            password=" pass ",
        )
        assert account.name == "Bob"
        assert account.username == "bob"
        assert account.email == "bob@example.com"

    def test_account_keeps_password_exactly(self):
        """Test passwords are not trimmed."""
        account = Account(name="Bob", username="bob", email="b@x.io", password=" pass ")
        assert account.password == " pass "

    def test_username_key_is_case_insensitive(self):
        """Test normalized lookup key."""
        account = Account(name="Bob", username="BoB", email="b@x.io", password="p")
        assert account.username_key == "bob"

    def test_account_rejects_bad_email(self):
        """Test basic email shape check."""
        with pytest.raises(ValueError):
            Account(name="Bob", username="bob", email="not-an-email", password="p")

    def test_avatar_must_be_image_data_uri(self):
        """Test avatar URLs are data URIs."""
        with pytest.raises(ValueError, match="data URI"):
            Account(
                name="Bob",
                username="bob",
                email="b@x.io",
                password="p",
                avatar_url="https://example.com/me.png",
            )

    @pytest.mark.parametrize("avatar", [
        "data:image/png;base64,not*base64!",
        "data:image/png;base64,",
        "data:image/png,AAAA",
    ])
    def test_avatar_payload_must_be_base64(self, avatar):
        """Test malformed image payloads are rejected up front."""
        with pytest.raises(ValueError):
            Account(name="Bob", username="bob", email="b@x.io", password="p", avatar_url=avatar)

    def test_avatar_bytes(self):
        """Test the decoded picture is available for display."""
        account = Account(
            name="Bob",
            username="bob",
            email="b@x.io",
            password="p",
            avatar_url="data:image/png;base64,iVBORw0KGgo=",
        )
        assert account.avatar_bytes == b"\x89PNG\r\n\x1a\n"
        assert Account(name="Bob", username="bob", email="b@x.io", password="p").avatar_bytes is None

    def test_avatar_alias(self):
        """Test avatarUrl alias is accepted and dumped."""
        account = Account.model_validate({
            "name": "Bob",
            "username": "bob",
            "email": "b@x.io",
            "password": "p",
            "avatarUrl": "data:image/png;base64,AAAA",
        })
        assert account.avatar_url == "data:image/png;base64,AAAA"
        assert account.model_dump(by_alias=True)["avatarUrl"] == account.avatar_url


class TestFinancialStats:
    """Tests for FinancialStats."""

    def test_from_totals(self):
        """Test derived fields."""
        stats = FinancialStats.from_totals(Decimal("1000"), Decimal("850"))
        assert stats.balance == Decimal("150")
        assert stats.expense_ratio == Decimal("85")
        assert stats.savings_rate == Decimal("15")
        assert stats.is_surplus is True

    def test_ratio_guarded_without_income(self):
        """Test no division by zero."""
        stats = FinancialStats.from_totals(Decimal("0"), Decimal("40"))
        assert stats.expense_ratio == 0
        assert stats.balance == Decimal("-40")
        assert stats.is_surplus is False

    def test_default_is_all_zero(self):
        """Test empty stats."""
        stats = FinancialStats()
        assert (stats.total_income, stats.total_expense, stats.balance, stats.expense_ratio) == (0, 0, 0, 0)


class TestCategories:
    """Tests for category enums and subsets."""

    def test_category_values(self):
        """Test display labels."""
        assert Category.SALARY.value == "Salary"
        assert Category.OTHERS.value == "Others"

    def test_category_subsets(self):
        """Test per-type category lists."""
        assert categories_for(TransactionType.INCOME) == INCOME_CATEGORIES
        assert categories_for(TransactionType.EXPENSE) == EXPENSE_CATEGORIES
        assert Category.RENT not in INCOME_CATEGORIES
        assert Category.SALARY not in EXPENSE_CATEGORIES

    def test_every_category_has_a_color(self):
        """Test the palette covers the whole domain."""
        assert set(CATEGORY_COLORS) == set(Category)

    def test_category_total_carries_color(self):
        """Test computed colour field."""
        row = CategoryTotal(category=Category.RENT, amount=Decimal("850"))
        assert row.color == "#818cf8"
        assert row.model_dump()["color"] == "#818cf8"


class TestSnapshot:
    """Tests for the backup snapshot model."""

    def test_snapshot_uses_camel_case_keys(self):
        """Test serialized keys."""
        snapshot = Snapshot(version="1.0.0")
        data = json.loads(snapshot.to_json())
        assert set(data) == {"transactions", "accounts", "currentUser", "exportDate", "version"}
        assert data["currentUser"] is None

    def test_snapshot_requires_semver(self):
        """Test version format."""
        with pytest.raises(ValueError):
            Snapshot(version="v1")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            description="User logged in",
        )
        assert event.event_type == AuditEventType.LOGIN_SUCCEEDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.transaction_added("abc", "EXPENSE", "12.50")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "transaction_added"
        assert log_dict["entity_id"] == "abc"
        assert log_dict["details"]["amount"] == "12.50"

    def test_login_failed_is_warning(self):
        """Test failure events carry warning severity."""
        event = AuditEventBuilder.login_failed("alice")
        assert event.severity == AuditSeverity.WARNING
        assert event.is_user_action is True

    def test_external_service_error(self):
        """Test provider failures are errors."""
        event = AuditEventBuilder.external_service_error("gemini", "timeout")
        assert event.severity == AuditSeverity.ERROR
        assert event.details["service"] == "gemini"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
