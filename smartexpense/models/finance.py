"""
Core Data Models for SmartExpense

These models define the schemas for everything that is persisted or
rendered: transactions, accounts, derived statistics and backup snapshots.

DESIGN DECISION: Persisted field names keep the camelCase keys of the
original browser storage (createdAt, avatarUrl, currentUser, ...), exposed
as aliases. Python code uses snake_case; storage and snapshots dump with
by_alias=True so existing backups stay readable.
"""

import base64
import binascii
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Category(str, Enum):
    """
    Supported transaction categories.

    Values are the labels shown in the UI and stored on disk.
    Only a subset is valid for each TransactionType.
    """
    SALARY = "Salary"
    FREELANCE = "Freelance"
    INVESTMENT = "Investment"
    FOOD = "Food"
    TRANSPORT = "Transport"
    RENT = "Rent"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    HEALTH = "Health"
    OTHERS = "Others"


INCOME_CATEGORIES: tuple[Category, ...] = (
    Category.SALARY,
    Category.FREELANCE,
    Category.INVESTMENT,
    Category.OTHERS,
)

EXPENSE_CATEGORIES: tuple[Category, ...] = (
    Category.FOOD,
    Category.TRANSPORT,
    Category.RENT,
    Category.SHOPPING,
    Category.ENTERTAINMENT,
    Category.HEALTH,
    Category.OTHERS,
)

CATEGORY_COLORS: dict[Category, str] = {
    Category.SALARY: "#10b981",
    Category.FREELANCE: "#34d399",
    Category.INVESTMENT: "#059669",
    Category.FOOD: "#f87171",
    Category.TRANSPORT: "#60a5fa",
    Category.RENT: "#818cf8",
    Category.SHOPPING: "#fbbf24",
    Category.ENTERTAINMENT: "#c084fc",
    Category.HEALTH: "#f472b6",
    Category.OTHERS: "#94a3b8",
}


def categories_for(transaction_type: TransactionType) -> tuple[Category, ...]:
    """Categories a transaction of the given type may use."""
    if transaction_type == TransactionType.INCOME:
        return INCOME_CATEGORIES
    return EXPENSE_CATEGORIES


def new_transaction_id() -> str:
    return uuid4().hex


# Transaction has a field called "date"; annotate it through this name.
CalendarDate = date


# =============================================================================
# TRANSACTIONS
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense entry.

    Transactions are immutable once created. The only mutation the
    ledger supports is deletion by id.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: str = Field(
        default_factory=new_transaction_id,
        min_length=1,
        description="Opaque unique identifier"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount in the user's currency"
    )
    type: TransactionType
    category: Category
    date: CalendarDate = Field(
        ...,
        description="Calendar date the transaction applies to"
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        alias="createdAt",
        description="When the entry was recorded"
    )
    note: str = Field(
        default="",
        description="Optional free text"
    )

    @model_validator(mode='after')
    def validate_category_for_type(self) -> 'Transaction':
        """Income and expenses draw from different category subsets."""
        if self.category not in categories_for(self.type):
            raise ValueError(
                f"Category {self.category.value} is not valid for "
                f"{self.type.value.lower()} transactions"
            )
        return self


# =============================================================================
# ACCOUNTS
# =============================================================================

class Account(BaseModel):
    """
    A locally registered account.

    CRITICAL: The password is stored and compared in plaintext.
    This is demo behavior of a single-device tool, not a security design.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name"
    )
    username: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Login name, unique case-insensitively"
    )
    email: str = Field(
        ...,
        min_length=3,
        max_length=320,
        pattern=r"^[^@\s]+@[^@\s]+$",
        description="Contact address"
    )
    password: str = Field(
        ...,
        min_length=1,
        description="Plaintext password"
    )
    avatar_url: Optional[str] = Field(
        default=None,
        alias="avatarUrl",
        description="Profile picture as a data URI"
    )

    @field_validator('name', 'username', 'email', mode='before')
    @classmethod
    def strip_identity_fields(cls, v):
        """Passwords are compared exactly, so only identity fields are trimmed."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator('avatar_url')
    @classmethod
    def validate_avatar_url(cls, v: Optional[str]) -> Optional[str]:
        """Only base64 image data URIs: data:image/<type>;base64,<payload>."""
        if v is None:
            return v
        header, _, payload = v.partition(",")
        if not header.startswith("data:image/") or not header.endswith(";base64") or not payload:
            raise ValueError("Avatar must be an image data URI")
        try:
            base64.b64decode(payload, validate=True)
        except binascii.Error:
            raise ValueError("Avatar image data is not valid base64")
        return v

    @property
    def avatar_bytes(self) -> Optional[bytes]:
        if self.avatar_url is None:
            return None
        return base64.b64decode(self.avatar_url.partition(",")[2])

    @property
    def username_key(self) -> str:
        """Normalized username used for all lookups."""
        return normalize_username(self.username)


def normalize_username(username: str) -> str:
    return username.strip().lower()


# =============================================================================
# DERIVED VIEWS - computed on every read, never persisted
# =============================================================================

class FinancialStats(BaseModel):
    """
    Summary figures shown on the dashboard cards.

    balance and expense_ratio are always derived from the two totals;
    build instances with FinancialStats.from_totals().
    """
    model_config = ConfigDict(frozen=True)

    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    expense_ratio: Decimal = Field(
        default=Decimal("0"),
        description="Expenses as a percentage of income (0 when no income)"
    )

    @classmethod
    def from_totals(cls, total_income: Decimal, total_expense: Decimal) -> 'FinancialStats':
        if total_income > 0:
            expense_ratio = total_expense / total_income * 100
        else:
            expense_ratio = Decimal("0")
        return cls(
            total_income=total_income,
            total_expense=total_expense,
            balance=total_income - total_expense,
            expense_ratio=expense_ratio,
        )

    @property
    def savings_rate(self) -> Decimal:
        """Share of income left over, in percent."""
        return 100 - self.expense_ratio

    @property
    def is_surplus(self) -> bool:
        return self.balance >= 0


class CategoryTotal(BaseModel):
    """One slice of the category breakdown chart."""

    category: Category
    amount: Decimal

    @computed_field
    @property
    def color(self) -> str:
        return CATEGORY_COLORS[self.category]


class PeriodTotals(BaseModel):
    """Income and expense totals for one bucket of the period chart."""

    period: str
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")


# =============================================================================
# BACKUP SNAPSHOT
# =============================================================================

class Snapshot(BaseModel):
    """
    Complete point-in-time export of all persisted state.

    Serialized with the camelCase keys used by existing backup files:
    transactions, accounts, currentUser, exportDate, version.
    """
    model_config = ConfigDict(populate_by_name=True)

    transactions: list[Transaction] = Field(default_factory=list)
    accounts: list[Account] = Field(default_factory=list)
    current_user: Optional[Account] = Field(
        default=None,
        alias="currentUser"
    )
    export_date: datetime = Field(
        default_factory=datetime.utcnow,
        alias="exportDate"
    )
    version: str = Field(
        ...,
        pattern=r"^\d+\.\d+\.\d+$",
        description="Semantic version of the snapshot schema"
    )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)
