"""Pydantic models for the Ledger API.

Wire payloads use camelCase keys (``ownerId``, ``totalIncome``) while the code
uses snake_case; the transaction date travels as ``date`` and is stored as
``occurred_at``.
"""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ledger.core.utils import parse_date

UNCATEGORIZED = "Uncategorized"


class TransactionKind(str, Enum):
    """Whether money came in or went out."""

    INCOME = "income"
    EXPENSE = "expense"


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases and accepting ORM objects."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _coerce_date(value: object) -> object:
    if value is None:
        return None
    parsed = parse_date(value)
    if parsed is None:
        msg = f"invalid date: {value!r}"
        raise ValueError(msg)
    return parsed


def _coerce_category(value: object) -> object:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class TransactionCreate(CamelModel):
    """Body of a create request."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1)
    amount: float = Field(ge=0, allow_inf_nan=False)
    kind: TransactionKind = Field(validation_alias=AliasChoices("kind", "type"))
    category: str | None = None
    occurred_at: date | None = Field(default=None, alias="date")

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("category", mode="before")
    @classmethod
    def _blank_category(cls, value: object) -> object:
        return _coerce_category(value)

    @field_validator("occurred_at", mode="before")
    @classmethod
    def _parse_date(cls, value: object) -> object:
        return _coerce_date(value)


class TransactionUpdate(CamelModel):
    """Body of an update request; only the supplied fields are replaced."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = Field(default=None, min_length=1)
    amount: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    kind: TransactionKind | None = Field(default=None, validation_alias=AliasChoices("kind", "type"))
    category: str | None = None
    occurred_at: date | None = Field(default=None, alias="date")

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("category", mode="before")
    @classmethod
    def _blank_category(cls, value: object) -> object:
        return _coerce_category(value)

    @field_validator("occurred_at", mode="before")
    @classmethod
    def _parse_date(cls, value: object) -> object:
        return _coerce_date(value)

    @model_validator(mode="after")
    def _required_fields_not_null(self) -> "TransactionUpdate":
        for name in ("title", "amount", "kind", "occurred_at"):
            if name in self.model_fields_set and getattr(self, name) is None:
                msg = f"{name} cannot be null"
                raise ValueError(msg)
        return self

    def changes(self) -> dict[str, object]:
        """Return the supplied fields keyed by column name."""
        return self.model_dump(exclude_unset=True, by_alias=False)


class TransactionRead(CamelModel):
    """A stored transaction as returned to its owner."""

    id: int
    owner_id: str
    title: str
    amount: float
    kind: TransactionKind
    category: str | None = None
    occurred_at: date = Field(alias="date")
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """SQLite drops the offset on read; stored timestamps are always UTC."""
        return value.replace(tzinfo=UTC) if value.tzinfo is None else value


class TransactionPage(CamelModel):
    """One page of a filtered listing."""

    records: list[TransactionRead]
    total: int
    page: int
    pages: int


class MonthlyBucket(CamelModel):
    """Income and expense sums for one calendar month of one year."""

    year: int
    month: int
    income: float = 0.0
    expense: float = 0.0


class CategoryTotal(CamelModel):
    """Sum of amounts for one literal category value (None for unset)."""

    category: str | None
    total: float


class Summary(CamelModel):
    """Windowed monthly series, top categories and overall totals."""

    monthly: list[MonthlyBucket]
    category: list[CategoryTotal]
    total_income: float
    total_expense: float


class MonthAmounts(CamelModel):
    """Income and expense sums for a month name, across all years."""

    income: float = 0.0
    expense: float = 0.0


class Analytics(CamelModel):
    """Unwindowed month-name breakdown and expense-only category totals."""

    monthly: dict[str, MonthAmounts]
    category_totals: dict[str, float]


class Confirmation(BaseModel):
    """Acknowledgement returned by destructive operations."""

    message: str


class RegisterRequest(BaseModel):
    """Body of a registration request."""

    name: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    """Body of a login request."""

    email: str = ""
    password: str = ""


class AuthResponse(BaseModel):
    """Identity and bearer token issued on register or login."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    email: str
    token: str
