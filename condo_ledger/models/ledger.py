"""
Core Data Models for Condo Ledger

These models define the shapes of everything persisted in the dataset
document and of the reports computed from it. They are designed to:
1. Round-trip through JSON with the stored camelCase keys
2. Read older documents, filling absent fields with defaults
3. Keep money as integer minor units (cents)

DESIGN DECISION: The models are deliberately lenient about content.
Construction rules (non-empty names, positive amounts, valid emails) live
in condo_ledger.validation, so a document written by an older version is
never rejected on load just because a rule was tightened later.
"""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from condo_ledger.exceptions import ValidationError


DEFAULT_CATEGORIES = (
    "Condomínio",
    "Água",
    "Luz",
    "Gás",
    "Manutenção",
    "Salários",
    "Segurança",
    "Limpeza",
    "Administração",
    "Multas",
    "Outros",
)

ADMIN_USER_ID = 0


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class MovementKind(str, Enum):
    """Direction of a movement."""
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# STORED ENTITIES
# =============================================================================

class LedgerModel(BaseModel):
    """Base for stored entities: camelCase on disk, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Movement(LedgerModel):
    """
    One income or expense entry of a condominium.

    `id` is 0 until the store assigns one.
    """

    id: int = 0
    kind: MovementKind
    category: str
    description: str
    amount_minor_units: int = Field(
        ...,
        description="Amount in cents"
    )
    date: dt.date
    condominium_id: int = 0

    @property
    def period(self) -> tuple[int, int]:
        """(year, month) this movement falls in."""
        return self.date.year, self.date.month


class Condominium(LedgerModel):
    """
    A condominium and its embedded movement list.

    `owner_user_id` is None only for documents written before ownership
    existed; the store migrates those on load.
    """

    id: int = 0
    name: str
    owner_user_id: Optional[int] = None
    movements: list[Movement] = Field(default_factory=list)


class User(LedgerModel):
    """A registered user. `password_hash` holds a verifier, never a password."""

    id: int = 0
    email: str
    password_hash: str = ""
    condominium_ids: list[int] = Field(default_factory=list)
    is_admin: bool = False


class Dataset(LedgerModel):
    """
    Root document.

    The whole ledger lives here and is rewritten on every change.
    Counters only ever grow, so ids are never reused after a deletion.
    """

    users: list[User] = Field(default_factory=list)
    condominiums: list[Condominium] = Field(default_factory=list)
    categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORIES)
    )
    next_user_id: int = 1
    next_condominium_id: int = 1
    next_movement_id: int = 1

    @field_validator(
        'next_user_id', 'next_condominium_id', 'next_movement_id',
        mode='before',
    )
    @classmethod
    def default_missing_counter(cls, v):
        """Older documents may carry null or 0 counters."""
        return v or 1

    @field_validator('users', 'condominiums', mode='before')
    @classmethod
    def default_missing_list(cls, v):
        return v or []

    @field_validator('categories', mode='before')
    @classmethod
    def default_missing_categories(cls, v):
        return v or list(DEFAULT_CATEGORIES)

    def find_condominium(self, condominium_id: int) -> Optional[Condominium]:
        for condominium in self.condominiums:
            if condominium.id == condominium_id:
                return condominium
        return None

    def find_user(self, user_id: int) -> Optional[User]:
        for user in self.users:
            if user.id == user_id:
                return user
        return None

    def find_user_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        for user in self.users:
            if user.email.lower() == wanted:
                return user
        return None


# =============================================================================
# QUERY AND REPORT MODELS
# =============================================================================

class PeriodFilter(BaseModel):
    """
    Optional (month, year) restriction.

    Either part may be None, meaning "any". Both present combine with AND.
    """

    month: Optional[int] = Field(
        default=None,
        description="Month 1-12, or None for every month"
    )
    year: Optional[int] = Field(
        default=None,
        description="Year, or None for every year"
    )

    # LedgerError is not a ValueError, so pydantic lets it through unwrapped
    @field_validator('month')
    @classmethod
    def check_month(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 1 <= v <= 12:
            raise ValidationError("Month must be between 1 and 12", field="month")
        return v

    @field_validator('year')
    @classmethod
    def check_year(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValidationError("Year must be a positive number", field="year")
        return v

    @property
    def is_empty(self) -> bool:
        return self.month is None and self.year is None


class MovementFilter(PeriodFilter):
    """Period filter plus exact kind and category matches."""

    kind: Optional[MovementKind] = None
    category: Optional[str] = None


class Statistics(BaseModel):
    """Totals for a set of movements, all in minor units."""

    income: int = 0
    expense: int = 0
    balance: int = 0
    count: int = Field(
        default=0,
        ge=0,
        description="Number of movements matching the filter"
    )


class ReportingPeriod(BaseModel):
    """A (year, month) pair that has at least one movement."""

    year: int
    month: int
    label: str = Field(
        ...,
        description="Display label, MM/YYYY"
    )
