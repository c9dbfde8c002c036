"""
Entity Construction Rules

DESIGN DECISION: Every entity enters the system through one of the
build_* functions below. They:
- Check the raw form input
- Normalize it (trim text, lowercase emails, convert money to cents)
- Return Ok(entity) with a placeholder id of 0, or Err(reason)

They never touch the store. Whether a referenced condominium or owner
actually exists is the store's business, checked when the entity is added.

IMPORTANT: Messages are shown to the user verbatim, so they say what to
fix rather than what went wrong internally.
"""

import datetime as dt
import re
from typing import Optional, Union

from condo_ledger.models.ledger import Condominium, Movement, MovementKind, User
from condo_ledger.models.money import Amount, to_minor_units
from condo_ledger.models.results import Err, Ok
from condo_ledger.security import DEFAULT_ITERATIONS, hash_password


DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_MIN_PASSWORD_LENGTH = 4


# =============================================================================
# FIELD CHECKS
# =============================================================================

def is_valid_email(email: str) -> bool:
    """local@domain.tld, no whitespace."""
    return bool(EMAIL_PATTERN.match(email))


def parse_iso_date(value: Union[str, dt.date]) -> Optional[dt.date]:
    """
    Parse YYYY-MM-DD into a date.

    Returns None for anything that is not exactly that shape or is not a
    real calendar day (2024-02-30).
    """
    if isinstance(value, dt.datetime):
        return None
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        return None
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        return None


def is_positive_id(value) -> bool:
    """Ids are positive ints; True/False do not count."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_blank(value) -> bool:
    return not isinstance(value, str) or not value.strip()


# =============================================================================
# BUILDERS
# =============================================================================

def build_movement(
    kind: Union[str, MovementKind],
    category: str,
    description: str,
    amount: Amount,
    date: Union[str, dt.date],
    condominium_id: int,
) -> Union[Ok[Movement], Err]:
    """
    Build a movement from form input.

    The amount is converted to cents, rounding half away from zero.
    """
    try:
        movement_kind = MovementKind(kind)
    except ValueError:
        return Err(
            reason='Kind must be "income" or "expense"',
            field="kind",
        )

    if _is_blank(category):
        return Err(reason="Category is required", field="category")

    if _is_blank(description):
        return Err(reason="Description is required", field="description")

    try:
        amount_minor_units = to_minor_units(amount)
    except ValueError:
        return Err(reason="Amount must be a positive number", field="amount")
    if amount_minor_units <= 0:
        return Err(reason="Amount must be a positive number", field="amount")

    movement_date = parse_iso_date(date)
    if movement_date is None:
        return Err(reason="Invalid date. Use the YYYY-MM-DD format", field="date")

    if not is_positive_id(condominium_id):
        return Err(reason="Condominium is required", field="condominium_id")

    return Ok[Movement](value=Movement(
        id=0,
        kind=movement_kind,
        category=category.strip(),
        description=description.strip(),
        amount_minor_units=amount_minor_units,
        date=movement_date,
        condominium_id=condominium_id,
    ))


def build_user(
    email: str,
    password: str,
    min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
    iterations: int = DEFAULT_ITERATIONS,
) -> Union[Ok[User], Err]:
    """
    Build a user from registration input.

    The email is trimmed and lowercased; the password is replaced by a
    salted verifier.
    """
    if _is_blank(email):
        return Err(reason="Email is required", field="email")

    normalized_email = email.strip().lower()
    if not is_valid_email(normalized_email):
        return Err(reason="Invalid email", field="email")

    if not isinstance(password, str) or len(password) < min_password_length:
        return Err(
            reason=f"Password must be at least {min_password_length} characters",
            field="password",
        )

    return Ok[User](value=User(
        id=0,
        email=normalized_email,
        password_hash=hash_password(password, iterations=iterations),
        condominium_ids=[],
        is_admin=False,
    ))


def build_condominium(
    name: str,
    owner_user_id: int,
) -> Union[Ok[Condominium], Err]:
    """Build an empty condominium for an owner."""
    if _is_blank(name):
        return Err(reason="Condominium name is required", field="name")

    if not is_positive_id(owner_user_id):
        return Err(reason="Owner user is required", field="owner_user_id")

    return Ok[Condominium](value=Condominium(
        id=0,
        name=name.strip(),
        owner_user_id=owner_user_id,
        movements=[],
    ))


def check_condominium_name(name: str) -> Union[Ok[str], Err]:
    """Rename rule: same as creation, without the owner."""
    if _is_blank(name):
        return Err(reason="Condominium name is required", field="name")
    return Ok[str](value=name.strip())


def check_period(
    month: Optional[int],
    year: Optional[int],
) -> Optional[Err]:
    """None when (month, year) is a usable period filter, else the reason."""
    if month is not None and (not is_positive_id(month) or month > 12):
        return Err(reason="Month must be between 1 and 12", field="month")
    if year is not None and not is_positive_id(year):
        return Err(reason="Year must be a positive number", field="year")
    return None
