"""Entity construction and validation package."""

from condo_ledger.exceptions import ValidationError
from condo_ledger.validation.validator import (
    build_condominium,
    build_movement,
    build_user,
    check_condominium_name,
    check_period,
    is_valid_email,
    parse_iso_date,
)

__all__ = [
    "ValidationError",
    "build_condominium",
    "build_movement",
    "build_user",
    "check_condominium_name",
    "check_period",
    "is_valid_email",
    "parse_iso_date",
]
