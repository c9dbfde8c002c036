"""
Tests for entity construction rules.

Every failure message is shown to the user verbatim, so the tests pin the
exact text.
"""

import datetime as dt

import pytest

from condo_ledger.models.ledger import MovementKind
from condo_ledger.models.results import Err, Ok
from condo_ledger.security import verify_password
from condo_ledger.validation import (
    ValidationError,
    build_condominium,
    build_movement,
    build_user,
    check_condominium_name,
    check_period,
    is_valid_email,
    parse_iso_date,
)


FAST_ITERATIONS = 1_000


def movement_input(**overrides):
    values = {
        "kind": "income",
        "category": "Aluguel",
        "description": "March rent",
        "amount": "1500.00",
        "date": "2024-03-05",
        "condominium_id": 1,
    }
    values.update(overrides)
    return values


class TestBuildMovement:
    """Tests for build_movement."""

    def test_valid_movement(self):
        """Test a valid movement gets cents and a placeholder id."""
        result = build_movement(**movement_input())

        assert isinstance(result, Ok)
        movement = result.value
        assert movement.id == 0
        assert movement.kind == MovementKind.INCOME
        assert movement.amount_minor_units == 150000
        assert movement.date == dt.date(2024, 3, 5)
        assert movement.condominium_id == 1

    def test_trims_text(self):
        result = build_movement(**movement_input(category="  Água ", description=" Water "))
        assert result.value.category == "Água"
        assert result.value.description == "Water"

    def test_accepts_date_objects(self):
        result = build_movement(**movement_input(date=dt.date(2024, 3, 10)))
        assert result.value.date == dt.date(2024, 3, 10)

    def test_fractional_cents_round(self):
        """Test that 120.505 rounds half away from zero to 12051."""
        result = build_movement(**movement_input(amount="120.505"))
        assert result.value.amount_minor_units == 12051

    @pytest.mark.parametrize(
        "overrides, reason, field",
        [
            ({"kind": "transfer"}, 'Kind must be "income" or "expense"', "kind"),
            ({"category": "   "}, "Category is required", "category"),
            ({"description": ""}, "Description is required", "description"),
            ({"amount": 0}, "Amount must be a positive number", "amount"),
            ({"amount": "-5"}, "Amount must be a positive number", "amount"),
            ({"amount": "abc"}, "Amount must be a positive number", "amount"),
            ({"amount": "0.004"}, "Amount must be a positive number", "amount"),
            ({"date": "05/03/2024"}, "Invalid date. Use the YYYY-MM-DD format", "date"),
            ({"date": "2024-02-30"}, "Invalid date. Use the YYYY-MM-DD format", "date"),
            ({"condominium_id": 0}, "Condominium is required", "condominium_id"),
            ({"condominium_id": None}, "Condominium is required", "condominium_id"),
        ],
    )
    def test_rejections(self, overrides, reason, field):
        result = build_movement(**movement_input(**overrides))

        assert isinstance(result, Err)
        assert result.reason == reason
        assert result.field == field

    def test_unwrap_raises(self):
        """Test that unwrap turns Err into ValidationError."""
        with pytest.raises(ValidationError, match="Category is required"):
            build_movement(**movement_input(category="")).unwrap()


class TestBuildUser:
    """Tests for build_user."""

    def test_valid_user(self):
        """Test that email is normalized and the password is not stored."""
        result = build_user("  A@B.com ", "pass1", iterations=FAST_ITERATIONS)

        assert result.is_ok
        user = result.value
        assert user.email == "a@b.com"
        assert user.password_hash != "pass1"
        assert verify_password("pass1", user.password_hash)
        assert user.is_admin is False

    def test_rejections(self):
        assert build_user("", "pass1").reason == "Email is required"
        assert build_user("not-an-email", "pass1").reason == "Invalid email"
        assert build_user("a@b", "pass1").reason == "Invalid email"
        assert build_user("a@b.com", "abc").reason == "Password must be at least 4 characters"

    def test_custom_min_length(self):
        result = build_user("a@b.com", "pass1", min_password_length=8)
        assert result.reason == "Password must be at least 8 characters"
        assert result.field == "password"


class TestBuildCondominium:
    """Tests for build_condominium and renames."""

    def test_valid_condominium(self):
        result = build_condominium("  Edificio A ", 1)
        assert result.value.name == "Edificio A"
        assert result.value.owner_user_id == 1
        assert result.value.movements == []

    def test_rejections(self):
        assert build_condominium(" ", 1).reason == "Condominium name is required"
        assert build_condominium("Edificio A", 0).reason == "Owner user is required"
        assert build_condominium("Edificio A", True).reason == "Owner user is required"

    def test_check_condominium_name(self):
        assert check_condominium_name(" Novo ").value == "Novo"
        assert check_condominium_name("").reason == "Condominium name is required"


class TestFieldChecks:
    """Tests for the small helpers."""

    def test_is_valid_email(self):
        assert is_valid_email("a@b.com")
        assert not is_valid_email("a b@c.com")
        assert not is_valid_email("@b.com")

    def test_parse_iso_date(self):
        assert parse_iso_date("2024-03-05") == dt.date(2024, 3, 5)
        assert parse_iso_date("2024-3-5") is None
        assert parse_iso_date("2024-13-01") is None
        assert parse_iso_date(dt.datetime(2024, 3, 5)) is None
        assert parse_iso_date(20240305) is None

    def test_check_period(self):
        assert check_period(None, None) is None
        assert check_period(12, 2024) is None
        assert check_period(13, None).reason == "Month must be between 1 and 12"
        assert check_period(0, None).field == "month"
        assert check_period(None, 0).reason == "Year must be a positive number"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
