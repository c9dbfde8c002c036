"""
Integration tests for the flows.

Everything goes through create_app_components with in-memory storage,
the way the presentation layer uses it.
"""

import json

import pytest

from condo_ledger.config import (
    AdminSettings,
    AppSettings,
    SecuritySettings,
    Settings,
    StorageSettings,
)
from condo_ledger.exceptions import (
    AuthenticationError,
    ConflictError,
    PersistenceError,
    ValidationError,
)
from condo_ledger.models.ledger import MovementFilter, MovementKind, PeriodFilter, Statistics
from condo_ledger.orchestrator import create_app_components, create_storage
from condo_ledger.services.storage import InMemoryStorage, JsonFileStorage

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD


@pytest.fixture
def dataset_storage():
    return InMemoryStorage()


@pytest.fixture
def session_storage():
    return InMemoryStorage()


@pytest.fixture
def flows(settings, dataset_storage, session_storage):
    return create_app_components(
        settings=settings,
        storage=dataset_storage,
        session_storage=session_storage,
    )


@pytest.fixture
def accounts(flows):
    return flows[0]


@pytest.fixture
def condominiums(flows):
    return flows[1]


@pytest.fixture
def reports(flows):
    return flows[2]


def add_rent_and_water(condominiums, identity, condominium_id):
    condominiums.add_movement(
        identity, condominium_id, "income", "Aluguel", "Aluguel março", "1500.00", "2024-03-05"
    )
    condominiums.add_movement(
        identity, condominium_id, "expense", "Água", "Conta de água", 120.50, "2024-03-10"
    )


class TestEndToEnd:
    """The two reference scenarios."""

    def test_register_record_and_report(self, accounts, condominiums, reports):
        """Register, create a condominium, record two movements, read reports."""
        user = accounts.register("a@b.com", "pass1")
        assert accounts.current_identity().id == user.id

        condominium = condominiums.create(user, "Edificio A")
        add_rent_and_water(condominiums, user, condominium.id)

        expected = Statistics(income=150000, expense=12050, balance=137950, count=2)
        assert reports.statistics(user, condominium.id) == expected
        assert reports.statistics(
            user, condominium.id, PeriodFilter(month=3, year=2024)
        ) == expected
        assert reports.statistics(
            user, condominium.id, PeriodFilter(month=4, year=2024)
        ) == Statistics(income=0, expense=0, balance=0, count=0)

    def test_admin_sees_everything(self, accounts, condominiums):
        """Test admin login against stored users and visibility for both roles."""
        alice = accounts.register("alice@b.com", "pass1")
        condominiums.create(alice, "Alice 1")
        bob = accounts.register("bob@b.com", "pass2")
        condominiums.create(bob, "Bob 1")
        condominiums.create(bob, "Bob 2")

        admin = accounts.login(ADMIN_EMAIL, ADMIN_PASSWORD)

        assert admin.is_admin
        assert [c.name for c in condominiums.list_visible(admin)] == ["Alice 1", "Bob 1", "Bob 2"]
        assert [c.name for c in condominiums.list_visible(alice)] == ["Alice 1"]
        assert [c.name for c in condominiums.list_visible(bob)] == ["Bob 1", "Bob 2"]

    def test_admin_login_with_empty_store(self, accounts):
        admin = accounts.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        assert admin.id == 0
        assert accounts.current_identity().is_admin

    def test_month_only_filter(self, accounts, condominiums, reports):
        """Test month 3 and month 4 without a year."""
        user = accounts.register("a@b.com", "pass1")
        condominium = condominiums.create(user, "Edificio A")
        add_rent_and_water(condominiums, user, condominium.id)

        assert reports.statistics(user, condominium.id, PeriodFilter(month=3)) == Statistics(
            income=150000, expense=12050, balance=137950, count=2
        )
        assert reports.statistics(user, condominium.id, PeriodFilter(month=4)) == Statistics()


class TestAccountFlow:
    """Tests for registration and sessions."""

    def test_register_logs_in(self, accounts, session_storage, settings):
        user = accounts.register("  New@B.com ", "pass1", confirm_password="pass1")

        assert user.email == "new@b.com"
        assert session_storage.get_item(settings.storage.session_key) == str(user.id)

    def test_password_mismatch(self, accounts):
        with pytest.raises(ValidationError, match="Passwords do not match"):
            accounts.register("a@b.com", "pass1", confirm_password="pass2")

    def test_short_password(self, accounts):
        with pytest.raises(ValidationError, match="at least 4 characters"):
            accounts.register("a@b.com", "abc")

    def test_duplicate_email(self, accounts):
        accounts.register("a@b.com", "pass1")

        with pytest.raises(ConflictError, match="already registered"):
            accounts.register("A@B.com", "other")

    def test_admin_email_is_reserved(self, accounts):
        with pytest.raises(ConflictError):
            accounts.register(ADMIN_EMAIL, "whatever")

    def test_login_logout(self, accounts):
        accounts.register("a@b.com", "pass1")
        accounts.logout()
        assert accounts.current_identity() is None

        user = accounts.login("a@b.com", "pass1")
        assert accounts.current_identity().id == user.id

    def test_failed_login(self, accounts):
        accounts.register("a@b.com", "pass1")
        accounts.logout()

        with pytest.raises(AuthenticationError, match="Invalid email or password"):
            accounts.login("a@b.com", "nope")

        assert accounts.current_identity() is None

    def test_logout_when_nobody_logged_in(self, accounts):
        accounts.logout()
        assert accounts.current_identity() is None


class TestCondominiumFlow:
    """Tests for management operations and access rules."""

    def test_create_rename_delete(self, accounts, condominiums):
        user = accounts.register("a@b.com", "pass1")

        condominium = condominiums.create(user, " Edificio A ")
        assert condominium.name == "Edificio A"

        renamed = condominiums.rename(user, condominium.id, "Edificio B")
        assert renamed.name == "Edificio B"

        assert condominiums.delete(user, condominium.id) is True
        assert condominiums.list_visible(user) == []
        assert condominiums.delete(user, condominium.id) is False

    def test_create_blank_name(self, accounts, condominiums):
        user = accounts.register("a@b.com", "pass1")
        with pytest.raises(ValidationError, match="Condominium name is required"):
            condominiums.create(user, "   ")

    def test_admin_cannot_own(self, accounts, condominiums):
        admin = accounts.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        with pytest.raises(ValidationError, match="cannot own"):
            condominiums.create(admin, "Edificio A")

    def test_other_users_condominium_looks_missing(self, accounts, condominiums, reports):
        owner = accounts.register("a@b.com", "pass1")
        condominium = condominiums.create(owner, "Edificio A")
        intruder = accounts.register("x@b.com", "pass1")

        assert condominiums.rename(intruder, condominium.id, "Mine") is None
        assert condominiums.delete(intruder, condominium.id) is False
        assert condominiums.add_movement(
            intruder, condominium.id, "income", "Aluguel", "x", 10, "2024-03-05"
        ) is None
        assert reports.statistics(intruder, condominium.id) is None
        assert reports.movements(intruder, condominium.id) is None
        assert reports.periods(intruder, condominium.id) is None

        assert condominiums.list_visible(owner)[0].name == "Edificio A"

    def test_admin_manages_any_condominium(self, accounts, condominiums, reports):
        owner = accounts.register("a@b.com", "pass1")
        condominium = condominiums.create(owner, "Edificio A")
        admin = accounts.login(ADMIN_EMAIL, ADMIN_PASSWORD)

        movement = condominiums.add_movement(
            admin, condominium.id, "expense", "Luz", "Conta de luz", "80", "2024-05-02"
        )
        assert movement.condominium_id == condominium.id
        assert reports.statistics(admin, condominium.id).expense == 8000
        assert condominiums.rename(admin, condominium.id, "Renomeado").name == "Renomeado"

    def test_add_and_delete_movement(self, accounts, condominiums, reports):
        user = accounts.register("a@b.com", "pass1")
        condominium = condominiums.create(user, "Edificio A")

        movement = condominiums.add_movement(
            user, condominium.id, MovementKind.INCOME, "Aluguel", "x", 10, "2024-03-05"
        )
        assert movement.amount_minor_units == 1000

        assert condominiums.delete_movement(user, condominium.id, movement.id) is True
        assert reports.movements(user, condominium.id) == []
        assert condominiums.delete_movement(user, condominium.id, movement.id) is False

    def test_invalid_movement(self, accounts, condominiums):
        user = accounts.register("a@b.com", "pass1")
        condominium = condominiums.create(user, "Edificio A")

        with pytest.raises(ValidationError) as exc_info:
            condominiums.add_movement(
                user, condominium.id, "income", "Aluguel", "x", "-1", "2024-03-05"
            )
        assert exc_info.value.field == "amount"

    def test_movement_on_missing_condominium(self, accounts, condominiums):
        user = accounts.register("a@b.com", "pass1")
        assert condominiums.add_movement(
            user, 99, "income", "Aluguel", "x", 10, "2024-03-05"
        ) is None

    def test_categories(self, condominiums):
        assert "Água" in condominiums.list_categories()
        assert condominiums.add_category("Jardinagem") is True
        assert condominiums.add_category("Jardinagem") is False
        assert condominiums.list_categories()[-1] == "Jardinagem"

    def test_long_names_are_saved_and_returned(self, accounts, condominiums):
        """Test that 600-character input goes through create, rename and add_category."""
        user = accounts.register("a@b.com", "pass1")

        condominium = condominiums.create(user, "Edificio " + "A" * 600)
        assert len(condominium.name) == 609

        renamed = condominiums.rename(user, condominium.id, "B" * 700)
        assert renamed.name == "B" * 700

        assert condominiums.add_category("X" * 600) is True
        assert condominiums.list_categories()[-1] == "X" * 600

    def test_long_email_registers_and_logs_in(self, accounts):
        email = "a" * 600 + "@b.com"

        user = accounts.register(email, "pass1")

        assert user.email == email
        assert accounts.current_identity().id == user.id


class TestReportFlow:
    """Tests for filtered lists and period selectors."""

    def test_movements_and_periods(self, accounts, condominiums, reports):
        user = accounts.register("a@b.com", "pass1")
        condominium = condominiums.create(user, "Edificio A")
        add_rent_and_water(condominiums, user, condominium.id)
        condominiums.add_movement(
            user, condominium.id, "expense", "Luz", "Conta de luz", 80, "2024-04-02"
        )

        listed = reports.movements(user, condominium.id)
        assert [m.category for m in listed] == ["Luz", "Água", "Aluguel"]

        expenses = reports.movements(
            user, condominium.id, MovementFilter(month=3, year=2024, kind="expense")
        )
        assert [m.category for m in expenses] == ["Água"]

        assert [p.label for p in reports.periods(user, condominium.id)] == ["04/2024", "03/2024"]

    def test_invalid_month_is_a_domain_error(self, accounts, condominiums, reports):
        """Test that month 13 surfaces as a ValidationError with a showable message."""
        user = accounts.register("a@b.com", "pass1")
        condominium = condominiums.create(user, "Edificio A")

        with pytest.raises(ValidationError, match="Month must be between 1 and 12"):
            reports.statistics(user, condominium.id, PeriodFilter(month=13, year=2024))

        with pytest.raises(ValidationError, match="Year must be a positive number"):
            reports.movements(user, condominium.id, MovementFilter(year=0))

    def test_missing_condominium(self, accounts, reports):
        user = accounts.register("a@b.com", "pass1")
        assert reports.statistics(user, 5) is None
        assert reports.periods(user, 5) is None


class TestComponentFactory:
    """Tests for create_app_components and storage selection."""

    def test_survives_restart_on_shared_storage(self, settings, dataset_storage):
        accounts, condominiums, _ = create_app_components(
            settings=settings, storage=dataset_storage
        )
        user = accounts.register("a@b.com", "pass1")
        condominiums.create(user, "Edificio A")

        accounts, condominiums, _ = create_app_components(
            settings=settings, storage=dataset_storage
        )
        assert accounts.current_identity() is None

        user = accounts.login("a@b.com", "pass1")
        assert [c.name for c in condominiums.list_visible(user)] == ["Edificio A"]

    def test_persistence_error_surfaces(self, settings):
        accounts, _, _ = create_app_components(
            settings=settings, storage=InMemoryStorage(max_bytes=50)
        )
        with pytest.raises(PersistenceError):
            accounts.register("a@b.com", "pass1")

    def test_create_storage(self, tmp_path):
        memory = Settings(storage=StorageSettings(backend="memory"))
        assert isinstance(create_storage(memory), InMemoryStorage)

        on_disk = Settings(storage=StorageSettings(backend="file", data_file=tmp_path / "l.json"))
        storage = create_storage(on_disk)
        assert isinstance(storage, JsonFileStorage)
        assert storage.file_path == tmp_path / "l.json"

    def test_file_backend_end_to_end(self, tmp_path):
        path = tmp_path / "ledger.json"
        settings = Settings(
            storage=StorageSettings(backend="file", data_file=path),
            admin=AdminSettings(email=ADMIN_EMAIL, password=ADMIN_PASSWORD),
            security=SecuritySettings(pbkdf2_iterations=1_000),
            app=AppSettings(log_level="WARNING"),
        )
        accounts, condominiums, _ = create_app_components(settings=settings)
        user = accounts.register("a@b.com", "pass1")
        condominiums.create(user, "Edificio A")

        document = json.loads(json.loads(path.read_text(encoding="utf-8"))["condo_ledger_db"])
        assert document["condominiums"][0]["name"] == "Edificio A"
        assert document["users"][0]["condominiumIds"] == [1]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
