"""Every module imports cleanly, so annotation errors fail one clear test."""

import importlib

import pytest


MODULES = [
    "condo_ledger",
    "condo_ledger.exceptions",
    "condo_ledger.security",
    "condo_ledger.config",
    "condo_ledger.models",
    "condo_ledger.models.results",
    "condo_ledger.models.money",
    "condo_ledger.audit",
    "condo_ledger.validation",
    "condo_ledger.validation.validator",
    "condo_ledger.services",
    "condo_ledger.services.storage",
    "condo_ledger.services.auth",
    "condo_ledger.queries",
    "condo_ledger.orchestrator",
]


class TestPackageImports:
    """Import smoke tests."""

    @pytest.mark.parametrize("module_name", MODULES)
    def test_module_imports(self, module_name):
        assert importlib.import_module(module_name) is not None

    def test_builders_return_parametrized_results(self):
        """Test that the builder annotations resolve to real classes."""
        from condo_ledger.models.results import Ok
        from condo_ledger.validation import build_condominium

        result = build_condominium("Edificio A", 1)

        assert isinstance(result, Ok)
        assert result.unwrap().name == "Edificio A"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
