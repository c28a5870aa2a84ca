"""
Tests for permission summaries.
"""
import json
import logging

import pytest

from tenant_rbac.config import reset_settings
from tenant_rbac.schemas.role import Role
from tenant_rbac.schemas.summary import EMPTY_SUMMARY
from tenant_rbac.services.summary import (
    normalize_and_summarize,
    summarize_role,
    summarize_roles,
)

SCENARIO = ["hr.employees.delete", "hr.employees.view", "crm.leads.create"]


class TestNormalizeAndSummarize:
    """Test counts produced for a single permission value."""

    def test_mixed_role_counts(self):
        """One admin, one read and one write grant over two applications."""
        summary = normalize_and_summarize(SCENARIO)

        assert summary.total == 3
        assert summary.admin == 1
        assert summary.write == 1
        assert summary.read == 1
        assert summary.application_count == 2
        assert summary.main_modules == 2
        assert summary.module_count == 2
        assert summary.modules == 2
        assert summary.module_names == ["hr.employees", "crm.leads"]
        assert summary.application_names == ["hr", "crm"]

    def test_operations_are_listed_per_category(self):
        summary = normalize_and_summarize(SCENARIO)

        assert summary.operations_by_category == {
            "admin": ["hr.employees.delete"],
            "write": ["crm.leads.create"],
            "read": ["hr.employees.view"],
        }

    def test_module_operations_are_listed(self):
        summary = normalize_and_summarize(SCENARIO)
        assert summary.module_operations == {
            "hr.employees": ["delete", "view"],
            "crm.leads": ["create"],
        }

    def test_json_string_summarizes_like_list(self):
        assert normalize_and_summarize(json.dumps(SCENARIO)) == normalize_and_summarize(SCENARIO)

    def test_hierarchical_duplicates_are_counted(self):
        summary = normalize_and_summarize({"crm": {"leads": ["read", "read"]}})

        assert summary.total == 2
        assert summary.read == 2
        assert summary.module_count == 1

    @pytest.mark.parametrize("raw", [None, {}, [], "", 17, {"metadata": {"a": 1}}])
    def test_empty_input_gives_empty_summary(self, raw):
        summary = normalize_and_summarize(raw)

        assert summary == EMPTY_SUMMARY
        assert summary.is_empty()

    def test_malformed_json_is_logged_and_empty(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING, logger="tenant_rbac"):
            summary = normalize_and_summarize("{broken")

        assert summary == EMPTY_SUMMARY
        assert "malformed_permission_data" in caplog.text
        assert "MALFORMED_PERMISSION_DATA" in caplog.text

    def test_deeply_nested_json_gives_empty_summary(self):
        assert normalize_and_summarize("[" * 100000) == EMPTY_SUMMARY

    def test_summary_serializes_with_camel_case(self):
        payload = normalize_and_summarize(SCENARIO).model_dump(by_alias=True)

        assert payload["mainModules"] == 2
        assert payload["moduleCount"] == 2
        assert payload["operationsByCategory"]["admin"] == ["hr.employees.delete"]


class TestRoleSummaries:
    """Test summaries computed for roles."""

    def test_summarize_role(self):
        role = Role(role_name="HR Admin", permissions=SCENARIO)
        assert summarize_role(role).total == 3

    def test_role_with_json_permissions(self):
        role = Role.model_validate({"roleName": "HR Admin", "permissions": json.dumps(SCENARIO)})
        assert summarize_role(role).admin == 1

    def test_bad_environment_does_not_affect_summaries(self, monkeypatch: pytest.MonkeyPatch):
        """Building and summarizing a role never reads settings."""
        monkeypatch.setenv("LOG_LEVEL", "verbose")
        reset_settings()

        role = Role(role_name="Sales", permissions=["crm.leads.read"])

        assert summarize_role(role).read == 1
        assert role.inheritance.inheritance_mode is None

    def test_summarize_roles_keys_by_id(self):
        roles = [
            Role(role_id=7, role_name="Sales", permissions=["crm.leads.read"]),
            Role(role_name="Draft", permissions=[]),
        ]

        summaries = summarize_roles(roles)

        assert set(summaries) == {"7", "Draft"}
        assert summaries["7"].read == 1
        assert summaries["Draft"] == EMPTY_SUMMARY
