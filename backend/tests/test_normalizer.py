"""
Tests for the permission normalizer.

Every stored shape must parse into the same canonical module map, and
re-parsing the canonical rendering must change nothing.
"""
import json

import pytest

from tenant_rbac.auth.permission_contract import AccessLevel
from tenant_rbac.schemas.role import ModulePermission
from tenant_rbac.services.normalizer import (
    PermissionShape,
    parse_permissions,
    split_module_key,
    to_canonical_dict,
    to_flat_permissions,
    to_hierarchical_permissions,
)
from tenant_rbac.services.summary import summarize

FLAT = ["crm.leads.read", "crm.leads.create", "hr.payroll.process"]
HIERARCHICAL = {
    "crm": {"leads": ["read", "create"]},
    "hr": {"payroll": ["process"]},
    "metadata": {"source": "import", "version": 2},
}


class TestFlatPermissions:
    """Test parsing of flat dot-path arrays."""

    def test_groups_operations_by_module(self):
        parsed = parse_permissions(
            ["hr.employees.delete", "hr.employees.view", "crm.leads.create"]
        )

        assert parsed.shape is PermissionShape.FLAT
        assert list(parsed.entries) == ["hr.employees", "crm.leads"]
        assert parsed.entries["hr.employees"] == ModulePermission(
            level=AccessLevel.ADMIN, operations=("delete", "view")
        )
        assert parsed.entries["crm.leads"].level is AccessLevel.WRITE

    def test_two_segment_path_grants_access_operation(self):
        parsed = parse_permissions(["crm.contacts"])

        assert parsed.entries["crm.contacts"].operations == ("access",)
        assert parsed.entries["crm.contacts"].level is AccessLevel.READ

    def test_extra_segments_are_ignored(self):
        parsed = parse_permissions(["crm.leads.read.own"])
        assert parsed.module_operations == {"crm.leads": ["read"]}

    def test_invalid_items_are_skipped_but_counted(self):
        """Total is the length of the input list."""
        parsed = parse_permissions(["crm", 5, None, "crm.leads.read"])

        assert parsed.module_names == ["crm.leads"]
        assert parsed.total == 4

    def test_duplicate_paths_collapse_in_module_map(self):
        parsed = parse_permissions(["crm.leads.read", "crm.leads.read"])

        assert parsed.module_operations == {"crm.leads": ["read"]}
        assert len(parsed.grants) == 2

    def test_empty_list_is_empty(self):
        assert parse_permissions([]).shape is PermissionShape.EMPTY


class TestHierarchicalPermissions:
    """Test parsing of {application: {module: [operations]}} objects."""

    def test_metadata_key_is_not_an_application(self):
        parsed = parse_permissions(HIERARCHICAL)

        assert parsed.shape is PermissionShape.HIERARCHICAL
        assert parsed.application_names == ["crm", "hr"]
        assert parsed.module_names == ["crm.leads", "hr.payroll"]
        assert parsed.total == 3

    def test_empty_module_array_still_counts_as_module(self):
        parsed = parse_permissions({"crm": {"leads": []}})

        assert parsed.module_names == ["crm.leads"]
        assert parsed.entries["crm.leads"].level is AccessLevel.NONE
        assert parsed.total == 0

    def test_application_without_modules_is_not_recorded(self):
        parsed = parse_permissions({"crm": {}, "hr": {"leave": ["read"]}})
        assert parsed.application_names == ["hr"]

    def test_non_object_application_value_is_skipped(self):
        parsed = parse_permissions({"crm": ["read"], "hr": "all"})
        assert parsed.shape is PermissionShape.EMPTY

    def test_non_list_module_value_is_skipped(self):
        parsed = parse_permissions({"crm": {"leads": "read", "contacts": ["read"]}})
        assert parsed.module_names == ["crm.contacts"]


class TestCanonicalPermissions:
    """Test parsing of the canonical module map."""

    def test_explicit_level_is_kept(self):
        parsed = parse_permissions(
            {"crm.leads": {"level": "write", "operations": ["read", "create"]}}
        )

        assert parsed.shape is PermissionShape.CANONICAL
        assert parsed.entries["crm.leads"].level is AccessLevel.WRITE
        assert parsed.entries["crm.leads"].operations == ("read", "create")

    def test_level_without_operations_becomes_none(self):
        parsed = parse_permissions({"crm.leads": {"level": "admin", "operations": []}})
        assert parsed.entries["crm.leads"].level is AccessLevel.NONE

    def test_none_level_with_operations_is_derived(self):
        parsed = parse_permissions({"crm.leads": {"level": "none", "operations": ["delete"]}})
        assert parsed.entries["crm.leads"].level is AccessLevel.ADMIN

    def test_unknown_level_is_derived(self):
        parsed = parse_permissions({"crm.leads": {"level": "owner", "operations": ["read"]}})
        assert parsed.entries["crm.leads"].level is AccessLevel.READ

    def test_restrictions_are_preserved(self):
        parsed = parse_permissions(
            {
                "crm.leads": {
                    "level": "read",
                    "operations": ["read"],
                    "restrictions": {"timeRestrictions": {"start": "09:00", "end": "17:00"}},
                }
            }
        )

        restrictions = parsed.entries["crm.leads"].restrictions
        assert restrictions is not None
        assert restrictions.time_restrictions == {"start": "09:00", "end": "17:00"}

    def test_model_instances_are_accepted(self):
        entry = ModulePermission(level="read", operations=["read"])
        parsed = parse_permissions({"crm.leads": entry})
        assert parsed.entries["crm.leads"] == entry


class TestIdempotence:
    """Test that the canonical rendering is a fixed point."""

    @pytest.mark.parametrize("raw", [FLAT, HIERARCHICAL, json.dumps(FLAT)])
    def test_reparsing_canonical_form_changes_nothing(self, raw):
        parsed = parse_permissions(raw)
        canonical = to_canonical_dict(parsed)
        reparsed = parse_permissions(canonical)

        assert reparsed.entries == parsed.entries
        assert to_canonical_dict(reparsed) == canonical

    def test_canonical_form_summarizes_like_its_source(self):
        parsed = parse_permissions(FLAT)
        reparsed = parse_permissions(to_canonical_dict(parsed))

        assert summarize(reparsed) == summarize(parsed)

    def test_canonical_dict_is_json_compatible(self):
        canonical = to_canonical_dict(parse_permissions(FLAT))

        assert json.loads(json.dumps(canonical)) == canonical
        assert canonical["crm.leads"] == {"level": "write", "operations": ["read", "create"]}


class TestShapeEquivalence:
    """Test that flat and hierarchical inputs agree."""

    def test_flat_and_hierarchical_give_same_entries(self):
        assert parse_permissions(FLAT).entries == parse_permissions(HIERARCHICAL).entries

    def test_flat_and_hierarchical_give_same_summary(self):
        assert summarize(parse_permissions(FLAT)) == summarize(parse_permissions(HIERARCHICAL))


class TestJsonStrings:
    """Test JSON-encoded inputs."""

    @pytest.mark.parametrize("raw", [FLAT, HIERARCHICAL])
    def test_json_string_parses_like_decoded_value(self, raw):
        assert parse_permissions(json.dumps(raw)).entries == parse_permissions(raw).entries

    def test_bytes_are_decoded(self):
        parsed = parse_permissions(b'["crm.leads.read"]')

        assert parsed.shape is PermissionShape.FLAT
        assert parsed.module_names == ["crm.leads"]

    @pytest.mark.parametrize("raw", ["{not json", "[\"crm.leads.read\"", ""])
    def test_malformed_json_never_raises(self, raw):
        parsed = parse_permissions(raw)

        assert parsed.shape is PermissionShape.MALFORMED
        assert parsed.entries == {}
        assert parsed.error is not None
        assert parsed.error.code == "MALFORMED_PERMISSION_DATA"
        assert "position" in parsed.error.details

    def test_deeply_nested_json_is_malformed(self):
        parsed = parse_permissions("[" * 100000)

        assert parsed.shape is PermissionShape.MALFORMED
        assert parsed.error is not None
        assert parsed.error.details["reason"] == "Nesting too deep"

    @pytest.mark.parametrize("raw", ["42", '"crm.leads.read"', "null"])
    def test_json_scalars_are_empty(self, raw):
        assert parse_permissions(raw).shape is PermissionShape.EMPTY


class TestUnrecognizedInput:
    """Test values that are no permission shape at all."""

    @pytest.mark.parametrize("raw", [None, 42, 3.5, True, object()])
    def test_unrecognized_values_are_empty(self, raw):
        parsed = parse_permissions(raw)

        assert parsed.shape is PermissionShape.EMPTY
        assert parsed.error is None


class TestConversions:
    """Test rendering into the legacy shapes."""

    def test_to_flat_permissions(self):
        assert to_flat_permissions(HIERARCHICAL) == [
            "crm.leads.create",
            "crm.leads.read",
            "hr.payroll.process",
        ]

    def test_to_hierarchical_permissions(self):
        assert to_hierarchical_permissions(FLAT) == {
            "crm": {"leads": ["read", "create"]},
            "hr": {"payroll": ["process"]},
        }

    def test_split_module_key(self):
        assert split_module_key("crm.leads") == ("crm", "leads")
