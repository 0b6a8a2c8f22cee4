"""Tests for business-application/app/form_definitions.py — the field registry."""

from __future__ import annotations

import json

import pytest

from app.collection_editor import CollectionPolicy
from app.field_schema import FieldKind
from app.form_definitions import (
    CATEGORIES,
    COLLECTIONS,
    CONTACT_FIELDS,
    Category,
    get_collection,
    journal_timeout,
    journal_url,
    list_categories,
    load_collection_policy,
    resolve,
)
from app.validation import UnknownCategoryError, UnknownCollectionError


class TestCategories:
    def test_every_category_has_a_definition(self):
        assert set(CATEGORIES) == set(Category)

    def test_list_categories_in_declared_order(self):
        assert [d.key for d in list_categories()] == ["limitedCompany", "soleTrader", "partnership"]

    def test_limited_company_fields(self):
        definition = resolve("limitedCompany")
        assert definition.display_name == "Limited Company"
        assert list(definition.fields) == ["name", "number", "address"]
        number = definition.fields["number"]
        assert number.placeholder == "01234567"
        assert number.pattern is None
        assert number.status("1234").value == "valid"

    def test_sole_trader_fields(self):
        assert list(resolve("soleTrader").fields) == ["name", "address"]

    def test_resolve_accepts_enum(self):
        assert resolve(Category.PARTNERSHIP).key == "partnership"

    def test_unknown_category(self):
        with pytest.raises(UnknownCategoryError) as exc_info:
            resolve("charity")
        assert exc_info.value.key == "charity"
        assert "charity" in str(exc_info.value)

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            CATEGORIES[Category.SOLE_TRADER] = None
        with pytest.raises(TypeError):
            resolve("soleTrader").fields["extra"] = None


class TestContactFields:
    def test_keys_and_order(self):
        assert [f.key for f in CONTACT_FIELDS] == [
            "contactName", "position", "email", "invoiceEmail", "telephone",
        ]

    def test_only_invoice_email_is_optional(self):
        optional = [f.key for f in CONTACT_FIELDS if f.optional]
        assert optional == ["invoiceEmail"]

    def test_kinds(self):
        kinds = {f.key: f.kind for f in CONTACT_FIELDS}
        assert kinds["email"] is FieldKind.EMAIL
        assert kinds["telephone"] is FieldKind.TELEPHONE

    def test_contact_keys_distinct_from_category_keys(self):
        contact = {f.key for f in CONTACT_FIELDS}
        for definition in list_categories():
            assert not contact & set(definition.fields)


class TestCollections:
    def test_pharmacies_mandatory(self):
        pharmacies = get_collection("pharmacies")
        assert pharmacies.mandatory
        assert pharmacies.component_keys() == ["ods"]

    def test_pharmacists_optional(self):
        pharmacists = get_collection("pharmacists")
        assert not pharmacists.mandatory
        assert pharmacists.component_keys() == ["gphc", "name"]
        assert pharmacists.component("gphc").max_length == 7

    def test_registry_order(self):
        assert [c.name for c in COLLECTIONS] == ["pharmacies", "pharmacists"]

    def test_unknown_collection(self):
        with pytest.raises(UnknownCollectionError):
            get_collection("branches")


class TestSettings:
    def test_defaults(self):
        assert load_collection_policy() == CollectionPolicy()
        assert journal_url() == "http://localhost:8600/api/journal"
        assert journal_timeout() == 30.0

    def test_config_overrides(self, tmp_config_dir):
        (tmp_config_dir / "business-application.json").write_text(json.dumps({
            "journal_url": "http://journal.internal/api",
            "collection_policy": {"block_duplicates": True, "trim_whitespace": True, "bogus": True},
        }))
        assert journal_url() == "http://journal.internal/api"
        policy = load_collection_policy()
        assert policy.block_duplicates
        assert policy.trim_whitespace
        assert policy.add_on_enter

    def test_env_overrides_config(self, tmp_config_dir, monkeypatch):
        (tmp_config_dir / "business-application.json").write_text(json.dumps({"journal_timeout": 5}))
        monkeypatch.setenv("BUSINESS_JOURNAL_TIMEOUT", "2.5")
        assert journal_timeout() == 2.5
