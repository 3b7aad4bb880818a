"""Unit tests for identity resolution helpers."""

from cms_sync.domain.identity import (
    identity_keys,
    is_identity_value,
    matches_identity,
    normalize_identity,
    resolve_identity,
    same_record,
)


class TestResolveIdentity:
    def test_prefers_doc_id_over_numeric_id(self):
        assert resolve_identity({"id": 5, "docId": "abc"}) == "abc"

    def test_falls_back_through_priority_order(self):
        assert resolve_identity({"firebaseId": "fb-1", "id": 3}) == "fb-1"
        assert resolve_identity({"__id": "legacy", "id": 3}) == "legacy"
        assert resolve_identity({"id": 3}) == 3

    def test_skips_empty_and_null_keys(self):
        assert resolve_identity({"docId": "", "firebaseId": None, "id": 7}) == 7

    def test_returns_none_without_any_key(self):
        assert resolve_identity({"title": "No keys"}) is None


def test_normalize_identity_treats_numbers_and_strings_alike():
    assert normalize_identity(5) == "5"
    assert normalize_identity(5.0) == "5"
    assert normalize_identity(" 5 ") == "5"
    assert normalize_identity(None) is None
    assert normalize_identity(True) is None


def test_is_identity_value_rejects_blank_strings():
    assert not is_identity_value("   ")
    assert is_identity_value(0)


def test_matches_identity_checks_every_key_field():
    fields = {"id": 12, "docId": "doc-12"}
    assert matches_identity(fields, "doc-12")
    assert matches_identity(fields, "12")
    assert matches_identity(fields, 12)
    assert not matches_identity(fields, "13")
    assert not matches_identity(fields, None)


def test_identity_keys_are_normalized():
    assert identity_keys({"id": 4, "__id": "x"}) == {"__id": "x", "id": "4"}


class TestSameRecord:
    def test_shared_key_value_matches(self):
        assert same_record({"id": 5, "docId": "a"}, {"id": "5"})

    def test_different_values_do_not_match(self):
        assert not same_record({"id": 5}, {"id": 6})

    def test_values_on_different_fields_match(self):
        assert same_record({"docId": "5"}, {"id": 5})
        assert same_record({"firebaseId": "abc"}, {"docId": "abc", "id": 9})

    def test_records_without_keys_never_match(self):
        assert not same_record({"title": "x"}, {"title": "x"})
