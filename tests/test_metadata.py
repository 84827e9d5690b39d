from dataclasses import dataclass
from typing import Optional

import pytest

from slimorm import MetadataError, MetadataResolver, Model, TableDescriptor, primary_key
from sample_models import AuditEntry, LegacyAccount, Tag, Unmapped, User


def test_table_name_comes_from_class_attribute(resolver):
    assert resolver.resolve_table_name(User) == "users"


def test_missing_table_name_raises(resolver):
    with pytest.raises(MetadataError, match="Table not declared for Unmapped"):
        resolver.resolve_table_name(Unmapped)


def test_plain_class_without_registration_has_no_table(resolver):
    with pytest.raises(MetadataError):
        resolver.resolve_table_name(LegacyAccount)


def test_primary_key(resolver):
    assert resolver.resolve_primary_key(User) == "id"
    assert resolver.resolve_primary_key(Tag) == "code"


def test_missing_primary_key(resolver):
    with pytest.raises(MetadataError, match="Primary key not declared for AuditEntry"):
        resolver.resolve_primary_key(AuditEntry)

    assert resolver.resolve_primary_key(AuditEntry, allow_empty=True) == ""


def test_auto_increment(resolver):
    assert resolver.is_primary_key_auto_increment(User) is True
    assert resolver.is_primary_key_auto_increment(Tag) is False


def test_ignored_fields(resolver):
    assert resolver.is_field_ignored(User, "password_confirmation") is True
    assert resolver.is_field_ignored(User, "email") is False
    assert resolver.is_field_ignored(User, "not_a_field") is False


def test_descriptor_is_introspected_once(resolver, monkeypatch):
    calls = []
    real_introspect = resolver._introspect

    def counting(model):
        calls.append(model)
        return real_introspect(model)

    monkeypatch.setattr(resolver, "_introspect", counting)

    for _ in range(3):
        resolver.resolve_table_name(User)
        resolver.resolve_primary_key(User)
        resolver.is_field_ignored(User, "email")
        resolver.is_primary_key_auto_increment(User)

    assert calls == [User]


def test_registered_descriptor_takes_precedence(resolver):
    resolver.resolve_table_name(User)

    resolver.register(User, TableDescriptor("people", "id", ignored_fields=["email"]))

    assert resolver.is_registered(User) is True
    assert resolver.resolve_table_name(User) == "people"
    assert resolver.is_field_ignored(User, "email") is True
    assert resolver.is_field_ignored(User, "password_confirmation") is False


def test_registered_plain_class(resolver):
    resolver.register(LegacyAccount, TableDescriptor("accounts", "account_id", auto_increment=False))

    assert resolver.resolve_table_name(LegacyAccount) == "accounts"
    assert resolver.resolve_primary_key(LegacyAccount) == "account_id"
    assert resolver.is_primary_key_auto_increment(LegacyAccount) is False


def test_register_rejects_non_classes(resolver):
    with pytest.raises(MetadataError, match="Only classes"):
        resolver.register(User(), TableDescriptor("users"))


def test_two_primary_keys_are_rejected():
    @dataclass
    class Pair(Model):
        __tablename__ = "pairs"

        left: Optional[int] = primary_key()
        right: Optional[int] = primary_key()

    with pytest.raises(MetadataError, match="More than one primary key"):
        MetadataResolver().resolve_primary_key(Pair)


def test_descriptor_normalizes_ignored_fields():
    descriptor = TableDescriptor("users", ignored_fields=["a", "b", "a"])

    assert descriptor.ignored_fields == frozenset({"a", "b"})
    assert descriptor.primary_key_field == ""
    assert descriptor.auto_increment is True


def test_resolvers_are_independent():
    first = MetadataResolver()
    second = MetadataResolver()

    first.register(User, TableDescriptor("people", "id"))

    assert first.resolve_table_name(User) == "people"
    assert second.resolve_table_name(User) == "users"
