from dataclasses import dataclass
from typing import Optional

from slimorm import Model, primary_key, ignored


@dataclass
class User(Model):
    __tablename__ = "users"

    id: Optional[int] = primary_key()
    name: Optional[str] = None
    email: Optional[str] = None
    password_confirmation: Optional[str] = ignored()


@dataclass
class Article(Model):
    __tablename__ = "articles"

    id: Optional[int] = primary_key()
    title: Optional[str] = None
    body: Optional[str] = None
    published: Optional[bool] = None
    views: Optional[int] = None


@dataclass
class Tag(Model):
    __tablename__ = "tags"

    code: Optional[str] = primary_key(auto_increment=False)
    label: Optional[str] = None


@dataclass
class AuditEntry(Model):
    __tablename__ = "audit_entries"

    message: Optional[str] = None


@dataclass
class Ghost(Model):
    __tablename__ = "ghosts"

    id: Optional[int] = primary_key()
    name: Optional[str] = None


@dataclass
class Unmapped(Model):
    name: Optional[str] = None


class LegacyAccount:
    """Not a Model subclass; mapped through an explicit TableDescriptor."""

    def __init__(self, account_id=None, owner=None):
        self.account_id = account_id
        self.owner = owner


class PartialAccount:
    """Constructor covers only some of the table's columns."""

    def __init__(self, owner=None):
        self.owner = owner


class BareAccount:
    pass
