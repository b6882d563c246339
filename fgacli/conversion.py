"""User and object types returned by the API and their string forms."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .tuples import TupleKey


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class FgaObject:
    """An object reference: its type and id."""

    type: str = ""
    id: str = ""

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"


@dataclass(frozen=True)
class UsersetUser:
    """A set of users: the members of a relation on an object."""

    type: str = ""
    id: str = ""
    relation: str = ""

    def __str__(self) -> str:
        return f"{self.type}:{self.id}#{self.relation}"


@dataclass(frozen=True)
class TypedWildcard:
    """Every user of a type."""

    type: str = ""

    def __str__(self) -> str:
        return f"{self.type}:*"


def _object(data: Any) -> FgaObject | None:
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise ValueError("object must be a mapping")
    return FgaObject(type=_text(data.get("type")), id=_text(data.get("id")))


def _userset(data: Any) -> UsersetUser | None:
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise ValueError("userset must be a mapping")
    return UsersetUser(
        type=_text(data.get("type")),
        id=_text(data.get("id")),
        relation=_text(data.get("relation")),
    )


@dataclass(frozen=True)
class User:
    """A user returned by ListUsers: an object, a userset or a wildcard."""

    object: FgaObject | None = None
    userset: UsersetUser | None = None
    wildcard: TypedWildcard | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> User:
        wildcard = data.get("wildcard")
        if wildcard is not None and not isinstance(wildcard, Mapping):
            raise ValueError("wildcard must be a mapping")
        return cls(
            object=_object(data.get("object")),
            userset=_userset(data.get("userset")),
            wildcard=TypedWildcard(type=_text(wildcard.get("type"))) if wildcard is not None else None,
        )


@dataclass(frozen=True)
class ObjectOrUserset:
    """An excluded user returned by ListUsers: an object or a userset."""

    object: FgaObject | None = None
    userset: UsersetUser | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ObjectOrUserset:
        return cls(object=_object(data.get("object")), userset=_userset(data.get("userset")))


@dataclass(frozen=True)
class UserTypeFilter:
    """Restricts ListUsers to a user type, optionally with a relation."""

    type: str = ""
    relation: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UserTypeFilter:
        relation = data.get("relation")
        return cls(type=_text(data.get("type")), relation=None if relation is None else str(relation))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type}
        if self.relation is not None:
            result["relation"] = self.relation
        return result


def store_object_to_object(object_string: str) -> FgaObject:
    """Split "type:id" into an object reference."""
    parts = object_string.split(":")
    if len(parts) < 2:
        raise ValueError(f'invalid object "{object_string}": expected "type:id"')
    return FgaObject(type=parts[0], id=parts[1])


def users_to_strings(users: Iterable[User]) -> list[str]:
    """Render users as "type:id", "type:id#relation" or "type:*"."""
    result: list[str] = []
    for user in users:
        if user.object is not None:
            result.append(str(user.object))
        elif user.userset is not None:
            result.append(str(user.userset))
        elif user.wildcard is not None:
            result.append(str(user.wildcard))
    return result


def object_or_usersets_to_strings(users: Iterable[ObjectOrUserset]) -> list[str]:
    """Render excluded users as "type:id" or "type:id#relation"."""
    result: list[str] = []
    for user in users:
        if user.object is not None:
            result.append(str(user.object))
        elif user.userset is not None:
            result.append(str(user.userset))
    return result


def tuple_keys_to_dicts(tuples: Iterable[TupleKey]) -> list[dict[str, Any]]:
    """Turn tuples into request dicts; a condition always carries a context."""
    result: list[dict[str, Any]] = []
    for tuple_key in tuples:
        item: dict[str, Any] = {
            "user": tuple_key.user,
            "relation": tuple_key.relation,
            "object": tuple_key.object,
        }
        if tuple_key.condition is not None:
            item["condition"] = {
                "name": tuple_key.condition.name,
                "context": dict(tuple_key.condition.context or {}),
            }
        result.append(item)
    return result