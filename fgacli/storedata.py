"""Store test files: a model, tuples and the tests to run against them."""

from __future__ import annotations

import posixpath
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import yaml

from .authmodel import ModelFormat, read_from_file
from .conversion import UserTypeFilter
from .errors import CliError
from .tuplefile import read_tuple_file
from .tuples import RelationshipCondition, TupleKey


class _DecodeError(ValueError):
    pass


@dataclass
class ModelTestCheck:
    """Check assertions: relation name to expected allowed result."""

    user: str = ""
    object: str = ""
    context: dict[str, Any] | None = None
    assertions: dict[str, bool] = field(default_factory=dict)


@dataclass
class ModelTestListObjects:
    """ListObjects assertions: relation name to expected objects."""

    user: str = ""
    type: str = ""
    context: dict[str, Any] | None = None
    assertions: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class ModelTestListUsersAssertion:
    """Users expected from ListUsers, and those expected to be excluded."""

    users: list[str] | None = None
    excluded_users: list[str] | None = None


@dataclass
class ModelTestListUsers:
    """ListUsers assertions: relation name to expected users."""

    object: str = ""
    user_filter: list[UserTypeFilter] = field(default_factory=list)
    context: dict[str, Any] | None = None
    assertions: dict[str, ModelTestListUsersAssertion] = field(default_factory=dict)


@dataclass
class ModelTest:
    """One named test with its own tuples and assertions."""

    name: str = ""
    description: str = ""
    tuples: list[TupleKey] = field(default_factory=list)
    tuple_file: str = ""
    check: list[ModelTestCheck] = field(default_factory=list)
    list_objects: list[ModelTestListObjects] = field(default_factory=list)
    list_users: list[ModelTestListUsers] = field(default_factory=list)


def _mapping(data: Any, allowed: tuple[str, ...], type_name: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise _DecodeError(f"cannot unmarshal {type(data).__name__} into {type_name}")
    for key in data:
        if key not in allowed:
            raise _DecodeError(f"field {key} not found in type {type_name}")
    return data


def _string(value: Any, where: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise _DecodeError(f"cannot unmarshal {type(value).__name__} into string ({where})")


def _list(value: Any, where: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise _DecodeError(f"cannot unmarshal {type(value).__name__} into list ({where})")
    return value


def _context(value: Any, where: str) -> dict[str, Any] | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise _DecodeError(f"cannot unmarshal {type(value).__name__} into context ({where})")
    return {str(key): item for key, item in value.items()}


def _assertion_map(value: Any, where: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise _DecodeError(f"cannot unmarshal {type(value).__name__} into assertions ({where})")
    return value


def _tuple(data: Any) -> TupleKey:
    raw = _mapping(data, ("user", "relation", "object", "condition"), "ClientContextualTupleKey")
    condition = None
    if raw.get("condition") is not None:
        raw_condition = _mapping(raw["condition"], ("name", "context"), "RelationshipCondition")
        condition = RelationshipCondition(
            name=_string(raw_condition.get("name"), "condition.name"),
            context=_context(raw_condition.get("context"), "condition.context"),
        )
    return TupleKey(
        user=_string(raw.get("user"), "user"),
        relation=_string(raw.get("relation"), "relation"),
        object=_string(raw.get("object"), "object"),
        condition=condition,
    )


def _check(data: Any) -> ModelTestCheck:
    raw = _mapping(data, ("user", "object", "context", "assertions"), "ModelTestCheck")
    assertions: dict[str, bool] = {}
    for relation, expected in _assertion_map(raw.get("assertions"), "check").items():
        if not isinstance(expected, bool):
            raise _DecodeError(f"cannot unmarshal {expected!r} into bool (check.{relation})")
        assertions[str(relation)] = expected
    return ModelTestCheck(
        user=_string(raw.get("user"), "check.user"),
        object=_string(raw.get("object"), "check.object"),
        context=_context(raw.get("context"), "check.context"),
        assertions=assertions,
    )


def _string_list(value: Any, where: str) -> list[str]:
    return [_string(item, where) for item in _list(value, where)]


def _list_objects(data: Any) -> ModelTestListObjects:
    raw = _mapping(data, ("user", "type", "context", "assertions"), "ModelTestListObjects")
    assertions = {
        str(relation): _string_list(expected, f"list_objects.{relation}")
        for relation, expected in _assertion_map(raw.get("assertions"), "list_objects").items()
    }
    return ModelTestListObjects(
        user=_string(raw.get("user"), "list_objects.user"),
        type=_string(raw.get("type"), "list_objects.type"),
        context=_context(raw.get("context"), "list_objects.context"),
        assertions=assertions,
    )


def _users_assertion(data: Any) -> ModelTestListUsersAssertion:
    raw = _mapping(data, ("users", "excluded_users"), "ModelTestListUsersAssertion")
    users = raw.get("users")
    excluded = raw.get("excluded_users")
    return ModelTestListUsersAssertion(
        users=None if users is None else _string_list(users, "users"),
        excluded_users=None if excluded is None else _string_list(excluded, "excluded_users"),
    )


def _list_users(data: Any) -> ModelTestListUsers:
    raw = _mapping(data, ("object", "user_filter", "context", "assertions"), "ModelTestListUsers")
    filters = [
        UserTypeFilter.from_dict(_mapping(item, ("type", "relation"), "UserTypeFilter"))
        for item in _list(raw.get("user_filter"), "user_filter")
    ]
    assertions = {
        str(relation): _users_assertion(expected)
        for relation, expected in _assertion_map(raw.get("assertions"), "list_users").items()
    }
    return ModelTestListUsers(
        object=_string(raw.get("object"), "list_users.object"),
        user_filter=filters,
        context=_context(raw.get("context"), "list_users.context"),
        assertions=assertions,
    )


def _model_test(data: Any) -> ModelTest:
    raw = _mapping(
        data,
        ("name", "description", "tuples", "tuple_file", "check", "list_objects", "list_users"),
        "ModelTest",
    )
    return ModelTest(
        name=_string(raw.get("name"), "test.name"),
        description=_string(raw.get("description"), "test.description"),
        tuples=[_tuple(item) for item in _list(raw.get("tuples"), "test.tuples")],
        tuple_file=_string(raw.get("tuple_file"), "test.tuple_file"),
        check=[_check(item) for item in _list(raw.get("check"), "test.check")],
        list_objects=[_list_objects(item) for item in _list(raw.get("list_objects"), "test.list_objects")],
        list_users=[_list_users(item) for item in _list(raw.get("list_users"), "test.list_users")],
    )


def _join(base_path: str, name: str) -> str:
    parts = [part for part in (base_path, name) if part]
    if not parts:
        return ""
    return posixpath.normpath("/".join(parts))


@dataclass
class StoreData:
    """The contents of a store test file."""

    name: str = ""
    model: str = ""
    model_file: str = ""
    tuples: list[TupleKey] = field(default_factory=list)
    tuple_file: str = ""
    tests: list[ModelTest] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> StoreData:
        """Build store data from a decoded document, rejecting unknown fields."""
        raw = _mapping(
            data, ("name", "model", "model_file", "tuples", "tuple_file", "tests"), "StoreData"
        )
        return cls(
            name=_string(raw.get("name"), "name"),
            model=_string(raw.get("model"), "model"),
            model_file=_string(raw.get("model_file"), "model_file"),
            tuples=[_tuple(item) for item in _list(raw.get("tuples"), "tuples")],
            tuple_file=_string(raw.get("tuple_file"), "tuple_file"),
            tests=[_model_test(item) for item in _list(raw.get("tests"), "tests")],
        )

    def load_model(self, base_path: str) -> ModelFormat:
        """Read the model file, if any and no inline model is set; return its format."""
        if self.model != "" or self.model_file == "":
            return ModelFormat.DEFAULT
        loaded = read_from_file(_join(base_path, self.model_file), ModelFormat.DEFAULT, self.name)
        if loaded.input != "":
            self.model = loaded.input
        return loaded.format

    def load_tuples(self, base_path: str) -> None:
        """Read the global and per-test tuple files, reporting every failure at once."""
        errors: list[str] = []

        if self.tuple_file != "":
            try:
                self.tuples = read_tuple_file(_join(base_path, self.tuple_file))
            except CliError as exc:
                errors.append(
                    f"failed to process global tuple {self.tuple_file} file due to {exc}"
                )

        for test in self.tests:
            if test.tuple_file == "":
                continue
            try:
                test.tuples = read_tuple_file(_join(base_path, test.tuple_file))
            except CliError as exc:
                errors.append(
                    f"failed to process tuple file {test.tuple_file} for test {test.name} due to {exc}"
                )

        if errors:
            raise CliError("\n".join(["failed to process one or more tuple files", *errors]))


def read_store_file(file_name: str, base_path: str) -> tuple[ModelFormat, StoreData]:
    """Read and parse a store test file, loading its model and tuple files."""
    try:
        with open(file_name, encoding="utf-8") as handle:
            text = handle.read()
    except OSError as exc:
        raise CliError(f"failed to read file {file_name} due to {exc}") from exc

    try:
        loaded = yaml.safe_load(text)
        if loaded is None:
            raise _DecodeError("EOF")
        store_data = StoreData.from_dict(loaded)
    except (yaml.YAMLError, ValueError) as exc:
        raise CliError(f"failed to unmarshal file {file_name} due to {exc}") from exc

    model_format = store_data.load_model(base_path)
    store_data.load_tuples(base_path)
    return model_format, store_data