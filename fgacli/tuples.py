"""Relationship tuple types and parsing of tuples, conditions and contexts."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import validation_error


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class RelationshipCondition:
    """A named condition attached to a tuple, with its context."""

    name: str = ""
    context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        if self.context is not None:
            result["context"] = self.context
        return result

    @classmethod
    def from_dict(cls, data: Any) -> RelationshipCondition:
        if not isinstance(data, Mapping):
            raise ValueError("condition must be an object")
        context = data.get("context")
        if context is not None and not isinstance(context, Mapping):
            raise ValueError("condition context must be an object")
        return cls(
            name=_as_str(data.get("name")),
            context=dict(context) if context is not None else None,
        )


@dataclass
class TupleKey:
    """A relationship tuple: user, relation, object and an optional condition."""

    user: str = ""
    relation: str = ""
    object: str = ""
    condition: RelationshipCondition | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "user": self.user,
            "relation": self.relation,
            "object": self.object,
        }
        if self.condition is not None:
            result["condition"] = self.condition.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Any) -> TupleKey:
        if not isinstance(data, Mapping):
            raise ValueError("tuple must be an object")
        raw_condition = data.get("condition")
        condition = (
            RelationshipCondition.from_dict(raw_condition)
            if raw_condition is not None
            else None
        )
        return cls(
            user=_as_str(data.get("user")),
            relation=_as_str(data.get("relation")),
            object=_as_str(data.get("object")),
            condition=condition,
        )


def parse_query_context(context_string: str) -> dict[str, Any]:
    """Parse a JSON object string; an empty string gives an empty dict."""
    if context_string == "":
        return {}
    parsed = json.loads(context_string)
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError("context must be a JSON object")
    return parsed


def parse_tuple_condition_string(condition_string: str) -> RelationshipCondition:
    """Parse a condition given as a JSON object of the form {name, context}."""
    if condition_string == "":
        return RelationshipCondition()
    parsed = json.loads(condition_string)
    if parsed is None:
        return RelationshipCondition()
    return RelationshipCondition.from_dict(parsed)


def parse_tuple_condition(
    condition_name: str, condition_context: str = ""
) -> RelationshipCondition | None:
    """Build a condition from a name and a JSON context; no name gives None."""
    if condition_name == "":
        return None
    try:
        context = parse_query_context(condition_context)
    except ValueError as exc:
        raise ValueError(f"error parsing condition context: {exc}") from exc
    return RelationshipCondition(name=condition_name, context=context)


def parse_contextual_tuples(raw_tuples: Iterable[str]) -> list[TupleKey]:
    """Parse tuples written as "user relation object [condition]"."""
    tuples: list[TupleKey] = []
    for raw in raw_tuples:
        parts = raw.split(" ")
        if len(parts) not in (3, 4):
            raise validation_error(
                "ParseContextualTuplesInner",
                "Failed to parse contextual tuples, "
                'they must be of the format "user relation object" or '
                '"user relation object condition", '
                "where condition is a JSON string of the form { name, context }",
            )

        condition = None
        if len(parts) == 4:
            try:
                condition = parse_tuple_condition_string(parts[3])
            except ValueError as exc:
                raise ValueError(f"failed to parse condition due to {exc}") from exc

        tuples.append(
            TupleKey(user=parts[0], relation=parts[1], object=parts[2], condition=condition)
        )
    return tuples