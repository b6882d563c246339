"""Results of reading stored tuples, in full, simple and CSV forms."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .tuples import TupleKey

MAX_READ_PAGES_LENGTH = 20
"""Default number of pages read, so reading never paginates indefinitely."""


@dataclass
class ReadCsvRow:
    """One tuple laid out in the columns of a CSV tuple file."""

    user_type: str = ""
    user_id: str = ""
    user_relation: str = ""
    relation: str = ""
    object_type: str = ""
    object_id: str = ""
    condition_name: str = ""
    condition_context: str = ""


def _split_reference(value: str, what: str) -> tuple[str, str]:
    parts = value.split(":")
    if len(parts) < 2:
        raise ValueError(f'invalid {what} "{value}": expected "type:id"')
    return parts[0], parts[1]


@dataclass
class ReadResponse:
    """Tuples as returned by the server, and just their keys."""

    tuples: list[dict[str, Any]] = field(default_factory=list)
    simple: list[TupleKey] = field(default_factory=list)

    @classmethod
    def from_tuples(cls, tuples: Iterable[Mapping[str, Any]]) -> ReadResponse:
        """Build a response from tuples of the form {"key": {...}, "timestamp": ...}."""
        complete: list[dict[str, Any]] = []
        simple: list[TupleKey] = []
        for item in tuples:
            key = TupleKey.from_dict(item.get("key") or {})
            simple.append(key)
            complete.append({"key": key.to_dict(), "timestamp": item.get("timestamp")})
        return cls(tuples=complete, simple=simple)

    def to_csv_rows(self) -> list[ReadCsvRow]:
        """Lay out every tuple key as a CSV row."""
        rows: list[ReadCsvRow] = []
        for key in self.simple:
            condition_name = ""
            condition_context = ""
            if key.condition is not None:
                condition_name = key.condition.name
                if key.condition.context is not None:
                    try:
                        condition_context = json.dumps(
                            key.condition.context,
                            sort_keys=True,
                            separators=(",", ":"),
                            ensure_ascii=False,
                        )
                    except (TypeError, ValueError) as exc:
                        raise ValueError(
                            f"failed to convert condition context to CSV: {exc}"
                        ) from exc
            user_type, user_id = _split_reference(key.user, "user")
            object_type, object_id = _split_reference(key.object, "object")
            rows.append(
                ReadCsvRow(
                    user_type=user_type,
                    user_id=user_id,
                    relation=key.relation,
                    object_type=object_type,
                    object_id=object_id,
                    condition_name=condition_name,
                    condition_context=condition_context,
                )
            )
        return rows

    def to_dict(self) -> dict[str, Any]:
        """Return the full response form with its (empty) continuation token."""
        return {"tuples": [dict(item) for item in self.tuples], "continuation_token": ""}