"""Authorization models: formats, reading from input and display helpers."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .compare import contains
from .errors import CliError, InvalidFormatError, ModelInputMissingError

_CROCKFORD = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_CROCKFORD_INDEX = {char: index for index, char in enumerate(_CROCKFORD)}
_ULID_LENGTH = 26


class ModelFormat(str, Enum):
    """The formats an authorization model can be written in."""

    DEFAULT = "default"
    JSON = "json"
    FGA = "fga"
    MODULAR = "modular"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> ModelFormat:
        """Parse a user-supplied format name; "default" is not accepted."""
        if value in ("json", "fga", "modular"):
            return cls(value)
        raise InvalidFormatError(
            f'{InvalidFormatError.base_message}: must be one of "{cls.JSON}" or "{cls.FGA}"'
        )


def created_at_from_model_id(model_id: str) -> datetime:
    """Return the creation time (whole seconds, UTC) encoded in a ULID model id."""
    if len(model_id) != _ULID_LENGTH:
        raise ValueError("error parsing model id ulid: bad data size when unmarshaling")
    upper = model_id.upper()
    if any(char not in _CROCKFORD_INDEX for char in upper):
        raise ValueError("error parsing model id ulid: bad data characters when unmarshaling")
    if upper[0] > "7":
        raise ValueError("error parsing model id ulid: overflow when unmarshaling")

    milliseconds = 0
    for char in upper[:10]:
        milliseconds = milliseconds * 32 + _CROCKFORD_INDEX[char]
    return datetime.fromtimestamp(milliseconds // 1000, tz=timezone.utc)


def _format_time(value: datetime) -> str:
    utc = value.astimezone(timezone.utc)
    text = utc.strftime("%Y-%m-%dT%H:%M:%S")
    if utc.microsecond:
        text += f".{utc.microsecond:06d}".rstrip("0")
    return text + "Z"


@dataclass
class AuthzModel:
    """An authorization model together with its id and creation time."""

    id: str | None = None
    created_at: datetime | None = None
    schema_version: str | None = None
    type_definitions: list[dict[str, Any]] | None = None
    conditions: dict[str, dict[str, Any]] | None = None

    def set(self, authz_model: Mapping[str, Any]) -> None:
        """Fill this model from a model object as returned by the API."""
        model_id = authz_model.get("id") or ""
        self.id = str(model_id)
        self.schema_version = str(authz_model.get("schema_version") or "")
        self.type_definitions = list(authz_model.get("type_definitions") or [])

        if self.id:
            try:
                self.created_at = created_at_from_model_id(self.id)
            except ValueError:
                pass

        conditions = authz_model.get("conditions") or {}
        if conditions:
            self.conditions = {name: dict(value) for name, value in conditions.items()}

    def read_from_json_string(self, json_string: str) -> None:
        """Fill this model from its JSON representation."""
        try:
            parsed = json.loads(json_string)
        except json.JSONDecodeError as exc:
            raise ValueError(f"failed to parse input as json due to {exc}") from exc
        if parsed is None:
            parsed = {}
        if not isinstance(parsed, dict):
            raise ValueError("failed to parse input as json due to: expected an object")
        type_definitions = parsed.get("type_definitions")
        if type_definitions is not None and not isinstance(type_definitions, list):
            raise ValueError("failed to parse input as json due to: type_definitions must be a list")
        conditions = parsed.get("conditions")
        if conditions is not None and not isinstance(conditions, dict):
            raise ValueError("failed to parse input as json due to: conditions must be an object")
        self.set(parsed)

    def read_model_from_string(
        self, input_string: str, format: ModelFormat = ModelFormat.DEFAULT
    ) -> None:
        """Fill this model from ``input_string`` written in ``format``.

        An empty input leaves the model untouched. Only JSON models can be read.
        """
        if input_string == "":
            return
        if format is ModelFormat.JSON:
            self.read_from_json_string(input_string)
            return
        raise InvalidFormatError(
            f"cannot read a model in the {format} format: only json models are supported"
        )

    def get_created_at(self) -> datetime | None:
        """Return the creation time, deriving it from the id when not set."""
        if self.created_at is not None:
            return self.created_at
        if self.id is not None:
            try:
                return created_at_from_model_id(self.id)
            except ValueError:
                return None
        return None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form, leaving out fields that are not set."""
        result: dict[str, Any] = {}
        if self.id is not None:
            result["id"] = self.id
        if self.created_at is not None:
            result["created_at"] = _format_time(self.created_at)
        if self.schema_version is not None:
            result["schema_version"] = self.schema_version
        if self.type_definitions is not None:
            result["type_definitions"] = self.type_definitions
        if self.conditions:
            result["conditions"] = {
                name: self.conditions[name] for name in sorted(self.conditions)
            }
        return result

    def get_as_json_string(self) -> str:
        """Return the model as compact JSON."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    def display_as_json(self, fields: Sequence[str] | None = None) -> AuthzModel:
        """Return a copy holding only the requested fields ("id", "created_at", "model")."""
        selected = list(fields or []) or ["model"]
        result = AuthzModel()
        if contains(selected, "id"):
            result.id = self.id
        if contains(selected, "created_at"):
            result.created_at = self.created_at
        if contains(selected, "model"):
            result.schema_version = self.schema_version
            result.type_definitions = self.type_definitions
            result.conditions = self.conditions
        return result


@dataclass
class ModelInput:
    """A model read from input: its text (or fga.mod path), format and store name."""

    input: str = ""
    format: ModelFormat = ModelFormat.DEFAULT
    store_name: str = ""


def _read_text(file_name: str) -> str:
    try:
        with open(file_name, encoding="utf-8") as handle:
            return handle.read()
    except OSError as exc:
        raise CliError(f"failed to read file {file_name} due to {exc}") from exc


def _store_name_from_path(file_name: str) -> str:
    base = file_name.rstrip("/").rsplit("/", 1)[-1] or "."
    dot = base.rfind(".")
    return base[:dot] if dot >= 0 else base


def read_from_file(
    file_name: str,
    format: ModelFormat = ModelFormat.DEFAULT,
    store_name: str = "",
) -> ModelInput:
    """Read a model file, inferring the format from its name when it is the default."""
    text = _read_text(file_name)
    result = ModelInput(input=text, format=format, store_name=store_name)

    if format is ModelFormat.DEFAULT:
        if file_name.endswith("fga.mod"):
            result.format = ModelFormat.MODULAR
            result.input = file_name
        elif file_name.endswith("json"):
            result.format = ModelFormat.JSON
        else:
            result.format = ModelFormat.FGA
    elif format is ModelFormat.MODULAR:
        result.input = file_name

    if result.store_name == "":
        result.store_name = _store_name_from_path(file_name)
    return result


def read_from_input_file_or_arg(
    file_name: str,
    args: Sequence[str],
    is_optional: bool,
    format: ModelFormat = ModelFormat.DEFAULT,
    store_name: str = "",
) -> ModelInput:
    """Take the model from a file if given, otherwise from the first argument."""
    if file_name:
        return read_from_file(file_name, format, store_name)
    if args and args[0] != "-":
        chosen = ModelFormat.FGA if format is ModelFormat.DEFAULT else format
        return ModelInput(input=args[0], format=chosen, store_name=store_name)
    if not is_optional:
        raise ModelInputMissingError()
    return ModelInput(input="", format=format, store_name=store_name)


def read_from_input_file(
    file_name: str, format: ModelFormat = ModelFormat.DEFAULT
) -> ModelInput:
    """Read a model file, choosing json or fga by extension when the format is the default."""
    text = _read_text(file_name)
    if format is ModelFormat.DEFAULT:
        format = ModelFormat.JSON if file_name.endswith("json") else ModelFormat.FGA
    return ModelInput(input=text, format=format)