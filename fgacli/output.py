"""Rendering results as JSON, YAML or CSV on standard output."""

from __future__ import annotations

import csv
import dataclasses
import io
import json
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, TextIO

import yaml

from .errors import CliError

_RESET = "\x1b[0m"
_KEY_COLOR = "\x1b[34;1m"
_STRING_COLOR = "\x1b[32m"
_NUMBER_COLOR = "\x1b[36m"
_BOOL_COLOR = "\x1b[33m"
_NULL_COLOR = "\x1b[90m"
_INDENT = "  "


def _format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    text = utc.strftime("%Y-%m-%dT%H:%M:%S")
    if utc.microsecond:
        text += f".{utc.microsecond:06d}".rstrip("0")
    return text + "Z"


def to_jsonable(data: Any) -> Any:
    """Convert ``data`` into plain dicts, lists and scalars ready for encoding."""
    if data is None or isinstance(data, (bool, int, float, str)):
        if isinstance(data, Enum):
            return data.value
        return data
    if isinstance(data, Enum):
        return to_jsonable(data.value)
    if isinstance(data, datetime):
        return _format_time(data)
    to_dict = getattr(data, "to_dict", None)
    if callable(to_dict):
        return to_jsonable(to_dict())
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return {
            item.name: to_jsonable(getattr(data, item.name))
            for item in dataclasses.fields(data)
        }
    if isinstance(data, Mapping):
        return {str(key): to_jsonable(value) for key, value in data.items()}
    if isinstance(data, (list, tuple, set, frozenset)):
        return [to_jsonable(item) for item in data]
    if isinstance(data, BaseException):
        return str(data)
    raise TypeError(f"unable to marshal value of type {type(data).__name__}")


def _scalar_color(value: Any) -> str:
    text = json.dumps(value, ensure_ascii=False)
    if value is None:
        color = _NULL_COLOR
    elif isinstance(value, bool):
        color = _BOOL_COLOR
    elif isinstance(value, (int, float)):
        color = _NUMBER_COLOR
    else:
        color = _STRING_COLOR
    return f"{color}{text}{_RESET}"


def _colorize(value: Any, level: int = 0) -> str:
    outer = _INDENT * level
    inner = _INDENT * (level + 1)
    if isinstance(value, dict):
        if not value:
            return "{}"
        members = [
            f"{inner}{_KEY_COLOR}{json.dumps(key, ensure_ascii=False)}{_RESET}: "
            f"{_colorize(item, level + 1)}"
            for key, item in value.items()
        ]
        return "{\n" + ",\n".join(members) + "\n" + outer + "}"
    if isinstance(value, list):
        if not value:
            return "[]"
        members = [f"{inner}{_colorize(item, level + 1)}" for item in value]
        return "[\n" + ",\n".join(members) + "\n" + outer + "]"
    return _scalar_color(value)


def _json_indented(data: Any) -> str:
    return json.dumps(to_jsonable(data), indent=2, ensure_ascii=False)


def _json_colored(data: Any) -> str:
    return _colorize(to_jsonable(data))


def _json_compact(data: Any) -> str:
    return json.dumps(to_jsonable(data), separators=(",", ":"), ensure_ascii=False)


def _yaml_text(data: Any) -> str:
    return yaml.safe_dump(to_jsonable(data), sort_keys=False, allow_unicode=True)


def _csv_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def _csv_text(data: Any) -> str:
    rows = to_jsonable(data)
    if not isinstance(rows, list):
        raise TypeError("csv output needs a list of records")
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    if rows:
        if not all(isinstance(row, dict) for row in rows):
            raise TypeError("csv output needs a list of records")
        header = list(rows[0])
        writer.writerow(header)
        for row in rows:
            writer.writerow([_csv_cell(row.get(name)) for name in header])
    return buffer.getvalue()


@dataclass
class UniPrinter:
    """Prints data in one output format, with or without colour."""

    output_format: str = "json"
    colorful: bool = True
    stream: TextIO | None = None

    def _render(self, data: Any) -> str:
        if self.output_format == "yaml":
            return _yaml_text(data)
        if self.output_format == "csv":
            return _csv_text(data)
        if self.colorful:
            return _json_colored(data)
        return _json_indented(data)

    def display(self, data: Any) -> None:
        """Write ``data`` to the printer's stream, followed by a newline."""
        try:
            text = self._render(data)
        except (TypeError, ValueError, yaml.YAMLError) as exc:
            prefix = (
                "failed to display colorful output"
                if self.colorful
                else "failed to display output"
            )
            raise CliError(f"{prefix}: {exc}") from exc
        stream = self.stream if self.stream is not None else sys.stdout
        stream.write(text + "\n")


def new_uni_printer(output_format: str) -> UniPrinter:
    """Create a printer for "json", "yaml" or "csv"; anything else gives json."""
    colorful = os.environ.get("NO_COLOR", "") == ""
    chosen = output_format if output_format in ("yaml", "csv") else "json"
    return UniPrinter(output_format=chosen, colorful=colorful)


def display(data: Any, stream: TextIO | None = None) -> None:
    """Print ``data`` as JSON, decorated when writing to a terminal."""
    stream = stream if stream is not None else sys.stdout
    try:
        is_terminal = stream.isatty()
    except (AttributeError, ValueError):
        is_terminal = False
    try:
        if is_terminal:
            if os.environ.get("NO_COLOR", "") != "":
                text = _json_indented(data)
            else:
                text = _json_colored(data)
        else:
            text = _json_compact(data)
    except (TypeError, ValueError) as exc:
        raise CliError(f"unable to marshal json with error {exc}") from exc
    stream.write(text + "\n")