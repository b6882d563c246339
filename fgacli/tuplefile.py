"""Reading relationship tuples from JSON, YAML and CSV files."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass

import yaml

from .errors import CliError, missing_required_csv_header_error
from .tuples import RelationshipCondition, TupleKey, parse_query_context

_VALID_HEADERS = (
    "user_type",
    "user_id",
    "user_relation",
    "relation",
    "object_type",
    "object_id",
    "condition_name",
    "condition_context",
)


class TupleFileError(CliError):
    """A tuple file could not be read or parsed."""

    base_message = "failed to parse input tuples"


@dataclass
class _CsvColumns:
    user_type: int = -1
    user_id: int = -1
    user_relation: int = -1
    relation: int = -1
    object_type: int = -1
    object_id: int = -1
    condition_name: int = -1
    condition_context: int = -1

    def set_header_index(self, header_name: str, index: int) -> None:
        if header_name not in _VALID_HEADERS:
            raise TupleFileError(
                f'invalid header "{header_name}", valid headers are {",".join(_VALID_HEADERS)}'
            )
        setattr(self, header_name, index)

    def validate(self) -> None:
        for required in ("user_type", "user_id", "relation", "object_type", "object_id"):
            if getattr(self, required) == -1:
                raise missing_required_csv_header_error(required)
        if self.condition_context != -1 and self.condition_name == -1:
            raise TupleFileError(
                'missing "condition_name" header which is required when '
                '"condition_context" is present'
            )


def _read_headers(headers: list[str]) -> _CsvColumns:
    columns = _CsvColumns()
    for index, header in enumerate(headers):
        columns.set_header_index(header.strip(), index)
    columns.validate()
    return columns


def _condition_for_row(
    columns: _CsvColumns, row: list[str], index: int
) -> RelationshipCondition | None:
    if columns.condition_name == -1 or row[columns.condition_name] == "":
        return None
    context: dict = {}
    if columns.condition_context != -1:
        try:
            context = parse_query_context(row[columns.condition_context])
        except ValueError as exc:
            raise TupleFileError(
                f"failed to read condition context on line {index}: {exc}"
            ) from exc
    return RelationshipCondition(name=row[columns.condition_name], context=context)


def _records(text: str):
    """Yield (line number, record) pairs, skipping empty lines."""
    reader = csv.reader(io.StringIO(text))
    while True:
        start_line = reader.line_num + 1
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            raise TupleFileError(f"record on line {start_line}: {exc}") from exc
        if row:
            yield start_line, row


def parse_tuples_from_csv(data: bytes | str) -> list[TupleKey]:
    """Parse tuples from CSV content with a header row."""
    text = data.decode("utf-8") if isinstance(data, bytes) else data
    records = _records(text)

    try:
        _, headers = next(records)
    except StopIteration:
        raise TupleFileError("failed to read csv headers: EOF") from None
    except TupleFileError as exc:
        raise TupleFileError(f"failed to read csv headers: {exc}") from exc

    columns = _read_headers(headers)
    field_count = len(headers)
    tuples: list[TupleKey] = []

    index = 0
    while True:
        try:
            line, row = next(records)
        except StopIteration:
            break
        except TupleFileError as exc:
            raise TupleFileError(f"failed to read tuple from csv file: {exc}") from exc

        if len(row) != field_count:
            raise TupleFileError(
                f"failed to read tuple from csv file: record on line {line}: "
                "wrong number of fields"
            )

        user = row[columns.user_type] + ":" + row[columns.user_id]
        if columns.user_relation != -1 and row[columns.user_relation] != "":
            user += "#" + row[columns.user_relation]

        tuples.append(
            TupleKey(
                user=user,
                relation=row[columns.relation],
                object=row[columns.object_type] + ":" + row[columns.object_id],
                condition=_condition_for_row(columns, row, index),
            )
        )
        index += 1

    return tuples


def _extension(file_name: str) -> str:
    base = file_name.rsplit("/", 1)[-1]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def _parse_structured(data: bytes) -> list[TupleKey]:
    try:
        loaded = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise TupleFileError(str(exc)) from exc
    if loaded is None:
        return []
    if not isinstance(loaded, list):
        raise TupleFileError("expected a list of tuples")
    try:
        return [TupleKey.from_dict(item) for item in loaded]
    except ValueError as exc:
        raise TupleFileError(str(exc)) from exc


def read_tuple_file(file_name: str) -> list[TupleKey]:
    """Read tuples from a .json, .yaml, .yml or .csv file."""
    try:
        with open(file_name, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise TupleFileError(f'failed to read file "{file_name}": {exc}') from exc

    extension = _extension(file_name)
    try:
        if extension in (".json", ".yaml", ".yml"):
            return _parse_structured(data)
        if extension == ".csv":
            return parse_tuples_from_csv(data)
        raise TupleFileError(f'unsupported file format "{extension}"')
    except CliError as exc:
        raise TupleFileError(f"failed to parse input tuples: {exc}") from exc