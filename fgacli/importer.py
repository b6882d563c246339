"""Importing relationship tuples in chunks and reporting each tuple's outcome."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from .errors import CliError
from .tuples import TupleKey

MAX_TUPLES_PER_WRITE = 1
"""Default number of tuples sent in a single write request."""

MAX_PARALLEL_REQUESTS = 10
"""Default number of write requests issued in parallel."""

_ERROR_MARKER = "error message:"


@dataclass
class TupleWriteResult:
    """The server's answer for one written or deleted tuple."""

    tuple_key: TupleKey
    succeeded: bool
    error: BaseException | str | None = None


@dataclass
class FailedWrite:
    """A tuple that could not be written or deleted, and why."""

    tuple_key: TupleKey
    reason: str


@dataclass
class ImportResponse:
    """Tuples that were imported and tuples that failed, writes before deletes."""

    successful: list[TupleKey] = field(default_factory=list)
    failed: list[FailedWrite] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "successful": [key.to_dict() for key in self.successful],
            "failed": [
                {"tuple_key": item.tuple_key.to_dict(), "reason": item.reason}
                for item in self.failed
            ],
        }


class TupleWriter(Protocol):
    """A client able to write and delete tuples without a transaction."""

    def write(
        self,
        writes: Sequence[TupleKey],
        deletes: Sequence[TupleKey],
        max_per_chunk: int,
        max_parallel_requests: int,
    ) -> tuple[Sequence[TupleWriteResult], Sequence[TupleWriteResult]]:
        """Return the per-tuple results for the writes and for the deletes."""


def extract_error_message(error: BaseException | str | None) -> str:
    """Keep the part of an error text starting at "error message:", if present."""
    if error is None:
        return ""
    text = str(error)
    start = text.find(_ERROR_MARKER)
    if start == -1:
        return text
    return text[start:].strip()


def process_writes(
    writes: Iterable[TupleWriteResult],
) -> tuple[list[TupleKey], list[FailedWrite]]:
    """Split write results into successful tuples and failures."""
    successful: list[TupleKey] = []
    failed: list[FailedWrite] = []
    for write in writes:
        if write.succeeded:
            successful.append(write.tuple_key)
        else:
            failed.append(
                FailedWrite(tuple_key=write.tuple_key, reason=extract_error_message(write.error))
            )
    return successful, failed


def process_deletes(
    deletes: Iterable[TupleWriteResult],
) -> tuple[list[TupleKey], list[FailedWrite]]:
    """Split delete results into successful tuples and failures, dropping conditions."""
    successful: list[TupleKey] = []
    failed: list[FailedWrite] = []
    for delete in deletes:
        key = TupleKey(
            user=delete.tuple_key.user,
            relation=delete.tuple_key.relation,
            object=delete.tuple_key.object,
        )
        if delete.succeeded:
            successful.append(key)
        else:
            failed.append(FailedWrite(tuple_key=key, reason=extract_error_message(delete.error)))
    return successful, failed


def import_tuples(
    client: TupleWriter,
    writes: Sequence[TupleKey] = (),
    deletes: Sequence[TupleKey] = (),
    max_tuples_per_write: int = MAX_TUPLES_PER_WRITE,
    max_parallel_requests: int = MAX_PARALLEL_REQUESTS,
) -> ImportResponse:
    """Write and delete tuples in chunks, collecting what succeeded and what failed."""
    try:
        write_results, delete_results = client.write(
            list(writes), list(deletes), max_tuples_per_write, max_parallel_requests
        )
    except Exception as exc:  # any client failure aborts the import
        raise CliError(f"failed to import tuples due to {exc}") from exc

    successful_writes, failed_writes = process_writes(write_results)
    successful_deletes, failed_deletes = process_deletes(delete_results)
    return ImportResponse(
        successful=successful_writes + successful_deletes,
        failed=failed_writes + failed_deletes,
    )