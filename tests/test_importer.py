import pytest

from fgacli.errors import CliError
from fgacli.importer import (
    FailedWrite,
    ImportResponse,
    TupleWriteResult,
    extract_error_message,
    import_tuples,
    process_deletes,
    process_writes,
)
from fgacli.tuples import RelationshipCondition, TupleKey

ANNE = TupleKey(user="user:anne", relation="owner", object="folder:product")
BETH = TupleKey(user="user:beth", relation="viewer", object="folder:product-2021")


class FakeWriter:
    def __init__(self, fail_keys=(), raise_error=None):
        self.fail_keys = set(fail_keys)
        self.raise_error = raise_error
        self.calls = []

    def _results(self, keys):
        return [
            TupleWriteResult(
                tuple_key=key,
                succeeded=key.user not in self.fail_keys,
                error=None if key.user not in self.fail_keys else RuntimeError(
                    "call failed error message: bad tuple  "
                ),
            )
            for key in keys
        ]

    def write(self, writes, deletes, max_per_chunk, max_parallel_requests):
        self.calls.append((list(writes), list(deletes), max_per_chunk, max_parallel_requests))
        if self.raise_error is not None:
            raise self.raise_error
        return self._results(writes), self._results(deletes)


def test_extract_error_message_keeps_suffix_from_marker():
    text = "Write validation error with error code validation_error error message: type not found \n"
    assert extract_error_message(RuntimeError(text)) == "error message: type not found"


def test_extract_error_message_without_marker_returns_whole_text():
    assert extract_error_message(ValueError("something broke ")) == "something broke "


def test_process_writes_splits_results():
    results = [
        TupleWriteResult(tuple_key=ANNE, succeeded=True),
        TupleWriteResult(tuple_key=BETH, succeeded=False, error="x error message: denied"),
    ]
    successful, failed = process_writes(results)
    assert successful == [ANNE]
    assert failed == [FailedWrite(tuple_key=BETH, reason="error message: denied")]


def test_process_deletes_drops_conditions():
    conditioned = TupleKey(
        user="user:anne",
        relation="owner",
        object="folder:product",
        condition=RelationshipCondition(name="inOfficeIP", context={}),
    )
    successful, failed = process_deletes([TupleWriteResult(tuple_key=conditioned, succeeded=True)])
    assert successful == [ANNE]
    assert successful[0].condition is None
    assert failed == []


def test_import_tuples_combines_writes_then_deletes():
    writer = FakeWriter(fail_keys={"user:beth"})
    response = import_tuples(writer, writes=[ANNE, BETH], deletes=[BETH, ANNE])
    assert response.successful == [ANNE, ANNE]
    assert [item.tuple_key for item in response.failed] == [BETH, BETH]
    assert all(item.reason == "error message: bad tuple" for item in response.failed)


def test_import_tuples_passes_defaults_and_limits():
    writer = FakeWriter()
    import_tuples(writer, writes=[ANNE])
    import_tuples(writer, deletes=[BETH], max_tuples_per_write=5, max_parallel_requests=2)
    assert writer.calls[0] == ([ANNE], [], 1, 10)
    assert writer.calls[1] == ([], [BETH], 5, 2)


def test_import_tuples_wraps_client_errors():
    writer = FakeWriter(raise_error=ConnectionError("refused"))
    with pytest.raises(CliError, match="^failed to import tuples due to refused$"):
        import_tuples(writer, writes=[ANNE])


def test_import_response_to_dict():
    response = ImportResponse(
        successful=[ANNE], failed=[FailedWrite(tuple_key=BETH, reason="error message: no")]
    )
    assert response.to_dict() == {
        "successful": [{"user": "user:anne", "relation": "owner", "object": "folder:product"}],
        "failed": [
            {
                "tuple_key": {
                    "user": "user:beth",
                    "relation": "viewer",
                    "object": "folder:product-2021",
                },
                "reason": "error message: no",
            }
        ],
    }