import io

import pytest

from fgacli.output import UniPrinter
from fgacli.readresult import ReadCsvRow, ReadResponse
from fgacli.tuples import RelationshipCondition, TupleKey

RAW_TUPLES = [
    {
        "key": {
            "user": "user:anne",
            "relation": "owner",
            "object": "folder:product",
            "condition": {"name": "inOfficeIP", "context": {"ip_addr": "10.0.0.1"}},
        },
        "timestamp": "2023-01-01T00:00:00Z",
    },
    {
        "key": {"user": "team:fga#member", "relation": "viewer", "object": "folder:product-2021"},
        "timestamp": "2023-01-02T00:00:00Z",
    },
]


def test_from_tuples_keeps_keys_in_order():
    response = ReadResponse.from_tuples(RAW_TUPLES)
    assert [key.user for key in response.simple] == ["user:anne", "team:fga#member"]
    assert response.simple[0].condition == RelationshipCondition(
        name="inOfficeIP", context={"ip_addr": "10.0.0.1"}
    )


def test_to_dict_keeps_timestamps_and_keys():
    result = ReadResponse.from_tuples(RAW_TUPLES).to_dict()
    assert result["continuation_token"] == ""
    assert [item["timestamp"] for item in result["tuples"]] == [
        "2023-01-01T00:00:00Z",
        "2023-01-02T00:00:00Z",
    ]
    assert result["tuples"][1]["key"] == RAW_TUPLES[1]["key"]


def test_to_csv_rows_splits_user_and_object():
    rows = ReadResponse.from_tuples(RAW_TUPLES).to_csv_rows()
    assert rows[0] == ReadCsvRow(
        user_type="user",
        user_id="anne",
        relation="owner",
        object_type="folder",
        object_id="product",
        condition_name="inOfficeIP",
        condition_context='{"ip_addr":"10.0.0.1"}',
    )
    assert rows[1].user_id == "fga#member"
    assert rows[1].user_relation == ""
    assert rows[1].condition_name == ""


def test_to_csv_rows_rejects_reference_without_type():
    response = ReadResponse(simple=[TupleKey(user="anne", relation="owner", object="doc:1")])
    with pytest.raises(ValueError):
        response.to_csv_rows()


def test_csv_rows_render_with_file_header():
    stream = io.StringIO()
    printer = UniPrinter(output_format="csv", colorful=False, stream=stream)
    printer.display(ReadResponse.from_tuples(RAW_TUPLES).to_csv_rows())
    lines = stream.getvalue().splitlines()
    assert lines[0] == (
        "user_type,user_id,user_relation,relation,object_type,object_id,"
        "condition_name,condition_context"
    )
    assert len(lines) == 3