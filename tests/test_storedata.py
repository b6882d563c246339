import json

import pytest

from fgacli.authmodel import ModelFormat
from fgacli.conversion import UserTypeFilter
from fgacli.errors import CliError
from fgacli.storedata import ModelTestListUsersAssertion, StoreData, read_store_file
from fgacli.tuples import TupleKey

STORE_YAML = """\
name: Store
model: |
  model
    schema 1.1
  type user
tuples:
  - user: user:anne
    relation: owner
    object: folder:product
tests:
  - name: test-1
    description: first
    check:
      - user: user:anne
        object: folder:product
        context:
          ip: 10.0.0.1
        assertions:
          owner: true
          viewer: false
    list_objects:
      - user: user:anne
        type: folder
        assertions:
          owner:
            - folder:product
    list_users:
      - object: folder:product
        user_filter:
          - type: user
        assertions:
          owner:
            users:
              - user:anne
"""


def write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


def test_read_store_file_parses_everything(tmp_path):
    file_name = write(tmp_path, "store.fga.yaml", STORE_YAML)
    model_format, store = read_store_file(file_name, str(tmp_path))

    assert model_format is ModelFormat.DEFAULT
    assert store.name == "Store"
    assert store.model.startswith("model")
    assert store.tuples == [TupleKey(user="user:anne", relation="owner", object="folder:product")]

    test = store.tests[0]
    assert test.name == "test-1"
    assert test.check[0].assertions == {"owner": True, "viewer": False}
    assert test.check[0].context == {"ip": "10.0.0.1"}
    assert test.list_objects[0].assertions == {"owner": ["folder:product"]}
    assert test.list_users[0].user_filter == [UserTypeFilter(type="user")]
    assert test.list_users[0].assertions["owner"] == ModelTestListUsersAssertion(
        users=["user:anne"], excluded_users=None
    )


def test_unknown_field_is_rejected(tmp_path):
    file_name = write(tmp_path, "store.yaml", "name: x\nbogus: 1\n")
    with pytest.raises(CliError, match="failed to unmarshal file"):
        read_store_file(file_name, str(tmp_path))


def test_unknown_nested_field_is_rejected():
    with pytest.raises(ValueError, match="field colour not found"):
        StoreData.from_dict({"tests": [{"name": "t", "colour": "red"}]})


def test_check_assertion_must_be_bool():
    with pytest.raises(ValueError):
        StoreData.from_dict({"tests": [{"check": [{"assertions": {"owner": "maybe"}}]}]})


def test_missing_file(tmp_path):
    with pytest.raises(CliError, match="failed to read file"):
        read_store_file(str(tmp_path / "missing.yaml"), str(tmp_path))


def test_empty_file(tmp_path):
    file_name = write(tmp_path, "empty.yaml", "")
    with pytest.raises(CliError, match="EOF"):
        read_store_file(file_name, str(tmp_path))


def test_load_tuples_from_files(tmp_path):
    global_tuples = [{"user": "user:anne", "relation": "owner", "object": "folder:product"}]
    test_tuples = [{"user": "user:beth", "relation": "viewer", "object": "folder:product"}]
    write(tmp_path, "global.json", json.dumps(global_tuples))
    write(tmp_path, "local.json", json.dumps(test_tuples))
    store = StoreData.from_dict(
        {"tuple_file": "global.json", "tests": [{"name": "t", "tuple_file": "local.json"}]}
    )
    store.load_tuples(str(tmp_path))
    assert [t.to_dict() for t in store.tuples] == global_tuples
    assert [t.to_dict() for t in store.tests[0].tuples] == test_tuples


def test_load_tuples_reports_all_failures(tmp_path):
    store = StoreData.from_dict(
        {"tuple_file": "nope.json", "tests": [{"name": "t1", "tuple_file": "gone.json"}]}
    )
    with pytest.raises(CliError) as info:
        store.load_tuples(str(tmp_path))
    lines = str(info.value).split("\n")
    assert lines[0] == "failed to process one or more tuple files"
    assert lines[1].startswith("failed to process global tuple nope.json file due to")
    assert lines[2].startswith("failed to process tuple file gone.json for test t1 due to")


def test_load_model_from_json_file(tmp_path):
    model_text = '{"schema_version":"1.1","type_definitions":[{"type":"user"}]}'
    write(tmp_path, "model.json", model_text)
    store = StoreData.from_dict({"name": "s", "model_file": "model.json"})
    assert store.load_model(str(tmp_path)) is ModelFormat.JSON
    assert store.model == model_text


def test_load_model_keeps_inline_model(tmp_path):
    store = StoreData(model="inline", model_file="missing.json")
    assert store.load_model(str(tmp_path)) is ModelFormat.DEFAULT
    assert store.model == "inline"


def test_load_model_missing_file(tmp_path):
    store = StoreData(model_file="missing.fga")
    with pytest.raises(CliError, match="failed to read file"):
        store.load_model(str(tmp_path))