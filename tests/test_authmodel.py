import json
from datetime import datetime, timezone

import pytest

from fgacli.authmodel import (
    AuthzModel,
    ModelFormat,
    ModelInput,
    created_at_from_model_id,
    read_from_file,
    read_from_input_file,
    read_from_input_file_or_arg,
)
from fgacli.errors import CliError, InvalidFormatError, ModelInputMissingError

MODEL_ID = "01GVKXGDCV2SMG6TRE9NMBQ2VG"
TYPE_NAME = "user"
MODEL_CREATED_AT = datetime(2023, 3, 16, 0, 35, 51, tzinfo=timezone.utc)


def test_reading_invalid_model_from_invalid_json():
    model = AuthzModel()
    with pytest.raises(ValueError):
        model.read_from_json_string("{bad_json")


def test_reading_valid_model_from_json():
    model = AuthzModel()
    model.read_from_json_string(
        '{"id":"01GVKXGDCV2SMG6TRE9NMBQ2VG","schema_version":"1.1","type_definitions":[{"type":"user"}]}'
    )
    assert model.schema_version == "1.1"
    assert model.id == MODEL_ID
    assert model.created_at == MODEL_CREATED_AT
    assert model.type_definitions[0]["type"] == TYPE_NAME


def test_display_as_json_with_fields():
    model = AuthzModel(
        schema_version="1.1", id=MODEL_ID, type_definitions=[{"type": TYPE_NAME}]
    )

    first = model.display_as_json(["model", "id", "created_at"])
    assert first.schema_version == "1.1"
    assert first.id == MODEL_ID
    assert first.get_created_at() == MODEL_CREATED_AT
    assert first.type_definitions[0]["type"] == TYPE_NAME

    second = model.display_as_json(["id", "created_at"])
    assert second.schema_version is None
    assert second.id == MODEL_ID
    assert second.get_created_at() == MODEL_CREATED_AT
    assert second.type_definitions is None


def test_display_as_json_defaults_to_model_only():
    model = AuthzModel(schema_version="1.1", id=MODEL_ID, type_definitions=[])
    shown = model.display_as_json([])
    assert shown.id is None
    assert shown.schema_version == "1.1"


def test_created_at_from_model_id():
    assert created_at_from_model_id(MODEL_ID) == MODEL_CREATED_AT
    assert created_at_from_model_id(MODEL_ID.lower()) == MODEL_CREATED_AT


@pytest.mark.parametrize("bad_id", ["", "short", MODEL_ID + "X", "01GVKXGDCV2SMG6TRE9NMBQ2V!", "8" * 26])
def test_created_at_from_invalid_model_id(bad_id):
    with pytest.raises(ValueError):
        created_at_from_model_id(bad_id)


def test_get_created_at_with_invalid_id_is_none():
    assert AuthzModel(id="nope").get_created_at() is None


def test_model_format_parse():
    assert ModelFormat.parse("json") is ModelFormat.JSON
    assert ModelFormat.parse("fga") is ModelFormat.FGA
    assert ModelFormat.parse("modular") is ModelFormat.MODULAR
    assert str(ModelFormat.FGA) == "fga"


@pytest.mark.parametrize("value", ["default", "yaml", ""])
def test_model_format_parse_rejects(value):
    with pytest.raises(InvalidFormatError, match='must be one of "json" or "fga"'):
        ModelFormat.parse(value)


def test_to_dict_and_json_string():
    model = AuthzModel()
    model.set(
        {
            "id": MODEL_ID,
            "schema_version": "1.1",
            "type_definitions": [{"type": "user"}],
            "conditions": {"inOffice": {"name": "inOffice", "expression": "true"}},
        }
    )
    expected = {
        "id": MODEL_ID,
        "created_at": "2023-03-16T00:35:51Z",
        "schema_version": "1.1",
        "type_definitions": [{"type": "user"}],
        "conditions": {"inOffice": {"name": "inOffice", "expression": "true"}},
    }
    assert model.to_dict() == expected
    assert json.loads(model.get_as_json_string()) == expected


def test_json_round_trip():
    original = AuthzModel()
    original.read_from_json_string(
        '{"id":"01GVKXGDCV2SMG6TRE9NMBQ2VG","schema_version":"1.1","type_definitions":[{"type":"user"}]}'
    )
    copy = AuthzModel()
    copy.read_from_json_string(original.get_as_json_string())
    assert copy == original


def test_empty_model_to_dict():
    assert AuthzModel().to_dict() == {}


def test_read_model_from_string_empty_is_noop():
    model = AuthzModel()
    model.read_model_from_string("", ModelFormat.JSON)
    assert model == AuthzModel()


def test_read_model_from_string_json():
    model = AuthzModel()
    model.read_model_from_string('{"schema_version":"1.1","type_definitions":[]}', ModelFormat.JSON)
    assert model.schema_version == "1.1"
    assert model.id == ""
    assert model.created_at is None


def test_read_model_from_string_dsl_is_rejected():
    with pytest.raises(InvalidFormatError):
        AuthzModel().read_model_from_string("model\n  schema 1.1\n", ModelFormat.FGA)


def test_read_from_file_json(tmp_path):
    path = tmp_path / "store.json"
    path.write_text('{"schema_version":"1.1"}', encoding="utf-8")
    result = read_from_file(str(path))
    assert result == ModelInput(
        input='{"schema_version":"1.1"}', format=ModelFormat.JSON, store_name="store"
    )


def test_read_from_file_fga_keeps_store_name(tmp_path):
    path = tmp_path / "model.fga"
    path.write_text("model\n", encoding="utf-8")
    result = read_from_file(str(path), ModelFormat.DEFAULT, "mine")
    assert result.format is ModelFormat.FGA
    assert result.input == "model\n"
    assert result.store_name == "mine"


def test_read_from_file_modular(tmp_path):
    path = tmp_path / "fga.mod"
    path.write_text("schema: '1.2'\n", encoding="utf-8")
    result = read_from_file(str(path))
    assert result.format is ModelFormat.MODULAR
    assert result.input == str(path)
    assert result.store_name == "fga"


def test_read_from_file_explicit_modular(tmp_path):
    path = tmp_path / "other.txt"
    path.write_text("x", encoding="utf-8")
    result = read_from_file(str(path), ModelFormat.MODULAR)
    assert result.input == str(path)
    assert result.format is ModelFormat.MODULAR


def test_read_from_file_missing(tmp_path):
    with pytest.raises(CliError, match="failed to read file"):
        read_from_file(str(tmp_path / "absent.fga"))


def test_read_from_input_file_or_arg_uses_arg():
    result = read_from_input_file_or_arg("", ["model text"], False)
    assert result.input == "model text"
    assert result.format is ModelFormat.FGA


def test_read_from_input_file_or_arg_keeps_explicit_format():
    result = read_from_input_file_or_arg("", ["{}"], False, ModelFormat.JSON)
    assert result.format is ModelFormat.JSON


def test_read_from_input_file_or_arg_missing():
    with pytest.raises(ModelInputMissingError, match="model input not provided"):
        read_from_input_file_or_arg("", ["-"], False)


def test_read_from_input_file_or_arg_optional():
    result = read_from_input_file_or_arg("", [], True)
    assert result.input == ""
    assert result.format is ModelFormat.DEFAULT


def test_read_from_input_file_or_arg_prefers_file(tmp_path):
    path = tmp_path / "m.json"
    path.write_text("{}", encoding="utf-8")
    result = read_from_input_file_or_arg(str(path), ["ignored"], False)
    assert result.input == "{}"
    assert result.format is ModelFormat.JSON


def test_read_from_input_file(tmp_path):
    json_path = tmp_path / "a.json"
    json_path.write_text("{}", encoding="utf-8")
    fga_path = tmp_path / "a.fga"
    fga_path.write_text("model", encoding="utf-8")
    assert read_from_input_file(str(json_path)).format is ModelFormat.JSON
    fga_result = read_from_input_file(str(fga_path))
    assert fga_result.format is ModelFormat.FGA
    assert fga_result.input == "model"