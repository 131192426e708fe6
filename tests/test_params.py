import json

import pytest
import yaml
from pydantic import ValidationError

from vocabfsrs.constants import DEFAULT_PARAMETERS
from vocabfsrs.exceptions import ParameterFileError
from vocabfsrs.models import SchedulerParams
from vocabfsrs.params import (
    ParameterStore,
    load_params_file,
    params_from_document,
    resolve_params,
)

CUSTOM_WEIGHTS = [round(0.1 + i * 0.05, 4) for i in range(21)]


# --- Loading ---


def test_load_yaml_params_file(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "w": CUSTOM_WEIGHTS,
                "requestRetention": 0.85,
                "maximumInterval": 3650,
                "enableFuzz": False,
            }
        )
    )

    params = load_params_file(path)

    assert params.weights == tuple(CUSTOM_WEIGHTS)
    assert params.request_retention == 0.85
    assert params.maximum_interval == 3650
    assert params.enable_fuzz is False


def test_load_json_params_file_with_snake_case_keys(tmp_path):
    path = tmp_path / "params.json"
    path.write_text(json.dumps({"request_retention": 0.95}))

    params = load_params_file(path)

    assert params.request_retention == 0.95
    assert params.weights == DEFAULT_PARAMETERS


def test_stored_document_bookkeeping_is_ignored():
    document = {
        "_id": "abc",
        "userId": "u1",
        "wordbookId": "wb1",
        "w": list(DEFAULT_PARAMETERS),
        "requestRetention": 0.9,
        "maximumInterval": 36500,
        "optimized": True,
        "createdAt": "2024-01-01T00:00:00Z",
    }
    assert params_from_document(document) == SchedulerParams(enable_fuzz=True)


def test_params_from_document_validates_values():
    with pytest.raises(ValidationError):
        params_from_document({"w": [1.0, 2.0]})


def test_missing_file(tmp_path):
    with pytest.raises(ParameterFileError, match="not found"):
        load_params_file(tmp_path / "missing.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("w: [1, 2\n")
    with pytest.raises(ParameterFileError, match="Invalid YAML syntax") as exc_info:
        load_params_file(path)
    assert isinstance(exc_info.value.original_exception, yaml.YAMLError)


def test_top_level_must_be_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 0.1\n- 0.2\n")
    with pytest.raises(ParameterFileError, match="must be a mapping"):
        load_params_file(path)


def test_invalid_values_are_reported_with_field(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text(yaml.safe_dump({"requestRetention": 1.5}))
    with pytest.raises(ParameterFileError, match="requestRetention") as exc_info:
        load_params_file(path)
    assert isinstance(exc_info.value.original_exception, ValidationError)


# --- Resolution ---


@pytest.fixture
def store():
    store = ParameterStore()
    store.set("alice", SchedulerParams(request_retention=0.8))
    store.set("alice", SchedulerParams(request_retention=0.95), deck_id="ielts")
    return store


def test_resolve_prefers_deck_specific_params(store):
    assert resolve_params(store, "alice", "ielts").request_retention == 0.95


def test_resolve_falls_back_to_user_global_params(store):
    assert resolve_params(store, "alice", "toefl").request_retention == 0.8
    assert store.resolve("alice").request_retention == 0.8


def test_resolve_falls_back_to_default(store):
    assert resolve_params(store, "bob", "ielts") == SchedulerParams()


def test_store_custom_default_and_removal(store):
    custom = SchedulerParams(maximum_interval=100)
    other = ParameterStore(default=custom)
    assert other.resolve("anyone") is custom

    assert len(store) == 2
    store.remove("alice", "ielts")
    assert store.get("alice", "ielts") is None
    assert resolve_params(store, "alice", "ielts").request_retention == 0.8
    store.remove("nobody")
    assert len(store) == 1
