import json

import pytest

from i3_installer.state_store import (
    ensure_defaults,
    is_step_completed,
    load_state,
    mark_step_completed,
    save_state,
)


@pytest.mark.parametrize("name", ["state.json", "state.yaml", "state.yml", "state.dat"])
def test_save_then_load(tmp_path, name):
    path = tmp_path / "nested" / name
    state = ensure_defaults({})
    mark_step_completed(state, "10_update_system")

    save_state(str(path), state)
    loaded = load_state(str(path))

    assert is_step_completed(loaded, "10_update_system")
    assert loaded["version"] == state["version"]


def test_unknown_extension_is_json(tmp_path):
    path = tmp_path / "state.dat"
    save_state(str(path), {"a": 1})
    assert json.loads(path.read_text()) == {"a": 1}


def test_missing_file_is_empty(tmp_path):
    assert load_state(str(tmp_path / "nope.json")) == {}


def test_non_mapping_rejected(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_state(str(path))


def test_defaults_do_not_override():
    state = ensure_defaults({"execution": {"completed_steps": ["x"]}, "version": 7})
    assert state["version"] == 7
    assert state["execution"]["completed_steps"] == ["x"]
    assert state["execution"]["errors"] == []


def test_mark_completed_is_idempotent():
    state = {}
    mark_step_completed(state, "a")
    mark_step_completed(state, "a")
    assert state["execution"]["completed_steps"] == ["a"]


def test_yaml_suffix_is_case_insensitive(tmp_path):
    path = tmp_path / "STATE.YML"
    save_state(str(path), {"execution": {"completed_steps": ["10_update_system"]}})
    assert path.read_text().startswith("execution:")


def test_completion_check_tolerates_null_list():
    state = {"execution": {"completed_steps": None}}
    assert not is_step_completed(state, "10_update_system")

    fresh = {"execution": {}}
    mark_step_completed(fresh, "10_update_system")
    assert is_step_completed(fresh, "10_update_system")
