# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import copy
import json
import pickle

import pytest

from bubbles.errors import DecodeError, FieldNotFoundError
from bubbles.response import RawResponse, ResponseList, ResponseObject, decode_json, status_of


def test_top_level_keys_match_decoded_values():
    body = json.dumps(
        {
            "name": "Sinking Moon API",
            "versionName": "2.0.0",
            "count": 3,
            "ratio": 0.5,
            "active": False,
            "missing": None,
            "tags": ["a", 1],
            "owner": {"name": "Scott", "roles": [{"id": 1}]},
            "keys": ["k1"],
            "get": 1,
            "to_dict": "x",
        }
    )
    original = json.loads(body)

    result = decode_json(body, 200)

    for key, value in original.items():
        assert getattr(result, key) == value
    assert ResponseObject.to_dict(result) == original
    assert ResponseObject.get(result, "missing", "default") is None
    assert result.owner.roles[0].id == 1
    assert result.owner.to_dict() == {"name": "Scott", "roles": [{"id": 1}]}


def test_missing_field_raises_attribute_error():
    result = ResponseObject({"name": "x"})
    with pytest.raises(FieldNotFoundError):
        result.zip
    with pytest.raises(AttributeError):
        result.zip
    assert result.get("zip", "none") == "none"
    assert not hasattr(result, "zip")


def test_item_access_and_container_protocol():
    result = ResponseObject({"user-id": 7, "name": "x"})
    assert result["user-id"] == 7
    assert "name" in result
    assert sorted(result) == ["name", "user-id"]
    assert len(result) == 2
    assert "name" in dir(result)
    with pytest.raises(AttributeError):
        result.name = "y"


def test_arrays_become_response_lists():
    result = decode_json('[{"name": "Joe Blow"}, 3]', 206)
    assert isinstance(result, ResponseList)
    assert result[0].name == "Joe Blow"
    assert result[1] == 3
    assert result.to_list() == [{"name": "Joe Blow"}, 3]
    assert status_of(result) == 206


def test_empty_and_scalar_bodies():
    empty = decode_json("", 204)
    assert len(empty) == 0
    assert status_of(empty) == 204
    assert decode_json("42", 200) == 42
    assert status_of(42, default=-1) == -1


def test_invalid_json_raises_decode_error():
    with pytest.raises(DecodeError) as excinfo:
        decode_json("{not json", 500)
    assert excinfo.value.status_code == 500
    assert excinfo.value.body == "{not json"


def test_raw_response_status():
    assert status_of(RawResponse(404, "nope")) == 404


def test_results_survive_copy_and_pickle():
    result = decode_json('{"name": "Joe Blow", "grades": [{"term": 1}], "get": 2}', 201)

    for clone in (copy.copy(result), copy.deepcopy(result), pickle.loads(pickle.dumps(result))):
        assert clone == result
        assert clone.grades[0].term == 1
        assert clone.get == 2
        assert status_of(clone) == 201
