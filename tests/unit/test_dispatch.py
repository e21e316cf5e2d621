# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import json

import pytest

from bubbles import (
    ArityError,
    CallerError,
    Configuration,
    ConfigurationError,
    DecodeError,
    Endpoint,
    RawResponse,
    Resources,
    TransportError,
    status_of,
)
from bubbles.dispatch import HeaderPolicy, Operation, build_operations
from bubbles.errors import ErrorCategory
from bubbles.http import HttpResponse, StubHttpClient, json_response

BASE = "http://127.0.0.1:1234"
LOCAL = {"scheme": "http", "host": "127.0.0.1", "port": 1234}


def _binding(endpoints, client, **config_fields):
    config = Configuration(endpoints=endpoints, local_environment=LOCAL, **config_fields)
    return Resources(config, http_client=client).local_environment


def test_parameter_order_follows_endpoint_flags():
    endpoint = Endpoint(
        method="POST",
        location="schools/{school_id}/students/{student_id}/login",
        authenticated=True,
        api_key_required=True,
        encode_authorization=("username", "password"),
    )
    operation = Operation(endpoint, base_url=BASE, http_client=StubHttpClient())

    assert operation.name == "schools_school_id_students_student_id_login"
    assert operation.parameters == ("auth_token", "api_key", "credentials", "school_id", "student_id")
    assert str(operation.__signature__) == "(auth_token, api_key, credentials, school_id, student_id, *, query=None)"


def test_global_api_key_removes_parameter_and_is_sent():
    client = StubHttpClient({f"{BASE}/reports": json_response([])})
    binding = _binding(
        [{"method": "get", "location": "reports", "api_key_required": True}],
        client,
        api_key="global-key",
    )

    assert binding.reports.parameters == ()
    binding.reports()
    assert client.requests[0].headers["X-API-Key"] == "global-key"


def test_authenticated_call_without_token_never_reaches_transport():
    client = StubHttpClient()
    binding = _binding([{"method": "get", "location": "students", "authenticated": True}], client)

    with pytest.raises(CallerError):
        binding.students()
    with pytest.raises(CallerError):
        binding.students("")
    assert client.requests == []


def test_too_many_arguments_raise_arity_error():
    client = StubHttpClient()
    binding = _binding([{"method": "get", "location": "version"}], client)

    with pytest.raises(ArityError, match="version"):
        binding.version("extra")
    with pytest.raises(ArityError):
        binding.version(unknown=1)
    assert client.requests == []


def test_missing_credential_field_raises_before_request():
    client = StubHttpClient()
    binding = _binding(
        [{"method": "post", "location": "login", "encode_authorization": ["username", "password"]}],
        client,
    )

    with pytest.raises(CallerError, match="password"):
        binding.login({"username": "scottj"})
    with pytest.raises(CallerError):
        binding.login("scottj:secret")
    assert client.requests == []


def test_credentials_body_contains_only_declared_fields():
    client = StubHttpClient({f"{BASE}/login": json_response({"ok": True})})
    binding = _binding(
        [{"method": "post", "location": "login", "encode_authorization": ["username", "password"]}],
        client,
    )

    binding.login(credentials={"username": "scottj", "password": "pw", "remember": True})

    assert json.loads(client.requests[0].body) == {"username": "scottj", "password": "pw"}


def test_path_placeholders_are_substituted_and_quoted():
    client = StubHttpClient({f"{BASE}/students/a%2Fb/grades/7": json_response({"grade": "A"})})
    binding = _binding([{"method": "get", "location": "students/{student_id}/grades/{term}"}], client)

    result = binding.students_student_id_grades_term("a/b", term=7)

    assert result.grade == "A"
    with pytest.raises(CallerError):
        binding.students_student_id_grades_term(None, 7)


def test_query_and_body_keywords():
    client = StubHttpClient()
    client.add(f"{BASE}/students?zip=90263&tag=a&tag=b&active=true", json_response({"students": []}))
    client.add(f"{BASE}/students", json_response({"id": 3}, status_code=201), method="PUT")
    binding = _binding(
        [
            {"method": "get", "location": "students"},
            {"method": "put", "location": "students", "name": "update_students"},
        ],
        client,
    )

    assert binding.students(query={"zip": "90263", "tag": ["a", "b"], "active": True, "skip": None}).students == []
    created = binding.update_students(body={"name": "Joe Blow"})

    assert status_of(created) == 201
    assert json.loads(client.requests[1].body) == {"name": "Joe Blow"}
    with pytest.raises(ArityError):
        binding.students(body={"name": "x"})
    with pytest.raises(CallerError):
        binding.update_students(body="raw")


def test_non_json_endpoint_returns_status_and_body():
    client = StubHttpClient({f"{BASE}/ping": HttpResponse(status_code=503, content=b"down")})
    binding = _binding([{"method": "get", "location": "ping", "expect_json": False}], client)

    result = binding.ping()

    assert result == RawResponse(503, "down")
    assert "Accept" not in client.requests[0].headers


def test_error_status_is_returned_as_data():
    client = StubHttpClient({f"{BASE}/version": json_response({"error": "not found"}, status_code=404)})
    binding = _binding([{"method": "get", "location": "version"}], client)

    result = binding.version()

    assert result.error == "not found"
    assert status_of(result) == 404


def test_array_response_wraps_each_element():
    client = StubHttpClient({f"{BASE}/students": json_response([{"name": "Joe Blow"}, {"name": "Jane Roe"}])})
    binding = _binding([{"method": "get", "location": "students"}], client)

    result = binding.students()

    assert [s.name for s in result] == ["Joe Blow", "Jane Roe"]
    assert status_of(result) == 200


def test_invalid_json_raises_decode_error():
    client = StubHttpClient({f"{BASE}/version": HttpResponse(status_code=502, content=b"<html>bad gateway</html>")})
    binding = _binding([{"method": "get", "location": "version"}], client)

    with pytest.raises(DecodeError) as excinfo:
        binding.version()
    assert excinfo.value.status_code == 502
    assert "bad gateway" in excinfo.value.body


def test_transport_errors_propagate():
    client = StubHttpClient()
    binding = _binding([{"method": "get", "location": "version"}], client)

    with pytest.raises(TransportError):
        binding.version()
    assert len(client.requests) == 1


def test_custom_header_policy():
    client = StubHttpClient({f"{BASE}/me": json_response({"id": 1})})
    binding = _binding(
        [{"method": "get", "location": "me", "authenticated": True}],
        client,
        auth_header="X-Auth-Token",
        auth_scheme="",
    )

    binding.me("abc")

    assert client.requests[0].headers["X-Auth-Token"] == "abc"
    assert HeaderPolicy().auth_value("abc") == "Bearer abc"


def test_reserved_placeholder_names_are_rejected():
    with pytest.raises(ConfigurationError):
        build_operations(
            [Endpoint(method="GET", location="keys/{api_key}")],
            base_url=BASE,
            http_client=StubHttpClient(),
        )


def test_collection_and_item_locations_get_distinct_names():
    client = StubHttpClient()
    client.add(f"{BASE}/students", json_response([]))
    client.add(f"{BASE}/students/42", json_response({"id": 42}))
    binding = _binding(
        [{"method": "get", "location": "students"}, {"method": "get", "location": "students/{id}"}],
        client,
    )

    assert set(binding.operations) == {"students", "students_id"}
    assert binding.students() == []
    assert binding.students_id(42).id == 42


def test_query_extends_location_with_existing_query_string():
    client = StubHttpClient({f"{BASE}/search?kind=all&q=joe": json_response({"hits": 1})})
    binding = _binding([{"method": "get", "location": "search?kind=all", "name": "search"}], client)

    assert binding.search(query={"q": "joe"}).hits == 1
    assert client.requests[0].url == f"{BASE}/search?kind=all&q=joe"


def test_truncated_body_raises_transport_error():
    client = StubHttpClient({f"{BASE}/export": HttpResponse(status_code=200, content=b'{"rows": [', truncated=True)})
    binding = _binding([{"method": "get", "location": "export"}], client)

    with pytest.raises(TransportError) as excinfo:
        binding.export()
    assert excinfo.value.category is ErrorCategory.BODY_TOO_LARGE
    assert excinfo.value.url == f"{BASE}/export"
