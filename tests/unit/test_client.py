"""Unit tests for the request dispatcher."""

import json

import pytest
import requests

from databricks_admin_core.client import SCIM_CONTENT_TYPE, DatabricksClient
from databricks_admin_core.config import WorkspaceConfig
from databricks_admin_core.errors import ApiError, TransportError


def test_get_sends_query_parameters(client, session, make_response):
    session.request.return_value = make_response(200, {"clusters": []})

    result = client.request("GET", "clusters/list", {"can_use_client": "JOBS", "skip": None, "all": True})

    assert result == {"clusters": []}
    method, url = session.request.call_args.args
    kwargs = session.request.call_args.kwargs
    assert method == "GET"
    assert url == f"{client.config.host}/api/2.0/clusters/list"
    assert kwargs["params"] == {"can_use_client": "JOBS", "all": "true"}
    assert kwargs["data"] is None


def test_post_sends_json_body(client, session, make_response):
    session.request.return_value = make_response(200, {"cluster_id": "c1"})

    client.request("POST", "clusters/create", {"cluster_name": "etl", "num_workers": 0})

    kwargs = session.request.call_args.kwargs
    assert json.loads(kwargs["data"]) == {"cluster_name": "etl", "num_workers": 0}
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert kwargs["params"] is None


def test_headers_carry_token_and_user_agent(client, session, make_response):
    session.request.return_value = make_response(200, {})

    client.get("clusters/list")

    headers = session.request.call_args.kwargs["headers"]
    assert headers["Authorization"] == f"Bearer {client.config.token}"
    assert headers["User-Agent"].startswith("databricks-admin-core/")


def test_scim_content_type_override(client, session, make_response):
    session.request.return_value = make_response(201, {"id": "u1"})

    client.post("preview/scim/v2/Users", {"userName": "a@b.com"}, content_type=SCIM_CONTENT_TYPE)

    assert session.request.call_args.kwargs["headers"]["Content-Type"] == "application/scim+json"


def test_api_version_per_call(client, session, make_response):
    session.request.return_value = make_response(200, {})

    client.get("jobs/list", api_version="2.1")

    _, url = session.request.call_args.args
    assert url == f"{client.config.host}/api/2.1/jobs/list"


def test_full_api_path_used_verbatim(client):
    url = client.build_url("/api/2.1/unity-catalog/catalogs")
    assert url == f"{client.config.host}/api/2.1/unity-catalog/catalogs"


def test_exactly_one_round_trip(client, session, make_response):
    session.request.return_value = make_response(500, {"message": "boom"})

    with pytest.raises(ApiError):
        client.get("clusters/list")

    assert session.request.call_count == 1


def test_403_becomes_api_error(client, session, make_response):
    session.request.return_value = make_response(403, {"message": "forbidden"}, reason="Forbidden")

    with pytest.raises(ApiError) as exc_info:
        client.get("clusters/list")

    error = exc_info.value
    assert error.http_status == 403
    assert error.message == "forbidden"
    assert error.endpoint.endswith("/api/2.0/clusters/list")
    assert error.to_dict()["kind"] == "ApiError"


@pytest.mark.parametrize("status_code", [301, 302, 304])
def test_redirect_status_is_api_error(client, session, make_response, status_code):
    session.request.return_value = make_response(status_code, reason="Not Modified")

    with pytest.raises(ApiError) as exc_info:
        client.get("clusters/list")

    assert exc_info.value.http_status == status_code


def test_api_error_keeps_error_code(client, session, make_response):
    body = {"error_code": "RESOURCE_DOES_NOT_EXIST", "message": "Cluster c1 does not exist"}
    session.request.return_value = make_response(400, body)

    with pytest.raises(ApiError) as exc_info:
        client.get("clusters/get", {"cluster_id": "c1"})

    assert exc_info.value.error_code == "RESOURCE_DOES_NOT_EXIST"
    assert exc_info.value.body == body


def test_scim_error_detail_used_as_message(client, session, make_response):
    session.request.return_value = make_response(409, {"detail": "User already exists", "status": "409"})

    with pytest.raises(ApiError, match="User already exists"):
        client.post("preview/scim/v2/Users", {"userName": "a@b.com"})


def test_non_json_error_body_passed_through(client, session, make_response):
    session.request.return_value = make_response(502, text="<html>Bad Gateway</html>", reason="Bad Gateway")

    with pytest.raises(ApiError) as exc_info:
        client.get("clusters/list")

    assert exc_info.value.message == "<html>Bad Gateway</html>"


def test_connection_error_becomes_transport_error(client, session):
    session.request.side_effect = requests.ConnectionError("Name or service not known")

    with pytest.raises(TransportError) as exc_info:
        client.get("clusters/list")

    assert isinstance(exc_info.value.__cause__, requests.ConnectionError)
    assert exc_info.value.http_status is None


def test_timeout_becomes_transport_error(client, session):
    session.request.side_effect = requests.Timeout("read timed out")

    with pytest.raises(TransportError):
        client.get("clusters/list")


def test_204_returns_empty_dict(client, session, make_response):
    session.request.return_value = make_response(204)
    assert client.delete("unity-catalog/catalogs/main", api_version="2.1") == {}


def test_timeout_and_ssl_from_config(session, make_response):
    config = WorkspaceConfig(host="adb-1.azuredatabricks.net", token="t", timeout=5, verify_ssl=False)
    session.request.return_value = make_response(200, {})

    DatabricksClient(config, session=session).get("clusters/list")

    kwargs = session.request.call_args.kwargs
    assert kwargs["timeout"] == 5
    assert kwargs["verify"] is False


def test_invalid_method(client, session):
    with pytest.raises(ValueError):
        client.request("HEAD", "clusters/list")
    session.request.assert_not_called()


def test_context_manager_closes_session(config, session):
    with DatabricksClient(config, session=session):
        pass
    session.close.assert_called_once()
