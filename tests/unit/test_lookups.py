"""Unit tests for advisory lookups."""

import logging

from databricks_admin_core.lookups import list_cluster_ids, list_job_ids, list_sql_warehouse_ids, validate_choice


def test_list_cluster_ids(client, session, make_response):
    session.request.return_value = make_response(200, {"clusters": [{"cluster_id": "c1"}, {"cluster_id": "c2"}]})
    assert list_cluster_ids(client=client) == ["c1", "c2"]


def test_list_cluster_ids_empty_workspace(client, session, make_response):
    session.request.return_value = make_response(200, {})
    assert list_cluster_ids(client=client) == []


def test_list_job_ids_single_request(client, session, make_response):
    session.request.return_value = make_response(200, {"jobs": [{"job_id": 7}], "has_more": True})

    assert list_job_ids(limit=1, client=client) == ["7"]
    assert session.request.call_count == 1


def test_list_sql_warehouse_ids(client, session, make_response):
    session.request.return_value = make_response(200, {"warehouses": [{"id": "wh1"}, {"name": "no-id"}]})
    assert list_sql_warehouse_ids(client=client) == ["wh1"]


def test_validate_choice_hit():
    assert validate_choice("c1", ["c1", "c2"], "cluster_id") is True


def test_validate_choice_miss_only_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="databricks_admin_core.lookups"):
        assert validate_choice(99, [1, 2], "job_id") is False
    assert "job_id='99'" in caplog.text
