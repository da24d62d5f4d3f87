import json

import pytest

from slsclient.errors import ResponseError
from slsclient.logstore_list import ListLogstoresResponse, list_logstores_request


def test_request_without_filters():
    req = list_logstores_request("proj", 0, 10)
    assert req.method == "GET"
    assert req.path == "/logstores"
    assert req.project == "proj"
    assert req.body is None
    assert req.query_params == [("offset", "0"), ("size", "10")]


def test_request_with_all_filters_in_order():
    req = list_logstores_request(
        "proj", 20, 5, logstore_name="test", telemetry_type="Metrics", mode="query"
    )
    assert req.query_params == [
        ("offset", "20"),
        ("size", "5"),
        ("logstoreName", "test"),
        ("telemetryType", "Metrics"),
        ("mode", "query"),
    ]


def test_request_with_one_filter():
    req = list_logstores_request("proj", 0, 10, mode="standard")
    assert [k for k, _ in req.query_params] == ["offset", "size", "mode"]


def test_response_from_body():
    payload = {"count": 2, "total": 7, "logstores": ["a", "b"]}
    resp = ListLogstoresResponse.from_body(json.dumps(payload).encode(), {})
    assert resp.count == 2
    assert resp.total == 7
    assert resp.logstores == ["a", "b"]
    assert resp.count == len(resp.logstores)


def test_response_via_request_parser():
    req = list_logstores_request("proj", 0, 10)
    payload = {"count": 1, "total": 1, "logstores": ["only"]}
    resp = req.parse(json.dumps(payload).encode(), {})
    assert resp.logstores == ["only"]


@pytest.mark.parametrize(
    "payload",
    [
        {"total": 1, "logstores": []},
        {"count": 0, "total": 1},
        {"count": "1", "total": 1, "logstores": ["a"]},
        {"count": 1, "total": 1, "logstores": [3]},
        ["a"],
    ],
)
def test_response_invalid(payload):
    with pytest.raises(ResponseError) as info:
        ListLogstoresResponse.from_body(
            json.dumps(payload).encode(), {"X-Log-RequestId": "req-9"}
        )
    assert info.value.request_id == "req-9"


def test_response_not_json():
    with pytest.raises(ResponseError):
        ListLogstoresResponse.from_body(b"not json", {})