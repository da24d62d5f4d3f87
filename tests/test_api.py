import json
import zlib
from urllib.parse import parse_qsl, urlsplit

import pytest

from slsclient.api import LogServiceClient
from slsclient.client import ClientConfig, HttpResponse, exponential_backoff
from slsclient.cursor import CursorPos
from slsclient.errors import MissingParameterError, ServerError


class FakeTransport:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, method, url, headers, body, timeout):
        self.calls.append((method, url, headers, body))
        return self.responses.pop(0)


def _ok(payload, headers=None):
    return HttpResponse(200, dict(headers or {}), json.dumps(payload).encode("utf-8"))


def _make(responses, sleeps=None):
    config = ClientConfig(
        endpoint="https://cn-hangzhou.log.aliyuncs.com",
        access_key_id="placeholder",
        access_key_secret="secret",
    )
    transport = FakeTransport(responses)
    record = sleeps if sleeps is not None else []
    client = LogServiceClient(config, transport=transport, sleep=record.append)
    return client, transport


def test_get_cursor_builds_url_and_parses():
    client, transport = _make([_ok({"cursor": "abc"})])
    resp = client.get_cursor("proj", "store", 0, CursorPos.BEGIN)
    assert resp.body.cursor == "abc"
    method, url, _, body = transport.calls[0]
    assert method == "GET"
    parts = urlsplit(url)
    assert parts.netloc == "proj.cn-hangzhou.log.aliyuncs.com"
    assert parts.path == "/logstores/store/shards/0"
    assert parse_qsl(parts.query) == [("type", "cursor"), ("from", "begin")]
    assert body is None


def test_list_shards():
    shard = {
        "shardID": 1,
        "status": "readwrite",
        "inclusiveBeginKey": "00",
        "exclusiveEndKey": "ff",
        "createTime": 1617235200,
    }
    client, _ = _make([_ok([shard])])
    resp = client.list_shards("proj", "store")
    assert [s.shard_id for s in resp.body.shards] == [1]
    assert resp.status == 200


def test_get_logs_decompresses_response():
    payload = json.dumps({"meta": {"progress": "Complete"}, "data": [{"k": "v"}]}).encode()
    headers = {"x-log-compresstype": "deflate", "x-log-bodyrawsize": str(len(payload))}
    client, transport = _make([HttpResponse(200, headers, zlib.compress(payload))])
    resp = client.get_logs("proj", "store", 100, 200, query="level:ERROR", lines=10)
    assert resp.body.is_complete()
    assert resp.body.logs == [{"k": "v"}]
    method, _, sent_headers, body = transport.calls[0]
    assert method == "POST"
    assert json.loads(body) == {"from": 100, "to": 200, "query": "level:ERROR", "lines": 10}
    assert sent_headers["x-log-bodyrawsize"] == str(len(body))


def test_create_consumer_group_missing_parameter_sends_nothing():
    client, transport = _make([])
    with pytest.raises(MissingParameterError):
        client.create_consumer_group("proj", "store", "cg", None, True)
    assert transport.calls == []


def test_heartbeat_and_list_consumer_groups():
    client, transport = _make(
        [_ok([0, 2]), _ok([{"name": "cg", "timeout": 60, "order": True}])]
    )
    resp = client.consumer_group_heartbeat("proj", "store", "cg", "c1", [0, 1, 2])
    assert resp.body.shards == [0, 2]
    assert json.loads(transport.calls[0][3]) == [0, 1, 2]
    groups = client.list_consumer_groups("proj", "store").body.consumer_groups
    assert groups[0].consumer_group_name == "cg"
    assert groups[0].order is True


def test_update_and_delete_consumer_group():
    client, transport = _make([_ok({}), _ok({})])
    client.update_consumer_group("proj", "store", "cg", 30, False)
    client.delete_consumer_group("proj", "store", "cg")
    assert [c[0] for c in transport.calls] == ["PUT", "DELETE"]
    assert json.loads(transport.calls[0][3]) == {"timeout": 30, "order": False}


def test_checkpoints():
    cp = {"shard": 0, "checkpoint": "MTU0", "updateTime": 5, "consumer": "c1"}
    client, transport = _make([_ok([cp]), _ok({})])
    resp = client.get_consumer_group_checkpoint("proj", "store", "cg", 0)
    assert resp.body.checkpoints[0].to_dict() == cp
    client.update_consumer_group_checkpoint("proj", "store", "cg", 0, "c1", "MTU0")
    query = dict(parse_qsl(urlsplit(transport.calls[1][1]).query))
    assert query["forceSuccess"] == "false"
    assert query["consumer"] == "c1"


def test_logstore_operations():
    info = {
        "logstoreName": "store",
        "ttl": 30,
        "shardCount": 2,
        "enable_tracking": False,
        "autoSplit": True,
        "createTime": 1,
        "lastModifyTime": 2,
        "appendMeta": False,
        "telemetryType": "",
        "mode": "standard",
    }
    client, transport = _make(
        [_ok({}), _ok({}), _ok(info), _ok({"count": 1, "total": 1, "logstores": ["store"]}), _ok({})]
    )
    client.create_logstore("proj", "store", 2, 30, mode="standard")
    client.update_logstore("proj", "store", ttl=90)
    got = client.get_logstore("proj", "store").body
    listed = client.list_logstores("proj", 0, 10, logstore_name="st").body
    client.delete_logstore("proj", "store")
    assert got.logstore_name == "store"
    assert listed.logstores == ["store"]
    assert [c[0] for c in transport.calls] == ["POST", "PUT", "GET", "GET", "DELETE"]
    assert json.loads(transport.calls[1][3]) == {"ttl": 90}


def test_server_error_is_retried_then_succeeds():
    sleeps = []
    error = HttpResponse(500, {"x-log-requestid": "rid"}, b"{}")
    client, transport = _make([error, _ok({"cursor": "c"})], sleeps)
    resp = client.get_cursor("proj", "store", 0, CursorPos.END)
    assert resp.body.cursor == "c"
    assert len(transport.calls) == 2
    assert sleeps == [exponential_backoff(1.0, 0, 10.0)]


def test_client_error_is_not_retried():
    body = json.dumps({"errorCode": "LogStoreNotExist", "errorMessage": "missing"}).encode()
    client, transport = _make([HttpResponse(404, {"x-log-requestid": "rid"}, body)])
    with pytest.raises(ServerError) as info:
        client.get_logstore("proj", "store")
    assert info.value.http_status == 404
    assert info.value.error_code == "LogStoreNotExist"
    assert info.value.request_id == "rid"
    assert len(transport.calls) == 1