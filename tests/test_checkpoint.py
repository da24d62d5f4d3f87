import json

import pytest

from slsclient.checkpoint import (
    ConsumerGroupCheckpoint,
    GetConsumerGroupCheckpointResponse,
    get_checkpoint_request,
    update_checkpoint_request,
)
from slsclient.client import LOG_JSON
from slsclient.errors import MissingParameterError, ResponseError


def _cp(shard, consumer="consumer-1"):
    return {
        "shard": shard,
        "checkpoint": "MTU0NzQ3MDY4MjM3NjUxMzU0Ng==",
        "updateTime": 1617235200,
        "consumer": consumer,
    }


def test_get_checkpoint_request_all_shards():
    req = get_checkpoint_request("proj", "store", "group")
    assert req.method == "GET"
    assert req.path == "/logstores/store/consumergroups/group"
    assert req.project == "proj"
    assert req.query_params is None
    assert req.body is None


def test_get_checkpoint_request_single_shard():
    req = get_checkpoint_request("proj", "store", "group", 3)
    assert req.query_params == [("shard", "3")]


def test_get_checkpoint_request_shard_zero_is_sent():
    req = get_checkpoint_request("proj", "store", "group", 0)
    assert req.query_params == [("shard", "0")]


def test_checkpoint_from_dict_round_trip():
    data = _cp(2)
    cp = ConsumerGroupCheckpoint.from_dict(data)
    assert cp.shard_id == 2
    assert cp.checkpoint == data["checkpoint"]
    assert cp.update_time == data["updateTime"]
    assert cp.consumer == "consumer-1"
    assert cp.to_dict() == data


def test_checkpoint_from_dict_missing_field():
    data = _cp(1)
    del data["consumer"]
    with pytest.raises(ValueError):
        ConsumerGroupCheckpoint.from_dict(data)


def test_response_from_body_parses_list():
    items = [_cp(0), _cp(1, "consumer-2")]
    resp = GetConsumerGroupCheckpointResponse.from_body(json.dumps(items).encode(), {})
    assert [c.shard_id for c in resp.checkpoints] == [0, 1]
    assert [c.to_dict() for c in resp.checkpoints] == items


def test_response_via_request_parser():
    req = get_checkpoint_request("proj", "store", "group")
    resp = req.parse(json.dumps([_cp(5)]).encode(), {})
    assert resp.checkpoints[0].shard_id == 5


def test_response_from_body_not_list():
    with pytest.raises(ResponseError) as info:
        GetConsumerGroupCheckpointResponse.from_body(
            b'{"shard": 1}', {"x-log-requestid": "req-1"}
        )
    assert info.value.request_id == "req-1"


def test_response_from_body_bad_item():
    bad = _cp(0)
    bad["shard"] = "zero"
    with pytest.raises(ResponseError):
        GetConsumerGroupCheckpointResponse.from_body(json.dumps([bad]).encode(), {})


def test_update_checkpoint_request():
    req = update_checkpoint_request("proj", "store", "group", 0, "consumer-1", "cursor-a")
    assert req.method == "POST"
    assert req.path == "/logstores/store/consumergroups/group"
    assert req.project == "proj"
    assert req.content_type == LOG_JSON
    assert req.query_params == [
        ("type", "checkpoint"),
        ("consumer", "consumer-1"),
        ("forceSuccess", "false"),
    ]
    assert json.loads(req.body) == {"shard": 0, "checkpoint": "cursor-a"}


def test_update_checkpoint_force_success():
    req = update_checkpoint_request(
        "proj", "store", "group", 1, "consumer-1", "cursor-a", True
    )
    assert ("forceSuccess", "true") in req.query_params


@pytest.mark.parametrize(
    "kwargs, missing",
    [
        ({"shard_id": None, "consumer_id": "c", "checkpoint": "x"}, "shard_id"),
        ({"shard_id": 1, "consumer_id": "c", "checkpoint": None}, "checkpoint"),
        ({"shard_id": 1, "consumer_id": None, "checkpoint": "x"}, "consumer_id"),
        ({"shard_id": None, "consumer_id": None, "checkpoint": None}, "shard_id"),
    ],
)
def test_update_checkpoint_missing_parameter(kwargs, missing):
    with pytest.raises(MissingParameterError) as info:
        update_checkpoint_request("proj", "store", "group", **kwargs)
    assert info.value.parameter == missing