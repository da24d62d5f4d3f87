"""Consumption checkpoints of a consumer group."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .client import LOG_JSON, LOG_REQUEST_ID, PreparedRequest, parse_json_body
from .errors import RequestError, ResponseError, check_required


def _request_id(headers: Mapping[str, str]) -> str | None:
    for key, value in headers.items():
        if str(key).lower() == LOG_REQUEST_ID:
            return str(value)
    return None


def _field(data: Mapping[str, Any], key: str, kind: type) -> Any:
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    value = data[key]
    if (kind is int and isinstance(value, bool)) or not isinstance(value, kind):
        raise ValueError(f"field {key!r} has an unexpected type: {value!r}")
    return value


def _group_path(logstore: str, consumer_group: str) -> str:
    return f"/logstores/{logstore}/consumergroups/{consumer_group}"


def get_checkpoint_request(
    project: str, logstore: str, consumer_group: str, shard_id: int | None = None
) -> PreparedRequest:
    """Build the request that fetches checkpoints of a consumer group.

    With ``shard_id`` only that shard's checkpoint is returned, otherwise
    the checkpoints of all shards.
    """
    query = None if shard_id is None else [("shard", str(shard_id))]
    return PreparedRequest(
        method="GET",
        path=_group_path(logstore, consumer_group),
        project=project,
        query_params=query,
        parse=GetConsumerGroupCheckpointResponse.from_body,
    )


@dataclass(frozen=True)
class ConsumerGroupCheckpoint:
    """Checkpoint of one shard in a consumer group."""

    shard_id: int
    checkpoint: str
    update_time: int
    consumer: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ConsumerGroupCheckpoint:
        if not isinstance(data, Mapping):
            raise ValueError(f"checkpoint must be an object, got {data!r}")
        return cls(
            shard_id=_field(data, "shard", int),
            checkpoint=_field(data, "checkpoint", str),
            update_time=_field(data, "updateTime", int),
            consumer=_field(data, "consumer", str),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "shard": self.shard_id,
            "checkpoint": self.checkpoint,
            "updateTime": self.update_time,
            "consumer": self.consumer,
        }


@dataclass
class GetConsumerGroupCheckpointResponse:
    """The checkpoints returned by the service."""

    checkpoints: list[ConsumerGroupCheckpoint] = field(default_factory=list)

    @classmethod
    def from_body(
        cls, body: bytes, headers: Mapping[str, str]
    ) -> GetConsumerGroupCheckpointResponse:
        data = parse_json_body(body, headers)
        if not isinstance(data, list):
            raise ResponseError(
                "invalid get checkpoint response: expected a json array",
                _request_id(headers),
            )
        try:
            checkpoints = [ConsumerGroupCheckpoint.from_dict(item) for item in data]
        except ValueError as exc:
            raise ResponseError(
                f"invalid get checkpoint response: {exc}", _request_id(headers)
            ) from exc
        return cls(checkpoints=checkpoints)


def update_checkpoint_request(
    project: str,
    logstore: str,
    consumer_group: str,
    shard_id: int | None,
    consumer_id: str | None,
    checkpoint: str | None,
    force_success: bool | None = None,
) -> PreparedRequest:
    """Build the request that stores a shard's checkpoint.

    ``force_success`` bypasses the ownership check; it defaults to false.
    """
    check_required(shard_id=shard_id, checkpoint=checkpoint, consumer_id=consumer_id)
    force = bool(force_success) if force_success is not None else False
    try:
        body = json.dumps(
            {"shard": shard_id, "checkpoint": checkpoint},
            separators=(",", ":"),
            ensure_ascii=False,
        ).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise RequestError(f"failed to encode update checkpoint request: {exc}") from exc
    return PreparedRequest(
        method="POST",
        path=_group_path(logstore, consumer_group),
        project=project,
        query_params=[
            ("type", "checkpoint"),
            ("consumer", consumer_id),
            ("forceSuccess", "true" if force else "false"),
        ],
        body=body,
        content_type=LOG_JSON,
    )