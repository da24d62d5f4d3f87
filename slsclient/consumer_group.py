"""Consumer groups of a logstore: creation, update, removal, listing and heartbeats."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .client import LOG_JSON, LOG_REQUEST_ID, PreparedRequest, parse_json_body
from .errors import RequestError, ResponseError, check_required


def _request_id(headers: Mapping[str, str]) -> str | None:
    for key, value in headers.items():
        if str(key).lower() == LOG_REQUEST_ID:
            return str(value)
    return None


def _encode(payload: Any, what: str) -> bytes:
    try:
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise RequestError(f"failed to encode {what} request: {exc}") from exc


def _field(data: Mapping[str, Any], key: str, kind: type) -> Any:
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    value = data[key]
    if (kind is int and isinstance(value, bool)) or not isinstance(value, kind):
        raise ValueError(f"field {key!r} has an unexpected type: {value!r}")
    return value


def _group_path(logstore: str, consumer_group: str) -> str:
    return f"/logstores/{logstore}/consumergroups/{consumer_group}"


def create_consumer_group_request(
    project: str,
    logstore: str,
    consumer_group: str,
    timeout: int | None,
    order: bool | None,
) -> PreparedRequest:
    """Build the request that creates a consumer group.

    ``timeout`` is the heartbeat timeout in seconds; ``order`` tells whether
    shards are consumed in order. Both are required.
    """
    check_required(timeout=timeout, order=order)
    body = _encode(
        {"consumerGroup": consumer_group, "timeout": timeout, "order": order},
        "create consumer group",
    )
    return PreparedRequest(
        method="POST",
        path=f"/logstores/{logstore}/consumergroups",
        project=project,
        body=body,
        content_type=LOG_JSON,
    )


def update_consumer_group_request(
    project: str,
    logstore: str,
    consumer_group: str,
    timeout: int | None,
    order: bool | None,
) -> PreparedRequest:
    """Build the request that changes the timeout and ordering of a consumer group."""
    check_required(timeout=timeout, order=order)
    body = _encode({"timeout": timeout, "order": order}, "update consumer group")
    return PreparedRequest(
        method="PUT",
        path=_group_path(logstore, consumer_group),
        project=project,
        body=body,
        content_type=LOG_JSON,
    )


def delete_consumer_group_request(
    project: str, logstore: str, consumer_group: str
) -> PreparedRequest:
    """Build the request that deletes a consumer group and its checkpoints."""
    return PreparedRequest(
        method="DELETE",
        path=_group_path(logstore, consumer_group),
        project=project,
    )


def list_consumer_groups_request(project: str, logstore: str) -> PreparedRequest:
    """Build the request that lists every consumer group of a logstore."""
    return PreparedRequest(
        method="GET",
        path=f"/logstores/{logstore}/consumergroups",
        project=project,
        parse=ListConsumerGroupsResponse.from_body,
    )


@dataclass(frozen=True)
class ConsumerGroup:
    """Settings of one consumer group."""

    consumer_group_name: str
    timeout: int
    order: bool

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ConsumerGroup:
        if not isinstance(data, Mapping):
            raise ValueError(f"consumer group must be an object, got {data!r}")
        return cls(
            consumer_group_name=_field(data, "name", str),
            timeout=_field(data, "timeout", int),
            order=_field(data, "order", bool),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.consumer_group_name,
            "timeout": self.timeout,
            "order": self.order,
        }


@dataclass
class ListConsumerGroupsResponse:
    """The consumer groups of a logstore."""

    consumer_groups: list[ConsumerGroup] = field(default_factory=list)

    @classmethod
    def from_body(
        cls, body: bytes, headers: Mapping[str, str]
    ) -> ListConsumerGroupsResponse:
        data = parse_json_body(body, headers)
        if not isinstance(data, list):
            raise ResponseError(
                "invalid list consumer groups response: expected a json array",
                _request_id(headers),
            )
        try:
            groups = [ConsumerGroup.from_dict(item) for item in data]
        except ValueError as exc:
            raise ResponseError(
                f"invalid list consumer groups response: {exc}", _request_id(headers)
            ) from exc
        return cls(consumer_groups=groups)


def heartbeat_request(
    project: str,
    logstore: str,
    consumer_group: str,
    consumer: str | None,
    shards: Iterable[int] | None = None,
) -> PreparedRequest:
    """Build the heartbeat request of a consumer holding the given shards."""
    check_required(consumer=consumer)
    held = [] if shards is None else list(shards)
    return PreparedRequest(
        method="POST",
        path=_group_path(logstore, consumer_group),
        project=project,
        query_params=[("consumer", consumer), ("type", "heartbeat")],
        body=_encode(held, "consumer group heartbeat"),
        content_type=LOG_JSON,
        parse=ConsumerGroupHeartbeatResponse.from_body,
    )


@dataclass
class ConsumerGroupHeartbeatResponse:
    """The shards the server assigns to the consumer."""

    shards: list[int] = field(default_factory=list)

    @classmethod
    def from_body(
        cls, body: bytes, headers: Mapping[str, str]
    ) -> ConsumerGroupHeartbeatResponse:
        data = parse_json_body(body, headers)
        if not isinstance(data, list) or any(
            isinstance(item, bool) or not isinstance(item, int) for item in data
        ):
            raise ResponseError(
                "invalid heartbeat response: expected a json array of shard ids",
                _request_id(headers),
            )
        return cls(shards=list(data))