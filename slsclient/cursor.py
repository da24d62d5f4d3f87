"""Shard cursors and shard listing."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .client import LOG_REQUEST_ID, PreparedRequest, parse_json_body
from .errors import ResponseError, check_required


class CursorPos(enum.Enum):
    """Named cursor positions of a shard.

    A Unix timestamp in seconds (an ``int``) may be used wherever a
    ``CursorPos`` is accepted.
    """

    BEGIN = "begin"
    END = "end"


def _request_id(headers: Mapping[str, str]) -> str | None:
    for key, value in headers.items():
        if str(key).lower() == LOG_REQUEST_ID:
            return str(value)
    return None


def _cursor_from(cursor_pos: CursorPos | int) -> str:
    if isinstance(cursor_pos, CursorPos):
        return cursor_pos.value
    if isinstance(cursor_pos, bool) or not isinstance(cursor_pos, int):
        raise TypeError(
            f"cursor_pos must be a CursorPos or a unix timestamp, got {cursor_pos!r}"
        )
    return str(cursor_pos)


def _field(data: Mapping[str, Any], key: str, kind: type) -> Any:
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    value = data[key]
    if (kind is int and isinstance(value, bool)) or not isinstance(value, kind):
        raise ValueError(f"field {key!r} has an unexpected type: {value!r}")
    return value


def get_cursor_request(
    project: str, logstore: str, shard_id: int, cursor_pos: CursorPos | int
) -> PreparedRequest:
    """Build the request that fetches a cursor of a shard at the given position."""
    check_required(cursor_pos=cursor_pos)
    return PreparedRequest(
        method="GET",
        path=f"/logstores/{logstore}/shards/{shard_id}",
        project=project,
        query_params=[("type", "cursor"), ("from", _cursor_from(cursor_pos))],
        parse=GetCursorResponse.from_body,
    )


@dataclass(frozen=True)
class GetCursorResponse:
    """The cursor returned by the service."""

    cursor: str

    @classmethod
    def from_body(cls, body: bytes, headers: Mapping[str, str]) -> GetCursorResponse:
        data = parse_json_body(body, headers)
        if not isinstance(data, dict) or not isinstance(data.get("cursor"), str):
            raise ResponseError(
                "invalid get cursor response: expected a string field 'cursor'",
                _request_id(headers),
            )
        return cls(cursor=data["cursor"])


@dataclass(frozen=True)
class Shard:
    """One shard of a logstore."""

    shard_id: int
    status: str
    inclusive_begin_key: str
    exclusive_end_key: str
    create_time: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Shard:
        if not isinstance(data, Mapping):
            raise ValueError(f"shard must be an object, got {data!r}")
        return cls(
            shard_id=_field(data, "shardID", int),
            status=_field(data, "status", str),
            inclusive_begin_key=_field(data, "inclusiveBeginKey", str),
            exclusive_end_key=_field(data, "exclusiveEndKey", str),
            create_time=_field(data, "createTime", int),
        )


def list_shards_request(project: str, logstore: str) -> PreparedRequest:
    """Build the request that lists every shard of a logstore."""
    return PreparedRequest(
        method="GET",
        path=f"/logstores/{logstore}/shards",
        project=project,
        parse=ListShardsResponse.from_body,
    )


@dataclass
class ListShardsResponse:
    """The shards of a logstore."""

    shards: list[Shard] = field(default_factory=list)

    @classmethod
    def from_body(cls, body: bytes, headers: Mapping[str, str]) -> ListShardsResponse:
        data = parse_json_body(body, headers)
        if not isinstance(data, list):
            raise ResponseError(
                "invalid list shards response: expected a json array",
                _request_id(headers),
            )
        try:
            shards = [Shard.from_dict(item) for item in data]
        except ValueError as exc:
            raise ResponseError(
                f"invalid list shards response: {exc}", _request_id(headers)
            ) from exc
        return cls(shards=shards)