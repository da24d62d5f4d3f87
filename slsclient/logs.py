"""Querying logs of a logstore."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .client import LOG_JSON, LOG_REQUEST_ID, PreparedRequest, parse_json_body
from .errors import RequestError, ResponseError, check_required

# The response encoding asked for; it is one the client decodes out of the box.
ACCEPT_ENCODING = "deflate"


def _request_id(headers: Mapping[str, str]) -> str | None:
    for key, value in headers.items():
        if str(key).lower() == LOG_REQUEST_ID:
            return str(value)
    return None


def _check(key: str, value: Any, kind: type) -> Any:
    if kind is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"field {key!r} has an unexpected type: {value!r}")
        return float(value)
    if (kind is int and isinstance(value, bool)) or not isinstance(value, kind):
        raise ValueError(f"field {key!r} has an unexpected type: {value!r}")
    return value


def _optional(data: Mapping[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    return None if value is None else _check(key, value, kind)


def _required(data: Mapping[str, Any], key: str, kind: type) -> Any:
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    return _check(key, data[key], kind)


def _optional_list(data: Mapping[str, Any], key: str) -> list[Any] | None:
    return _optional(data, key, list)


def _string_map(key: str, value: Any) -> dict[str, str]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{key} must be an object, got {value!r}")
    return {str(k): _check(f"{key}.{k}", v, str) for k, v in value.items()}


def get_logs_request(
    project: str,
    logstore: str,
    from_time: int,
    to_time: int,
    *,
    topic: str | None = None,
    lines: int | None = None,
    offset: int | None = None,
    reverse: bool | None = None,
    query: str | None = None,
    power_sql: bool | None = None,
    need_highlight: bool | None = None,
    from_ns_part: int | None = None,
    to_ns_part: int | None = None,
) -> PreparedRequest:
    """Build the request that queries logs between two Unix timestamps in seconds."""
    check_required(**{"from": from_time, "to": to_time})
    for name, value in (
        ("lines", lines),
        ("offset", offset),
        ("from_ns_part", from_ns_part),
        ("to_ns_part", to_ns_part),
    ):
        if value is not None and value < 0:
            raise ValueError(f"{name} must not be negative")

    payload = {
        "from": from_time,
        "to": to_time,
        "fromNs": from_ns_part,
        "toNs": to_ns_part,
        "topic": topic,
        "lines": lines,
        "offset": offset,
        "reverse": reverse,
        "query": query,
        "powerSql": power_sql,
        "need_highlight": need_highlight,
    }
    try:
        body = json.dumps(
            {key: value for key, value in payload.items() if value is not None},
            separators=(",", ":"),
            ensure_ascii=False,
        ).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise RequestError(f"failed to encode get logs request: {exc}") from exc

    return PreparedRequest(
        method="POST",
        path=f"/logstores/{logstore}/logs",
        project=project,
        headers={"accept-encoding": ACCEPT_ENCODING},
        body=body,
        content_type=LOG_JSON,
        parse=GetLogsResponse.from_body,
    )


@dataclass(frozen=True)
class MetaTerm:
    """A key/term pair taken from the query."""

    key: str
    term: str


@dataclass(frozen=True)
class PhraseQueryInfo:
    """Scan information of a phrase query."""

    scan_all: bool | None = None
    begin_offset: int | None = None
    end_offset: int | None = None
    end_time: int | None = None


def _meta_term(item: Any) -> MetaTerm:
    if not isinstance(item, Mapping):
        raise ValueError(f"term must be an object, got {item!r}")
    return MetaTerm(key=_required(item, "key", str), term=_required(item, "term", str))


def _phrase_query_info(item: Any) -> PhraseQueryInfo:
    if not isinstance(item, Mapping):
        raise ValueError(f"phrase_query_info must be an object, got {item!r}")
    return PhraseQueryInfo(
        scan_all=_optional(item, "scan_all", bool),
        begin_offset=_optional(item, "begin_offset", int),
        end_offset=_optional(item, "end_offset", int),
        end_time=_optional(item, "end_time", int),
    )


@dataclass
class GetLogsMeta:
    """Metadata of a query result; absent fields take their defaults."""

    progress: str = ""
    agg_query: str | None = None
    where_query: str | None = None
    has_sql: bool | None = None
    processed_rows: int | None = None
    elapsed_millisecond: int | None = None
    cpu_sec: float | None = None
    cpu_cores: float | None = None
    limited: int | None = None
    count: int | None = None
    processed_bytes: int | None = None
    telementry_type: str | None = None
    power_sql: bool | None = None
    inserted_sql: str | None = None
    keys: list[str] | None = None
    terms: list[MetaTerm] | None = None
    marker: str | None = None
    mode: int | None = None
    phrase_query_info: PhraseQueryInfo | None = None
    shard: int | None = None
    scan_bytes: int | None = None
    is_accurate: bool | None = None
    column_types: list[str] | None = None
    highlights: list[dict[str, str]] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GetLogsMeta:
        if not isinstance(data, Mapping):
            raise ValueError(f"meta must be an object, got {data!r}")
        progress = data.get("progress", "")
        keys = _optional_list(data, "keys")
        terms = _optional_list(data, "terms")
        column_types = _optional_list(data, "column_types")
        highlights = _optional_list(data, "highlights")
        phrase = data.get("phrase_query_info")
        return cls(
            progress=_check("progress", progress, str),
            agg_query=_optional(data, "agg_query", str),
            where_query=_optional(data, "where_query", str),
            has_sql=_optional(data, "hasSQL", bool),
            processed_rows=_optional(data, "processed_rows", int),
            elapsed_millisecond=_optional(data, "elapsed_millisecond", int),
            cpu_sec=_optional(data, "cpu_sec", float),
            cpu_cores=_optional(data, "cpu_cores", float),
            limited=_optional(data, "limited", int),
            count=_optional(data, "count", int),
            processed_bytes=_optional(data, "processed_bytes", int),
            telementry_type=_optional(data, "telementry_type", str),
            power_sql=_optional(data, "power_sql", bool),
            inserted_sql=_optional(data, "insertedSQL", str),
            keys=None if keys is None else [_check("keys", k, str) for k in keys],
            terms=None if terms is None else [_meta_term(t) for t in terms],
            marker=_optional(data, "marker", str),
            mode=_optional(data, "mode", int),
            phrase_query_info=None if phrase is None else _phrase_query_info(phrase),
            shard=_optional(data, "shard", int),
            scan_bytes=_optional(data, "scan_bytes", int),
            is_accurate=_optional(data, "is_accurate", bool),
            column_types=(
                None
                if column_types is None
                else [_check("column_types", c, str) for c in column_types]
            ),
            highlights=(
                None
                if highlights is None
                else [_string_map("highlights", h) for h in highlights]
            ),
        )


@dataclass
class GetLogsResponse:
    """Logs returned by a query, each a mapping of field name to value."""

    meta: GetLogsMeta
    logs: list[dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_body(cls, body: bytes, headers: Mapping[str, str]) -> GetLogsResponse:
        data = parse_json_body(body, headers)
        try:
            if not isinstance(data, dict):
                raise ValueError("expected a json object")
            meta = GetLogsMeta.from_dict(_required(data, "meta", dict))
            logs = [_string_map("data", item) for item in _required(data, "data", list)]
        except ValueError as exc:
            raise ResponseError(
                f"invalid get logs response: {exc}", _request_id(headers)
            ) from exc
        return cls(meta=meta, logs=logs)

    def is_complete(self) -> bool:
        """True when the query has finished."""
        return self.meta.progress.lower() == "complete"

    def logs_count(self) -> int:
        """Number of logs returned."""
        return len(self.logs)