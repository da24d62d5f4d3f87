"""Listing the logstores of a project."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .client import LOG_REQUEST_ID, PreparedRequest, parse_json_body
from .errors import ResponseError


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


def list_logstores_request(
    project: str,
    offset: int,
    size: int,
    *,
    logstore_name: str | None = None,
    telemetry_type: str | None = None,
    mode: str | None = None,
) -> PreparedRequest:
    """Build the request that lists a page of logstores, optionally filtered.

    ``logstore_name`` matches partially; ``telemetry_type`` is None or
    Metrics; ``mode`` is standard or query.
    """
    params = [("offset", str(offset)), ("size", str(size))]
    for key, value in (
        ("logstoreName", logstore_name),
        ("telemetryType", telemetry_type),
        ("mode", mode),
    ):
        if value is not None:
            params.append((key, value))
    return PreparedRequest(
        method="GET",
        path="/logstores",
        project=project,
        query_params=params,
        parse=ListLogstoresResponse.from_body,
    )


@dataclass
class ListLogstoresResponse:
    """One page of logstore names."""

    count: int
    total: int
    logstores: list[str] = field(default_factory=list)

    @classmethod
    def from_body(cls, body: bytes, headers: Mapping[str, str]) -> ListLogstoresResponse:
        data = parse_json_body(body, headers)
        try:
            if not isinstance(data, dict):
                raise ValueError("expected a json object")
            names = _field(data, "logstores", list)
            for name in names:
                if not isinstance(name, str):
                    raise ValueError(f"logstore name must be a string, got {name!r}")
            return cls(
                count=_field(data, "count", int),
                total=_field(data, "total", int),
                logstores=list(names),
            )
        except ValueError as exc:
            raise ResponseError(
                f"invalid list logstores response: {exc}", _request_id(headers)
            ) from exc