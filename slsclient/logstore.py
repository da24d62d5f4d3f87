"""Logstores of a project: creation, removal and inspection."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
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


def _check(key: str, value: Any, kind: type) -> Any:
    if (kind is int and isinstance(value, bool)) or not isinstance(value, kind):
        raise ValueError(f"field {key!r} has an unexpected type: {value!r}")
    return value


def _field(data: Mapping[str, Any], key: str, kind: type) -> Any:
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    return _check(key, data[key], kind)


def _optional(data: Mapping[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    return None if value is None else _check(key, value, kind)


@dataclass(frozen=True)
class EncryptUserCmkConf:
    """Customer master key supplied by the user (bring your own key)."""

    cmk_key_id: str
    arn: str
    region_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"cmk_key_id": self.cmk_key_id, "arn": self.arn, "region_id": self.region_id}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EncryptUserCmkConf:
        if not isinstance(data, Mapping):
            raise ValueError(f"user_cmk_info must be an object, got {data!r}")
        return cls(
            cmk_key_id=_field(data, "cmk_key_id", str),
            arn=_field(data, "arn", str),
            region_id=_field(data, "region_id", str),
        )


@dataclass(frozen=True)
class EncryptConf:
    """Encryption settings of a logstore.

    ``encrypt_type`` is one of default, m4, sm4_ecb, sm4_cbc, sm4_gcm,
    aes_ecb, aes_cbc, aes_cfb, aes_ofb or aes_gcm.
    """

    enable: bool
    encrypt_type: str | None = None
    user_cmk_info: EncryptUserCmkConf | None = None

    def with_user_cmk(self, user_cmk_info: EncryptUserCmkConf) -> EncryptConf:
        """Return a copy that uses the given user key."""
        return EncryptConf(self.enable, self.encrypt_type, user_cmk_info)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"enable": self.enable}
        if self.encrypt_type is not None:
            result["encrypt_type"] = self.encrypt_type
        if self.user_cmk_info is not None:
            result["user_cmk_info"] = self.user_cmk_info.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EncryptConf:
        if not isinstance(data, Mapping):
            raise ValueError(f"encrypt_conf must be an object, got {data!r}")
        cmk = data.get("user_cmk_info")
        return cls(
            enable=_field(data, "enable", bool),
            encrypt_type=_optional(data, "encrypt_type", str),
            user_cmk_info=None if cmk is None else EncryptUserCmkConf.from_dict(cmk),
        )


def create_logstore_request(
    project: str,
    logstore_name: str,
    shard_count: int | None,
    ttl: int | None,
    *,
    encrypt_conf: EncryptConf | None = None,
    auto_split: bool | None = None,
    enable_tracking: bool | None = None,
    max_split_shard: int | None = None,
    append_meta: bool | None = None,
    telemetry_type: str | None = None,
    hot_ttl: int | None = None,
    mode: str | None = None,
    infrequent_access_ttl: int | None = None,
    processor_id: str | None = None,
) -> PreparedRequest:
    """Build the request that creates a logstore.

    ``shard_count`` (1..256) and ``ttl`` in days (1..3650) are required.
    """
    check_required(shard_count=shard_count, ttl=ttl)
    payload: dict[str, Any] = {
        "logstoreName": logstore_name,
        "shardCount": shard_count,
        "ttl": ttl,
        "encrypt_conf": None if encrypt_conf is None else encrypt_conf.to_dict(),
        "autoSplit": auto_split,
        "enable_tracking": enable_tracking,
        "maxSplitShard": max_split_shard,
        "appendMeta": append_meta,
        "telemetryType": telemetry_type,
        "hot_ttl": hot_ttl,
        "mode": mode,
        "infrequentAccessTTL": infrequent_access_ttl,
        "processorId": processor_id,
    }
    body = _encode(
        {key: value for key, value in payload.items() if value is not None},
        "create logstore",
    )
    return PreparedRequest(
        method="POST",
        path="/logstores",
        project=project,
        body=body,
        content_type=LOG_JSON,
    )


def delete_logstore_request(project: str, logstore_name: str) -> PreparedRequest:
    """Build the request that deletes a logstore and all of its data."""
    return PreparedRequest(
        method="DELETE",
        path=f"/logstores/{logstore_name}",
        project=project,
    )


def get_logstore_request(project: str, logstore_name: str) -> PreparedRequest:
    """Build the request that fetches the settings of a logstore."""
    return PreparedRequest(
        method="GET",
        path=f"/logstores/{logstore_name}",
        project=project,
        parse=GetLogstoreResponse.from_body,
    )


@dataclass(frozen=True)
class GetLogstoreResponse:
    """Settings of a logstore."""

    logstore_name: str
    ttl: int
    shard_count: int
    enable_tracking: bool
    auto_split: bool
    create_time: int
    last_modify_time: int
    append_meta: bool
    telemetry_type: str
    mode: str
    hot_ttl: int | None = None
    infrequent_access_ttl: int | None = None
    max_split_shard: int | None = None
    encrypt_conf: EncryptConf | None = None
    processor_id: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GetLogstoreResponse:
        if not isinstance(data, Mapping):
            raise ValueError("expected a json object")
        encrypt = data.get("encrypt_conf")
        return cls(
            logstore_name=_field(data, "logstoreName", str),
            ttl=_field(data, "ttl", int),
            shard_count=_field(data, "shardCount", int),
            enable_tracking=_field(data, "enable_tracking", bool),
            auto_split=_field(data, "autoSplit", bool),
            create_time=_field(data, "createTime", int),
            last_modify_time=_field(data, "lastModifyTime", int),
            append_meta=_field(data, "appendMeta", bool),
            telemetry_type=_field(data, "telemetryType", str),
            mode=_field(data, "mode", str),
            hot_ttl=_optional(data, "hot_ttl", int),
            infrequent_access_ttl=_optional(data, "infrequentAccessTTL", int),
            max_split_shard=_optional(data, "maxSplitShard", int),
            encrypt_conf=None if encrypt is None else EncryptConf.from_dict(encrypt),
            processor_id=_optional(data, "processorId", str),
        )

    @classmethod
    def from_body(cls, body: bytes, headers: Mapping[str, str]) -> GetLogstoreResponse:
        data = parse_json_body(body, headers)
        try:
            return cls.from_dict(data)
        except ValueError as exc:
            raise ResponseError(
                f"invalid get logstore response: {exc}", _request_id(headers)
            ) from exc