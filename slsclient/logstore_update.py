"""Changing the settings of an existing logstore."""

from __future__ import annotations

import json
from typing import Any

from .client import LOG_JSON, PreparedRequest
from .errors import RequestError
from .logstore import EncryptConf


def update_logstore_request(
    project: str,
    logstore_name: str,
    *,
    ttl: int | None = None,
    encrypt_conf: EncryptConf | None = None,
    auto_split: bool | None = None,
    enable_tracking: bool | None = None,
    max_split_shard: int | None = None,
    append_meta: bool | None = None,
    hot_ttl: int | None = None,
    mode: str | None = None,
    infrequent_access_ttl: int | None = None,
    processor_id: str | None = None,
) -> PreparedRequest:
    """Build the request that updates a logstore; only given settings are sent.

    ``ttl`` is the retention in days (1..3650), ``hot_ttl`` at least 7 or -1,
    ``infrequent_access_ttl`` at least 30, ``mode`` standard or query.
    """
    payload: dict[str, Any] = {
        "ttl": ttl,
        "encrypt_conf": None if encrypt_conf is None else encrypt_conf.to_dict(),
        "autoSplit": auto_split,
        "enable_tracking": enable_tracking,
        "maxSplitShard": max_split_shard,
        "appendMeta": append_meta,
        "hot_ttl": hot_ttl,
        "mode": mode,
        "infrequentAccessTTL": infrequent_access_ttl,
        "processorId": processor_id,
    }
    try:
        body = json.dumps(
            {key: value for key, value in payload.items() if value is not None},
            separators=(",", ":"),
            ensure_ascii=False,
        ).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise RequestError(f"failed to encode update logstore request: {exc}") from exc
    return PreparedRequest(
        method="PUT",
        path=f"/logstores/{logstore_name}",
        project=project,
        body=body,
        content_type=LOG_JSON,
    )