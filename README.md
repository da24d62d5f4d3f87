# slsclient

A client for a cloud log service. It builds the HTTP requests for working
with logstores, shards, cursors, log queries, consumer groups and their
checkpoints, sends them with retries and exponential backoff, and turns the
JSON responses into dataclasses.

## Installation

```
pip install .
```

The package uses only the standard library.

## Usage

The high-level entry point is `LogServiceClient` in `slsclient.api`. Each
method corresponds to one service operation and returns a
`slsclient.client.Response` with `body`, `headers` and `status`; `body` is the
decoded result (or `None` for operations that return nothing).

```python
from slsclient.api import LogServiceClient
from slsclient.client import ClientConfig
from slsclient.cursor import CursorPos

config = ClientConfig(
    endpoint="cn-hangzhou.log.aliyuncs.com",
    access_key_id="placeholder",
    access_key_secret="secret",
)
client = LogServiceClient(config, signer=my_signer)

for shard in client.list_shards("my-project", "my-logstore").body.shards:
    print(shard.shard_id, shard.status)

cursor = client.get_cursor("my-project", "my-logstore", 0, CursorPos.BEGIN).body.cursor
# A Unix timestamp in seconds may be given instead of CursorPos.BEGIN / CursorPos.END.

logs = client.get_logs(
    "my-project", "my-logstore", 1700000000, 1700003600,
    query="level:ERROR", offset=0, lines=100,
).body
if logs.is_complete():
    print(f"{logs.logs_count()} logs")
    for entry in logs.logs:
        print(entry)
```

`get_logs` also accepts `topic`, `reverse`, `power_sql`, `need_highlight`,
`from_ns_part` and `to_ns_part`. The result's `meta` is a
`slsclient.logs.GetLogsMeta`.

### Logstores

```python
client.create_logstore("my-project", "my-logstore", shard_count=2, ttl=30)
client.update_logstore("my-project", "my-logstore", ttl=90, hot_ttl=30)
info = client.get_logstore("my-project", "my-logstore").body
page = client.list_logstores("my-project", 0, 10, logstore_name="test").body
print(page.count, page.total, page.logstores)
client.delete_logstore("my-project", "my-logstore")
```

Only the settings that are given are sent. Encryption settings are described
with `EncryptConf` and `EncryptUserCmkConf` from `slsclient.logstore`:

```python
from slsclient.logstore import EncryptConf, EncryptUserCmkConf

conf = EncryptConf(True, "aes_gcm").with_user_cmk(
    EncryptUserCmkConf("key-id", "acs:ram::example:role/example", "cn-hangzhou")
)
client.create_logstore("my-project", "secure-store", 2, 30, encrypt_conf=conf)
```

### Consumer groups

```python
client.create_consumer_group("my-project", "my-logstore", "my-group", timeout=60, order=True)
client.update_consumer_group("my-project", "my-logstore", "my-group", timeout=60, order=False)
groups = client.list_consumer_groups("my-project", "my-logstore").body.consumer_groups

assigned = client.consumer_group_heartbeat(
    "my-project", "my-logstore", "my-group", "consumer-1", [0, 1]
).body.shards

client.update_consumer_group_checkpoint(
    "my-project", "my-logstore", "my-group",
    shard_id=0, consumer_id="consumer-1", checkpoint=cursor, force_success=False,
)
checkpoints = client.get_consumer_group_checkpoint(
    "my-project", "my-logstore", "my-group", None
).body.checkpoints

client.delete_consumer_group("my-project", "my-logstore", "my-group")
```

### Request builders

Every operation is also available as a plain function that returns a
`slsclient.client.PreparedRequest` (method, path, project, query parameters,
headers, body and the parser for the response), for example
`slsclient.cursor.get_cursor_request` or
`slsclient.logstore.create_logstore_request`. Pass one to
`slsclient.client.Client.send` to perform it.

## Configuration

`ClientConfig` takes the endpoint (a domain, optionally with an `http://` or
`https://` scheme; https is the default), the access key id and secret, an
optional `security_token`, and:

- `max_retry` (default 3) — extra attempts after the first;
- `base_retry_backoff` / `max_retry_backoff` (default 1 and 10 seconds) — the
  delay before retry *n* is `base * 2**n`, capped at the maximum;
- `request_timeout` (default 60 seconds) — passed to the transport;
- `codecs` — compression codecs by name, each a pair of
  `compress(data)` and `decompress(data, raw_size)`; `deflate` is built in.

Requests go to `<scheme><project>.<domain><path>`. The client sets a
`user-agent` and the `x-log-bodyrawsize` header, and decompresses responses
according to `x-log-compresstype`.

`LogServiceClient` (and `Client`) also take:

- `transport(method, url, headers, body, timeout)` returning a
  `slsclient.client.HttpResponse`; the default uses `urllib`;
- `signer(access_key_id, access_key_secret, security_token, method, path,
  headers, query_params, body)`, which adds its headers to `headers` in place;
- `sleep(seconds)`, used between retries (default `time.sleep`).

## Errors

Every failure raises a subclass of `slsclient.errors.SlsError`:

- `MissingParameterError` (a `RequestError`) — a required argument was `None`;
- `RequestError` — the request could not be encoded, compressed or signed;
- `ServerError` — the service answered with a non-200 status; it carries
  `http_status`, `error_code`, `error_message` and `request_id`;
- `NetworkError` — the request did not reach the service;
- `ResponseError` — the response could not be decoded.

Network errors and server errors with status 500–503 are retried.

## What this package does not do

- It does not compute request signatures itself. Without a `signer` the
  requests are sent unsigned; supply a signer for the service's signature
  scheme.
- It has no operations for projects or indexes, and it does not write logs or
  pull raw log groups from shards.
- Only the `deflate` codec is built in; other compression types must be added
  through `ClientConfig.codecs`.
- It has no command-line interface.

## Tests

```
pip install ".[test]"
pytest
```