"""HTTP core of the log service client: endpoints, retries, compression, parsing."""

from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
import zlib
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .errors import (
    NetworkError,
    RequestError,
    ResponseError,
    ServerError,
    SlsError,
    server_error_from_response,
)

logger = logging.getLogger(__name__)

LOG_BODY_RAW_SIZE = "x-log-bodyrawsize"
LOG_COMPRESS_TYPE = "x-log-compresstype"
LOG_REQUEST_ID = "x-log-requestid"
LOG_JSON = "application/json"
USER_AGENT = "slsclient-python/0.1.0"

SUPPORTED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE"})

Codec = tuple[Callable[[bytes], bytes], Callable[[bytes, int], bytes]]


def _deflate_decompress(data: bytes, raw_size: int) -> bytes:
    return zlib.decompress(data)


DEFAULT_CODECS: dict[str, Codec] = {"deflate": (zlib.compress, _deflate_decompress)}


@dataclass(frozen=True)
class Endpoint:
    """Scheme (including '://') and domain of the service endpoint."""

    scheme: str
    domain: str


def parse_endpoint(endpoint: str) -> Endpoint:
    """Split an endpoint such as 'https://cn-hangzhou.log.aliyuncs.com'."""
    text = endpoint.strip()
    scheme = "https"
    if "://" in text:
        scheme, text = text.split("://", 1)
        scheme = scheme.lower()
        if scheme not in ("http", "https"):
            raise ValueError(f"unsupported endpoint scheme: {scheme!r}")
    domain = text.rstrip("/")
    if not domain or "/" in domain:
        raise ValueError(f"invalid endpoint: {endpoint!r}")
    return Endpoint(f"{scheme}://", domain)


def _ignore_body(body: bytes, headers: Mapping[str, str]) -> None:
    return None


@dataclass
class PreparedRequest:
    """Everything the client needs to perform one API call."""

    method: str
    path: str
    project: str | None = None
    query_params: list[tuple[str, str]] | None = None
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None
    content_type: str | None = None
    compress_type: str | None = None
    parse: Callable[[bytes, Mapping[str, str]], Any] = _ignore_body


@dataclass
class HttpResponse:
    """Raw response returned by a transport."""

    status: int
    headers: dict[str, str]
    body: bytes


@dataclass
class Response:
    """Parsed response of an API call."""

    body: Any
    headers: dict[str, str]
    status: int


@dataclass
class ClientConfig:
    """Connection settings, credentials and retry policy."""

    endpoint: Endpoint | str
    access_key_id: str
    access_key_secret: str
    security_token: str | None = None
    max_retry: int = 3
    base_retry_backoff: float = 1.0
    max_retry_backoff: float = 10.0
    connection_timeout: float = 10.0
    request_timeout: float = 60.0
    codecs: dict[str, Codec] = field(default_factory=lambda: dict(DEFAULT_CODECS))

    def __post_init__(self) -> None:
        if isinstance(self.endpoint, str):
            self.endpoint = parse_endpoint(self.endpoint)
        if self.max_retry < 0:
            raise ValueError("max_retry must not be negative")


Transport = Callable[[str, str, dict[str, str], "bytes | None", float], HttpResponse]
Signer = Callable[..., None]


def _lower_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {str(k).lower(): str(v) for k, v in headers.items()}


def _urllib_transport(
    method: str, url: str, headers: dict[str, str], body: bytes | None, timeout: float
) -> HttpResponse:
    req = urllib.request.Request(url, data=body, headers=headers, method=method)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return HttpResponse(resp.status, _lower_headers(resp.headers), resp.read())
    except urllib.error.HTTPError as exc:
        return HttpResponse(exc.code, _lower_headers(exc.headers or {}), exc.read())
    except (urllib.error.URLError, OSError) as exc:
        raise NetworkError(str(exc)) from exc


def exponential_backoff(base_delay: float, retry_count: int, max_delay: float) -> float:
    """Delay before the next attempt: base * 2**retry_count, capped at max_delay."""
    return min(base_delay * 2**retry_count, max_delay)


def should_retry(error: Exception) -> bool:
    """Network failures and server statuses 500..503 are retried."""
    if isinstance(error, NetworkError):
        return True
    if isinstance(error, ServerError):
        return 500 <= error.http_status <= 503
    return False


def parse_json_body(body: bytes, headers: Mapping[str, str]) -> Any:
    """Decode a JSON response body, raising ResponseError on failure."""
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise ResponseError(
            f"failed to decode json response: {exc}",
            _lower_headers(headers).get(LOG_REQUEST_ID),
        ) from exc


class Client:
    """Sends prepared requests to the log service with signing and retries."""

    def __init__(
        self,
        config: ClientConfig,
        transport: Transport | None = None,
        signer: Signer | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.config = config
        self._transport = transport or _urllib_transport
        self._signer = signer
        self._sleep = sleep or time.sleep

    def build_host(self, project: str | None) -> str:
        endpoint = self.config.endpoint
        if project is not None:
            return f"{endpoint.scheme}{project}.{endpoint.domain}"
        return f"{endpoint.scheme}{endpoint.domain}"

    def build_url(
        self, host: str, path: str, query_params: Sequence[tuple[str, str]] | None
    ) -> str:
        url = f"{host}{path}"
        parts = urllib.parse.urlsplit(url)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"invalid url: {url!r}")
        if query_params:
            url = f"{url}?{urllib.parse.urlencode(list(query_params))}"
        return url

    def send(self, request: PreparedRequest) -> Response:
        """Perform the request and return the parsed response."""
        headers = _lower_headers(request.headers)
        if request.content_type is not None:
            headers["content-type"] = request.content_type
        body = self._request_body(request, headers)
        headers.setdefault(LOG_BODY_RAW_SIZE, str(len(body) if body is not None else 0))
        resp = self._send_http(request, headers, body)
        parsed = request.parse(resp.body, resp.headers)
        return Response(body=parsed, headers=resp.headers, status=resp.status)

    def _request_body(self, request: PreparedRequest, headers: dict[str, str]) -> bytes | None:
        if request.body is None:
            return None
        if request.compress_type is None:
            return request.body
        codec = self.config.codecs.get(request.compress_type)
        if codec is None:
            raise RequestError(f"unsupported compress type: {request.compress_type}")
        headers[LOG_BODY_RAW_SIZE] = str(len(request.body))
        headers[LOG_COMPRESS_TYPE] = request.compress_type
        try:
            return codec[0](request.body)
        except Exception as exc:
            raise RequestError(f"failed to compress request body: {exc}") from exc

    def _send_http(
        self, request: PreparedRequest, headers: dict[str, str], body: bytes | None
    ) -> HttpResponse:
        headers.setdefault("user-agent", USER_AGENT)
        host = self.build_host(request.project)
        url = self.build_url(host, request.path, request.query_params)
        if self._signer is not None:
            try:
                self._signer(
                    self.config.access_key_id,
                    self.config.access_key_secret,
                    self.config.security_token,
                    request.method,
                    request.path,
                    headers,
                    list(request.query_params or []),
                    body,
                )
            except Exception as exc:
                raise RequestError(f"failed to sign request: {exc}") from exc

        attempts = self.config.max_retry + 1
        for attempt in range(attempts):
            try:
                return self._send_signed(request.method, url, headers, body)
            except SlsError as err:
                logger.debug("fail to send on %d err: %s", attempt, err)
                if not should_retry(err) or attempt + 1 >= attempts:
                    raise
            self._sleep(
                exponential_backoff(
                    self.config.base_retry_backoff, attempt, self.config.max_retry_backoff
                )
            )
        raise SlsError("retry loop ended without a result")

    def _send_signed(
        self, method: str, url: str, headers: dict[str, str], body: bytes | None
    ) -> HttpResponse:
        if method not in SUPPORTED_METHODS:
            raise SlsError(f"unsupported HTTP method: {method}")
        resp = self._transport(method, url, dict(headers), body, self.config.request_timeout)
        resp_headers = _lower_headers(resp.headers)
        if resp.status != 200:
            raise server_error_from_response(
                resp.status, resp_headers.get(LOG_REQUEST_ID), resp.body
            )
        return HttpResponse(resp.status, resp_headers, self._decompress(resp.body, resp_headers))

    def _decompress(self, body: bytes, headers: dict[str, str]) -> bytes:
        compress_type = headers.get(LOG_COMPRESS_TYPE, "")
        if not compress_type:
            return body
        try:
            raw_size = int(headers.get(LOG_BODY_RAW_SIZE, "0"))
        except ValueError:
            raw_size = 0
        if raw_size == 0:
            return b""
        request_id = headers.get(LOG_REQUEST_ID)
        codec = self.config.codecs.get(compress_type)
        if codec is None:
            raise ResponseError(f"unsupported compress type: {compress_type}", request_id)
        try:
            return codec[1](body, raw_size)
        except Exception as exc:
            raise ResponseError(
                f"failed to decompress response with {compress_type}: {exc}", request_id
            ) from exc