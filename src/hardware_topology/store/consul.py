"""
Consul key store gateway.

This is a minimal Consul KV client over the HTTP API with no third party deps.

Endpoints used
GET /v1/kv/<prefix>?recurse=true   values, base64 encoded
GET /v1/kv/<prefix>?keys=true      key names only
GET /v1/status/leader              leader address, empty string when none
PUT /v1/kv/<key>                   single value write

Transport goes through a small HttpClient interface so tests can plug in a
fake without sockets. HTTP status codes are translated into the error taxonomy
in core.errors.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.error import HTTPError
from urllib.parse import quote
from urllib.request import Request, urlopen

from hardware_topology.core.errors import KeyNotFound, ParseFailure, PermissionDenied, StoreUnavailable
from hardware_topology.store.base import KeyStoreGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: bytes


class HttpClient(Protocol):
    """Simple http client interface for testability."""

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        data: bytes | None = None,
    ) -> HttpResponse:
        """Send a request and return status and body. Raises OSError on transport failure."""


@dataclass
class UrllibHttpClient(HttpClient):
    """Default http client using urllib."""

    timeout_seconds: int = 10

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        data: bytes | None = None,
    ) -> HttpResponse:
        req = Request(url, data=data, headers=headers, method=method)
        try:
            with urlopen(req, timeout=self.timeout_seconds) as resp:
                return HttpResponse(status=resp.status, body=resp.read())
        except HTTPError as exc:
            return HttpResponse(status=exc.code, body=exc.read() or b"")


@dataclass(frozen=True)
class ConsulConfig:
    """
    Consul connection configuration.

    base_url
    Scheme, host and port of the agent, for example http://localhost:8500

    token
    Optional ACL token, sent as X-Consul-Token.
    """

    base_url: str = "http://127.0.0.1:8500"
    token: str | None = None
    timeout_seconds: int = 10


class ConsulKeyStore(KeyStoreGateway):
    """Key store gateway backed by the Consul HTTP API."""

    def __init__(self, config: ConsulConfig | None = None, http: HttpClient | None = None) -> None:
        self._config = config or ConsulConfig()
        self._http = http or UrllibHttpClient(timeout_seconds=self._config.timeout_seconds)

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Accept": "application/json"}
        if self._config.token:
            headers["X-Consul-Token"] = self._config.token
        return headers

    def _url(self, path: str, query: str = "") -> str:
        url = self._config.base_url.rstrip("/") + path
        if query:
            url += "?" + query
        return url

    def _send(self, method: str, url: str, data: bytes | None = None) -> HttpResponse:
        try:
            resp = self._http.request(method, url, self._headers(), data)
        except OSError as exc:
            raise StoreUnavailable(f"unable to reach consul at {self._config.base_url}: {exc}") from exc

        if resp.status == 404:
            raise KeyNotFound(f"404 - key not found: {url}")
        if resp.status == 403:
            raise PermissionDenied(f"403 - permission denied: {url}")
        if resp.status >= 400:
            detail = resp.body.decode("utf-8", errors="replace").strip()
            raise StoreUnavailable(f"{resp.status} - consul error: {detail}")
        return resp

    def _get_json(self, path: str, query: str = "") -> Any:
        resp = self._send("GET", self._url(path, query))
        try:
            return json.loads(resp.body.decode("utf-8"))
        except ValueError as exc:
            raise StoreUnavailable(f"consul returned invalid json for {path}") from exc

    def get_raw_values_by_prefix(self, prefix: str) -> dict[str, str | None]:
        entries = self._get_json("/v1/kv/" + quote(prefix, safe="/"), "recurse=true")
        values: dict[str, str | None] = {}
        for entry in entries or []:
            if not isinstance(entry, dict) or not isinstance(entry.get("Key"), str):
                raise ParseFailure(f"consul returned an entry without a key under {prefix}")
            key = entry["Key"]
            encoded = entry.get("Value")
            if encoded is None:
                values[key] = None
                continue
            try:
                values[key] = base64.b64decode(encoded, validate=True).decode("utf-8")
            except (binascii.Error, TypeError, UnicodeDecodeError) as exc:
                raise ParseFailure(f"undecodable value under {key}: {exc}") from exc
        logger.debug("read %d values under %s", len(values), prefix)
        return values

    def get_keys_by_prefix(self, prefix: str) -> list[str]:
        keys = self._get_json("/v1/kv/" + quote(prefix, safe="/"), "keys=true")
        return [str(k) for k in keys or []]

    def get_leader_status(self) -> str:
        leader = self._get_json("/v1/status/leader")
        if not leader:
            raise StoreUnavailable("consul reports no cluster leader")
        return str(leader)

    def write_key_value(self, key: str, value: str) -> bool:
        resp = self._send("PUT", self._url("/v1/kv/" + quote(key, safe="/")), value.encode("utf-8"))
        ok = resp.body.strip() == b"true"
        if not ok:
            raise StoreUnavailable(f"consul did not accept write for {key}")
        return ok
