import base64
import json
from dataclasses import dataclass, field

import pytest

from hardware_topology.api.connector import TopologyConnector
from hardware_topology.core.errors import KeyNotFound, ParseFailure, PermissionDenied, StoreUnavailable
from hardware_topology.store.consul import ConsulConfig, ConsulKeyStore, HttpResponse


@dataclass
class FakeHttp:
    """Replays canned responses and records requests."""

    responses: list = field(default_factory=list)
    requests: list = field(default_factory=list)

    def request(self, method, url, headers, data=None):
        self.requests.append((method, url, headers, data))
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def ok(payload) -> HttpResponse:
    return HttpResponse(status=200, body=json.dumps(payload).encode("utf-8"))


def b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def make_store(*responses, token=None):
    http = FakeHttp(responses=list(responses))
    store = ConsulKeyStore(ConsulConfig(base_url="http://consul:8500/", token=token), http=http)
    return store, http


def test_values_are_base64_decoded():
    store, http = make_store(
        ok(
            [
                {"Key": "o2/hardware/flps/", "Value": None},
                {"Key": "o2/hardware/flps/flpOne/cards", "Value": b64('{"0":{"type":"CRU"}}')},
            ]
        )
    )

    values = store.get_raw_values_by_prefix("o2/hardware/flps")

    assert values == {"o2/hardware/flps/": None, "o2/hardware/flps/flpOne/cards": '{"0":{"type":"CRU"}}'}
    method, url, headers, _ = http.requests[0]
    assert method == "GET"
    assert url == "http://consul:8500/v1/kv/o2/hardware/flps?recurse=true"
    assert "X-Consul-Token" not in headers


def test_keys_scan_and_token_header():
    store, http = make_store(ok(["o2/hardware/flps/flpOne/cards"]), token="secret")

    assert store.get_keys_by_prefix("o2/hardware/flps") == ["o2/hardware/flps/flpOne/cards"]
    _, url, headers, _ = http.requests[0]
    assert url.endswith("?keys=true")
    assert headers["X-Consul-Token"] == "secret"


def test_status_codes_are_translated():
    store, _ = make_store(
        HttpResponse(status=404, body=b""),
        HttpResponse(status=403, body=b"ACL not found"),
        HttpResponse(status=500, body=b"rpc error"),
    )

    with pytest.raises(KeyNotFound):
        store.get_keys_by_prefix("missing")
    with pytest.raises(PermissionDenied):
        store.write_key_value("a/b", "{}")
    with pytest.raises(StoreUnavailable, match="rpc error"):
        store.get_raw_values_by_prefix("x")


def test_transport_failure_is_store_unavailable():
    store, _ = make_store(ConnectionRefusedError("refused"))

    with pytest.raises(StoreUnavailable):
        store.get_leader_status()


def test_leader_status():
    store, _ = make_store(ok("10.0.0.1:8300"), ok(""))

    assert store.get_leader_status() == "10.0.0.1:8300"
    with pytest.raises(StoreUnavailable):
        store.get_leader_status()


def test_write_puts_raw_value():
    store, http = make_store(HttpResponse(status=200, body=b"true"))

    assert store.write_key_value("o2/components/readoutcard/hostA/cru/123/0", '{"link":"true"}')
    method, url, _, data = http.requests[0]
    assert method == "PUT"
    assert url == "http://consul:8500/v1/kv/o2/components/readoutcard/hostA/cru/123/0"
    assert data == b'{"link":"true"}'


def test_rejected_write_raises():
    store, _ = make_store(HttpResponse(status=200, body=b"false"))

    with pytest.raises(StoreUnavailable):
        store.write_key_value("a", "b")


@pytest.mark.parametrize(
    "entry",
    [
        {"Key": "o2/hardware/flps/hostA/cards", "Value": base64.b64encode(b"\xff\xfe").decode("ascii")},
        {"Key": "o2/hardware/flps/hostA/cards", "Value": "not base64!"},
        {"Value": b64("{}")},
    ],
)
def test_undecodable_entries_raise_parse_failure(entry):
    store, _ = make_store(ok([entry]))

    with pytest.raises(ParseFailure):
        store.get_raw_values_by_prefix("o2/hardware/flps")


def test_undecodable_value_is_reported_by_connector():
    value = base64.b64encode(b"\xff\xfe").decode("ascii")
    store, _ = make_store(ok([{"Key": "o2/hardware/flps/hostA/cards", "Value": value}]))

    resp = TopologyConnector(store, {}).get_crus()

    assert resp.status == 502
    assert "o2/hardware/flps/hostA/cards" in resp.body["message"]
