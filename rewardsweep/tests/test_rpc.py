"""Rate-limit transport behaviour."""

import httpx

from rewardsweep import rpc
from rewardsweep.rpc import _RateLimitTransport, new_rpc_client


def counting_transport(statuses):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(statuses[min(len(calls) - 1, len(statuses) - 1)], json={})

    return httpx.MockTransport(handler), calls


def test_resends_after_429(monkeypatch):
    monkeypatch.setattr(rpc.time, "sleep", lambda s: None)
    inner, calls = counting_transport([429, 429, 200])
    client = httpx.Client(transport=_RateLimitTransport(inner, max_retries=5))

    assert client.post("https://rpc.example.com", json={}).status_code == 200
    assert len(calls) == 3


def test_gives_up_after_max_retries(monkeypatch):
    sleeps = []
    monkeypatch.setattr(rpc.time, "sleep", sleeps.append)
    inner, calls = counting_transport([429])
    client = httpx.Client(transport=_RateLimitTransport(inner, max_retries=2))

    assert client.post("https://rpc.example.com", json={}).status_code == 429
    assert len(calls) == 3
    assert sleeps == [2.0, 4.0]


def test_other_errors_are_not_retried():
    inner, calls = counting_transport([500, 200])
    client = httpx.Client(transport=_RateLimitTransport(inner))

    assert client.post("https://rpc.example.com", json={}).status_code == 500
    assert len(calls) == 1


def test_new_rpc_client_installs_transport():
    client = new_rpc_client("https://rpc.example.com", "finalized")
    assert isinstance(client._provider.session._transport, _RateLimitTransport)


def test_honours_retry_after(monkeypatch):
    sleeps = []
    monkeypatch.setattr(rpc.time, "sleep", sleeps.append)
    responses = iter(
        [
            httpx.Response(429, headers={"Retry-After": "1.5"}),
            httpx.Response(429, headers={"Retry-After": "3600"}),
            httpx.Response(429, headers={"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"}),
            httpx.Response(200, json={}),
        ]
    )
    inner = httpx.MockTransport(lambda request: next(responses))
    client = httpx.Client(transport=_RateLimitTransport(inner))

    assert client.post("https://rpc.example.com", json={}).status_code == 200
    assert sleeps == [1.5, 30.0, 6.0]
