import asyncio

import httpx
import pytest

from rebroadcast.core.errors import (
    BroadcastError,
    ConfigError,
    MutedListError,
    RecoverableBroadcastError,
    RelationshipLookupError,
)
from rebroadcast.core.memberset import MemberSet
from rebroadcast.admission.follow import FollowResolver, FollowStatus
from rebroadcast.admission.mute import populate_muted
from rebroadcast.core.lru import BoundedCache
from rebroadcast.plugins.twitter_live import provide_collaborators


def live(make_settings, handler):
    settings = make_settings(TWITTER_BEARER_TOKEN="token", TWITTER_RETRIES=0)
    return provide_collaborators(settings, transport=httpx.MockTransport(handler))


def test_requires_token(make_settings):
    with pytest.raises(ConfigError):
        provide_collaborators(make_settings(TWITTER_BEARER_TOKEN=""))


def test_relationship_query(make_settings):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"relationship": {"source": {"following": True}, "target": {"following": False}}},
        )

    collab = live(make_settings, handler)

    async def go():
        try:
            return await collab.lookup.query("fan", "target")
        finally:
            await collab.aclose()

    rel = asyncio.run(go())

    assert rel.source_follows_target is True
    assert rel.target_follows_source is False
    assert seen[0].url.path.endswith("/friendships/show.json")
    assert seen[0].url.params["source_screen_name"] == "fan"
    assert seen[0].url.params["target_screen_name"] == "target"
    assert seen[0].headers["Authorization"] == "Bearer token"


def test_relationship_error_is_recoverable_type(make_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"errors": [{"code": 88, "message": "Rate limit exceeded"}]})

    collab = live(make_settings, handler)

    async def go():
        try:
            await collab.lookup.query("fan", "target")
        finally:
            await collab.aclose()

    with pytest.raises(RelationshipLookupError):
        asyncio.run(go())


@pytest.mark.parametrize("code,expected", [(327, RecoverableBroadcastError), (144, RecoverableBroadcastError), (32, BroadcastError)])
def test_retweet_error_classification(make_settings, code, expected):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path.endswith("/statuses/retweet/42.json")
        return httpx.Response(403, json={"errors": [{"code": code, "message": "nope"}]})

    collab = live(make_settings, handler)

    async def go():
        try:
            await collab.broadcaster.rebroadcast(42)
        finally:
            await collab.aclose()

    with pytest.raises(expected):
        asyncio.run(go())


def test_retweet_ok(make_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": 99})

    collab = live(make_settings, handler)

    async def go():
        try:
            await collab.broadcaster.rebroadcast(42)
        finally:
            await collab.aclose()

    asyncio.run(go())


def test_muted_pages(make_settings):
    pages = {
        "-1": {"users": [{"id": 1234, "screen_name": "cake"}], "next_cursor_str": "1"},
        "1": {"users": [{"id": 4567, "screen_name": "recurse_this"}], "next_cursor_str": "0"},
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=pages[request.url.params["cursor"]])

    collab = live(make_settings, handler)
    muted = MemberSet()

    async def go():
        try:
            return await populate_muted(collab.muted, muted)
        finally:
            await collab.aclose()

    assert asyncio.run(go()) == 2
    assert muted.get(1234) and muted.get(4567)


def test_muted_list_failure_is_fatal(make_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"errors": [{"code": 32, "message": "Could not authenticate you."}]})

    collab = live(make_settings, handler)

    async def go():
        try:
            await populate_muted(collab.muted, MemberSet())
        finally:
            await collab.aclose()

    with pytest.raises(MutedListError):
        asyncio.run(go())


def test_server_errors_are_retried(make_settings):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(503, text="over capacity")
        return httpx.Response(200, json={"relationship": {"source": {"following": True}, "target": {"following": True}}})

    settings = make_settings(TWITTER_BEARER_TOKEN="token", TWITTER_RETRIES=1)
    collab = provide_collaborators(settings, transport=httpx.MockTransport(handler))

    async def go():
        try:
            return await collab.lookup.query("a", "b")
        finally:
            await collab.aclose()

    rel = asyncio.run(go())
    assert rel.target_follows_source is True
    assert len(calls) == 2


def test_transport_error_is_lookup_error(make_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.RemoteProtocolError("server hung up", request=request)

    collab = live(make_settings, handler)

    async def go():
        try:
            await collab.lookup.query("fan", "target")
        finally:
            await collab.aclose()

    with pytest.raises(RelationshipLookupError):
        asyncio.run(go())


def test_resolver_survives_live_transport_error(make_settings):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.RemoteProtocolError("server hung up", request=request)

    collab = live(make_settings, handler)
    cache = BoundedCache(8)
    resolver = FollowResolver(cache=cache, lookup=collab.lookup, target="target")

    async def go():
        try:
            return await resolver.resolve("someone")
        finally:
            await collab.aclose()

    assert asyncio.run(go()) == FollowStatus.DOES_NOT_FOLLOW
    assert len(calls) == 1
    # no se cachea: el próximo evento vuelve a consultar
    assert "someone" not in cache
    assert len(cache) == 0


def test_transport_errors_are_retried(make_settings):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"relationship": {"source": {"following": True}, "target": {"following": False}}})

    settings = make_settings(TWITTER_BEARER_TOKEN="token", TWITTER_RETRIES=1)
    collab = provide_collaborators(settings, transport=httpx.MockTransport(handler))

    async def go():
        try:
            return await collab.lookup.query("a", "b")
        finally:
            await collab.aclose()

    rel = asyncio.run(go())
    assert rel.source_follows_target is True
    assert len(calls) == 2
