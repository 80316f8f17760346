from __future__ import annotations

from typing import Any, Optional

import httpx

from rebroadcast.admission.schema import MutedPage, Relationship
from rebroadcast.core.errors import (
    BroadcastError,
    ConfigError,
    MutedListError,
    RecoverableBroadcastError,
    RelationshipLookupError,
)
from rebroadcast.infra.http import TwitterApiError, TwitterClient
from rebroadcast.plugins.registry import Collaborators

# errores de consistencia eventual de la API: se puede seguir
STATUS_IS_A_DUPLICATE = 327
DOES_NOT_EXIST = 144
RECOVERABLE_CODES = {STATUS_IS_A_DUPLICATE, DOES_NOT_EXIST}


class LiveRelationshipLookup:
    def __init__(self, client: TwitterClient):
        self.client = client

    async def query(self, source: str, target: str) -> Relationship:
        try:
            data = await self.client.friendship(source, target)
        except TwitterApiError as e:
            raise RelationshipLookupError(str(e)) from e

        rel = data.get("relationship") or {}
        return Relationship(
            source_follows_target=bool((rel.get("source") or {}).get("following")),
            target_follows_source=bool((rel.get("target") or {}).get("following")),
        )


class LiveMutedSource:
    def __init__(self, client: TwitterClient):
        self.client = client

    async def page(self, cursor: str = "-1") -> MutedPage:
        try:
            data = await self.client.muted_users(cursor)
        except TwitterApiError as e:
            raise MutedListError(f"Unable to get list of muted users: {e}") from e
        return MutedPage.model_validate(data)


class LiveBroadcaster:
    def __init__(self, client: TwitterClient):
        self.client = client

    async def rebroadcast(self, post_id: int) -> None:
        try:
            await self.client.retweet(post_id)
        except TwitterApiError as e:
            recoverable = RECOVERABLE_CODES.intersection(e.codes)
            if recoverable:
                raise RecoverableBroadcastError(min(recoverable), str(e)) from e
            raise BroadcastError(f"Could not retweet {post_id}: {e}") from e


def provide_collaborators(settings: Any, transport: Optional[httpx.AsyncBaseTransport] = None) -> Collaborators:
    if not settings.TWITTER_BEARER_TOKEN:
        raise ConfigError("TWITTER_BEARER_TOKEN is empty (required by the live collaborators provider)")

    client = TwitterClient(
        base_url=settings.TWITTER_API_BASE,
        bearer_token=settings.TWITTER_BEARER_TOKEN,
        timeout_sec=settings.TWITTER_TIMEOUT_SEC,
        retries=settings.TWITTER_RETRIES,
        transport=transport,
    )
    return Collaborators(
        lookup=LiveRelationshipLookup(client),
        muted=LiveMutedSource(client),
        broadcaster=LiveBroadcaster(client),
        closers=[client.aclose],
    )
