from __future__ import annotations

import enum
import logging
from typing import Optional

from rebroadcast.core.errors import RelationshipLookupError
from rebroadcast.core.logging import log_event
from rebroadcast.core.lru import BoundedCache
from rebroadcast.plugins.base import RelationshipLookup

FOLLOWS = 1
DOES_NOT_FOLLOW = 0


class FollowStatus(enum.Enum):
    FOLLOWS = "follows"
    DOES_NOT_FOLLOW = "does_not_follow"


class FollowResolver:
    """
    ¿El autor sigue al target configurado?

    Orden: autor == target -> follows; target vacío -> follows; cache (1/0);
    query en vivo + política (one-way o mutual) y se cachea el resultado.

    Un cambio de modo en caliente no invalida lo ya cacheado hasta que la
    entrada se desaloje.
    """

    def __init__(
        self,
        cache: BoundedCache[str, int],
        lookup: RelationshipLookup,
        target: str = "",
        mutual: bool = False,
    ):
        self.cache = cache
        self.lookup = lookup
        self.target = target
        self.mutual = mutual

    async def resolve(self, source: str, target: Optional[str] = None) -> FollowStatus:
        if target is None:
            target = self.target

        if source.casefold() == target.casefold():
            log_event("follow_resolve", source=source, result="follows", detail="source is the target")
            return FollowStatus.FOLLOWS

        if not target:
            return FollowStatus.FOLLOWS

        cached, present = self.cache.get(source)
        if present:
            log_event("follow_resolve", source=source, cache="hit", value=cached)
            return FollowStatus.FOLLOWS if cached == FOLLOWS else FollowStatus.DOES_NOT_FOLLOW

        log_event("follow_resolve", source=source, target=target, cache="miss", mutual=self.mutual)

        try:
            rel = await self.lookup.query(source, target)
        except RelationshipLookupError as e:
            # no es fatal: este evento se trata como "no sigue" y no se cachea
            log_event("follow_lookup_error", level=logging.WARNING, source=source, target=target, error=str(e))
            return FollowStatus.DOES_NOT_FOLLOW

        if self.mutual:
            follows = rel.source_follows_target and rel.target_follows_source
        else:
            follows = rel.source_follows_target

        self.cache.add(source, FOLLOWS if follows else DOES_NOT_FOLLOW)
        log_event(
            "follow_resolve",
            source=source,
            target=target,
            source_follows=rel.source_follows_target,
            target_follows=rel.target_follows_source,
            mutual=self.mutual,
            result="follows" if follows else "does_not_follow",
        )
        return FollowStatus.FOLLOWS if follows else FollowStatus.DOES_NOT_FOLLOW
