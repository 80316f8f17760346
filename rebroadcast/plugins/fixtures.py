from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

from rebroadcast.admission.schema import MutedPage, Relationship, User
from rebroadcast.core.errors import RelationshipLookupError
from rebroadcast.plugins.registry import Collaborators


class FixtureRelationshipLookup:
    """
    Relaciones fijas por handle de origen (case-insensitive):
        {"sourceFollows": (True, False), "bothFollow": (True, True)}
    Un handle desconocido no sigue ni es seguido.
    """

    def __init__(
        self,
        relationships: Optional[Dict[str, Tuple[bool, bool]]] = None,
        error: Optional[Exception] = None,
    ):
        self.relationships = {k.casefold(): v for k, v in (relationships or {}).items()}
        self.error = error
        self.calls: List[Tuple[str, str]] = []

    async def query(self, source: str, target: str) -> Relationship:
        self.calls.append((source, target))
        if self.error is not None:
            raise RelationshipLookupError(str(self.error)) from self.error

        source_follows, target_follows = self.relationships.get(source.casefold(), (False, False))
        return Relationship(source_follows_target=source_follows, target_follows_source=target_follows)


class FixtureMutedSource:
    """Páginas encadenadas por cursor: "-1" -> ... -> next_cursor_str "0"."""

    def __init__(self, pages: Optional[Dict[str, MutedPage]] = None):
        self.pages = pages or {}
        self.requested: List[str] = []

    @classmethod
    def from_ids(cls, *pages: Iterable[int]) -> "FixtureMutedSource":
        chained: Dict[str, MutedPage] = {}
        cursor = "-1"
        for i, ids in enumerate(pages):
            nxt = str(i + 1) if i + 1 < len(pages) else "0"
            chained[cursor] = MutedPage(
                users=[User(id=uid, screen_name=f"muted_{uid}") for uid in ids],
                next_cursor_str=nxt,
            )
            cursor = nxt
        return cls(chained)

    async def page(self, cursor: str = "-1") -> MutedPage:
        self.requested.append(cursor)
        return self.pages.get(cursor, MutedPage())


class FixtureBroadcaster:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.broadcast: List[int] = []

    async def rebroadcast(self, post_id: int) -> None:
        if self.error is not None:
            raise self.error
        self.broadcast.append(post_id)


def provide_collaborators(settings: Any) -> Collaborators:
    # sin red: nadie sigue a nadie, sin muteados, los retweets se registran en memoria
    return Collaborators(
        lookup=FixtureRelationshipLookup(),
        muted=FixtureMutedSource(),
        broadcaster=FixtureBroadcaster(),
    )
