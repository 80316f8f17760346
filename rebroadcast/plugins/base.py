from __future__ import annotations

from typing import Protocol

from rebroadcast.admission.schema import MutedPage, Relationship


class RelationshipLookup(Protocol):
    """Relación source/target. Errores: RelationshipLookupError (no fatal)."""
    async def query(self, source: str, target: str) -> Relationship: ...


class MutedSource(Protocol):
    """Una página de usuarios muteados. cursor "-1" = primera página, "0" = fin."""
    async def page(self, cursor: str = "-1") -> MutedPage: ...


class Broadcaster(Protocol):
    """
    Acción de re-broadcast de un post admitido.
    RecoverableBroadcastError = duplicado / ya no existe; cualquier otro error es fatal.
    """
    async def rebroadcast(self, post_id: int) -> None: ...
