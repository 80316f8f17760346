from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List

from rebroadcast.core.errors import ConfigError
from rebroadcast.infra.utils import import_from_path
from rebroadcast.plugins.base import Broadcaster, MutedSource, RelationshipLookup


@dataclass
class Collaborators:
    lookup: RelationshipLookup
    muted: MutedSource
    broadcaster: Broadcaster
    # recursos a cerrar al apagar (clientes http, etc.)
    closers: List[Callable[[], Awaitable[None]]] = field(default_factory=list)

    @classmethod
    def from_settings(cls, settings: Any) -> "Collaborators":
        """
        settings.COLLABORATORS_PROVIDER = "module:function"; la función
        recibe settings y devuelve un Collaborators (live o fixtures).
        """
        try:
            provider_fn = import_from_path(settings.COLLABORATORS_PROVIDER)
        except (ImportError, ValueError) as e:
            raise ConfigError(f"Cannot load collaborators provider: {e}") from e

        provided = provider_fn(settings)
        if not isinstance(provided, cls):
            raise ConfigError(
                f"{settings.COLLABORATORS_PROVIDER} returned {type(provided).__name__}, expected Collaborators"
            )
        return provided

    async def aclose(self) -> None:
        for close in self.closers:
            await close()
