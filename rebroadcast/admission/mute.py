from __future__ import annotations

from typing import List, Set

from rebroadcast.core.errors import MutedListError
from rebroadcast.core.logging import log_event
from rebroadcast.core.memberset import MemberSet
from rebroadcast.plugins.base import MutedSource

FIRST_CURSOR = "-1"
LAST_CURSOR = "0"


async def populate_muted(source: MutedSource, muted_ids: MemberSet, replace: bool = False) -> int:
    """
    Recorre todas las páginas de muteados (cursor hasta "0") y las carga
    en el set. replace=True hace un swap completo (refresh), si no se agregan.
    Devuelve cuántos ids se leyeron.
    """
    log_event("muted_list_load", detail="requesting muted users")

    ids: List[int] = []
    seen: Set[str] = set()
    cursor = FIRST_CURSOR

    while True:
        if cursor in seen:
            raise MutedListError(f"Muted list cursor loop detected at cursor {cursor}")
        seen.add(cursor)

        page = await source.page(cursor)
        for user in page.users:
            ids.append(user.id)
            log_event("muted_user", user_id=user.id, screen_name=user.screen_name)

        cursor = page.next_cursor_str or LAST_CURSOR
        if cursor == LAST_CURSOR:
            break
        log_event("muted_list_load", detail="next page", cursor=cursor)

    if replace:
        muted_ids.replace(ids)
    else:
        for uid in ids:
            muted_ids.add(uid)

    log_event("muted_list_load", detail="done", count=len(ids))
    return len(ids)
