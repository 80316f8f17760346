from __future__ import annotations

import numbers
import threading
from typing import Iterable, List, Literal, NamedTuple, Set, Union


class MemberKey(NamedTuple):
    kind: Literal["id", "text"]
    value: Union[int, str]


RawKey = Union[int, str, MemberKey]


def normalize_key(raw: RawKey) -> MemberKey:
    """
    Identidad canónica de un miembro.

    Cualquier entero (int nativo, numpy.int32/int64, etc.) pasa a ("id", int).
    Los strings quedan como ("text", str) sin tocar: "1234" != 1234.
    Pasar a minúsculas es responsabilidad del caller.
    """
    if isinstance(raw, MemberKey):
        return raw
    if isinstance(raw, bool):
        raise TypeError("bool is not a valid member key")
    if isinstance(raw, numbers.Integral):
        return MemberKey("id", int(raw))
    if isinstance(raw, str):
        return MemberKey("text", raw)
    raise TypeError(f"unsupported member key type: {type(raw).__name__}")


class MemberSet:
    """Set sin límite ni desalojo para listas de bloqueo / permitidos."""

    def __init__(self, items: Iterable[RawKey] = ()):
        self._members: Set[MemberKey] = set()
        self._lock = threading.Lock()
        for item in items:
            self.add(item)

    def add(self, key: RawKey) -> None:
        k = normalize_key(key)
        with self._lock:
            self._members.add(k)

    def get(self, key: RawKey) -> bool:
        k = normalize_key(key)
        with self._lock:
            return k in self._members

    def delete(self, key: RawKey) -> None:
        k = normalize_key(key)
        with self._lock:
            self._members.discard(k)

    def replace(self, keys: Iterable[RawKey]) -> None:
        """Swap atómico del contenido completo (refresh de la lista de muteados)."""
        fresh = {normalize_key(k) for k in keys}
        with self._lock:
            self._members = fresh

    def members(self) -> List[MemberKey]:
        with self._lock:
            return list(self._members)

    def __contains__(self, key: object) -> bool:
        try:
            return self.get(key)  # type: ignore[arg-type]
        except TypeError:
            return False

    def __len__(self) -> int:
        with self._lock:
            return len(self._members)
