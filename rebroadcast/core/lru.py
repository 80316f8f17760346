from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Generic, Hashable, List, Optional, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class BoundedCache(Generic[K, V]):
    """
    LRU de capacidad fija, seguro para uso concurrente.

    - add(): inserta o actualiza y marca la entrada como la más reciente.
      Si se supera la capacidad, desaloja la menos reciente.
    - get(): lookup puro, NO modifica el orden de recencia. Los gates de
      duplicados dependen de esto para sondear sin "tocar" la entrada.

    Un miss no es un error: get() devuelve (None, False).
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1 (got {capacity})")
        self.capacity = capacity
        self._items: "OrderedDict[K, V]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: K) -> Tuple[Optional[V], bool]:
        with self._lock:
            if key in self._items:
                return self._items[key], True
            return None, False

    def add(self, key: K, value: V) -> Optional[K]:
        """Devuelve la key desalojada (o None)."""
        with self._lock:
            if key in self._items:
                self._items.move_to_end(key)
            self._items[key] = value
            if len(self._items) > self.capacity:
                evicted, _ = self._items.popitem(last=False)
                return evicted
            return None

    def remove(self, key: K) -> bool:
        with self._lock:
            if key not in self._items:
                return False
            del self._items[key]
            return True

    def keys(self) -> List[K]:
        # de la menos reciente a la más reciente
        with self._lock:
            return list(self._items.keys())

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
