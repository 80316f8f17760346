from __future__ import annotations

import threading
from collections import Counter, deque
from typing import Any, Deque, Dict, List


class VerdictLog:
    """
    Auditoría in-memory de los últimos N verdicts + contadores por razón.
    Solo memoria del proceso: se pierde al reiniciar.
    """
    def __init__(self, maxlen: int = 500):
        self._events: Deque[Dict[str, Any]] = deque(maxlen=maxlen)
        self._counts: Counter[str] = Counter()
        self._lock = threading.Lock()

    def append(self, evt: Dict[str, Any]) -> None:
        with self._lock:
            self._events.append(evt)
            self._counts[evt.get("reason") or "admitted"] += 1

    def list(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._events)

    def counts(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counts)
