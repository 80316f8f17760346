from __future__ import annotations

import importlib
import uuid
from typing import Any, Callable


def import_from_path(path: str) -> Callable[..., Any]:
    """Resuelve un provider "paquete.modulo:funcion" (COLLABORATORS_PROVIDER)."""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Expected 'module:function', got {path!r}")

    module = importlib.import_module(module_name)
    provider = getattr(module, attr, None)
    if provider is None:
        raise ValueError(f"{module_name} has no attribute {attr!r}")
    # una clase es callable pero no es un provider
    if isinstance(provider, type) or not callable(provider):
        raise ValueError(f"Collaborators provider is not a function: {path}")
    return provider


def new_request_id() -> str:
    # corto: solo correlaciona las líneas in/out de un mismo evento en los logs
    return uuid.uuid4().hex[:12]
