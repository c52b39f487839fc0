# agentstack/core/resources.py
"""
Process-wide lazily created resources.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LazyResource(Generic[T]):
    """
    Once-cell: ``factory`` runs at most once per process, on first ``get()``.

    Concurrent first use is serialized by a lock so only one instance is
    ever constructed; later calls take the lock-free fast path.
    """

    def __init__(self, factory: Callable[[], T], name: str | None = None) -> None:
        self._factory = factory
        self._name = name or getattr(factory, "__name__", "resource")
        self._lock = threading.Lock()
        self._value: T | None = None
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def get(self) -> T:
        if self._initialized:
            return self._value  # type: ignore[return-value]
        with self._lock:
            if not self._initialized:
                logger.info("Creating shared resource: %s", self._name)
                self._value = self._factory()
                self._initialized = True
        return self._value  # type: ignore[return-value]

    def reset(self) -> None:
        with self._lock:
            self._value = None
            self._initialized = False
