"""
Trigger Registry - Maps marker keywords to trigger handlers.

One map, one binding per keyword:

- Singleton(handler): the same instance serves every resolution.
- Factory(constructor): a fresh instance per resolution, for handlers
  with per-invocation state.

Keywords are stored uppercase. Registering an already bound keyword
replaces the old binding whichever kind it was (last write wins).
"""

from dataclasses import dataclass, field
from threading import Lock
from typing import Callable

from genowa.errors import UnknownTrigger
from genowa.vocabulary.keywords import is_valid_keyword
from genowa.observability import get_logger
from genowa.triggers.base import Trigger


logger = get_logger("triggers.registry")


@dataclass(frozen=True)
class Singleton:
    """Binding to one shared handler."""
    handler: Trigger


@dataclass(frozen=True)
class Factory:
    """Binding to a handler constructor."""
    constructor: Callable[[], Trigger]


Binding = Singleton | Factory


def normalize_keyword(keyword: str) -> str:
    key = keyword.strip().upper()
    if not is_valid_keyword(key):
        raise ValueError(f"Invalid trigger keyword: {keyword!r}")
    return key


@dataclass
class TriggerRegistry:
    """
    Registry of trigger bindings.

    Constructed once at startup and handed to every driver. Runs on other
    threads resolve from it concurrently, so access goes through a lock.
    """
    _bindings: dict[str, Binding] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def register(self, keyword: str, factory: Callable[[], Trigger]) -> None:
        """Bind `keyword` to a factory producing a fresh handler per use."""
        self._bind(keyword, Factory(factory))

    def register_singleton(self, keyword: str, handler: Trigger) -> None:
        """Bind `keyword` to one shared handler instance."""
        self._bind(keyword, Singleton(handler))

    def _bind(self, keyword: str, binding: Binding) -> None:
        key = normalize_keyword(keyword)
        with self._lock:
            previous = self._bindings.get(key)
            self._bindings[key] = binding
        if previous is not None:
            logger.debug("Keyword %s rebound (%s -> %s)", key, type(previous).__name__, type(binding).__name__)

    def unregister(self, keyword: str) -> Binding | None:
        """Remove and return a binding."""
        with self._lock:
            return self._bindings.pop(keyword.strip().upper(), None)

    def get(self, keyword: str) -> Trigger | None:
        """Resolve a keyword, or None when nothing is bound."""
        with self._lock:
            binding = self._bindings.get(keyword.strip().upper())

        if isinstance(binding, Singleton):
            return binding.handler
        if isinstance(binding, Factory):
            return binding.constructor()
        return None

    def resolve(self, keyword: str) -> Trigger:
        """
        Resolve a keyword to a handler.

        Raises:
            UnknownTrigger: nothing is bound to the keyword
        """
        handler = self.get(keyword)
        if handler is None:
            raise UnknownTrigger(keyword.strip().upper())
        return handler

    def has_trigger(self, keyword: str) -> bool:
        with self._lock:
            return keyword.strip().upper() in self._bindings

    def binding(self, keyword: str) -> Binding | None:
        """Inspect the binding for a keyword without resolving it."""
        with self._lock:
            return self._bindings.get(keyword.strip().upper())

    def list_keywords(self) -> list[str]:
        """All bound keywords, sorted (for editors and the CLI)."""
        with self._lock:
            return sorted(self._bindings)

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings)

    def __contains__(self, keyword: str) -> bool:
        return self.has_trigger(keyword)


def create_registry() -> TriggerRegistry:
    """Factory for an empty trigger registry."""
    return TriggerRegistry()
