"""Bounded LRU cache of resolved mesh parts, keyed by asset URL or path."""

import logging
from collections import OrderedDict
from typing import Callable, Iterable, Sequence
from urllib.parse import urlsplit

from particle_weaver.shared.constants import DEFAULT_CACHE_CAPACITY, SUPPORTED_MODEL_FORMATS
from particle_weaver.shared.errors import InvalidRequest
from .models import MeshPart

log = logging.getLogger(__name__)


def is_supported_model_key(key: str, formats: Iterable[str] = SUPPORTED_MODEL_FORMATS) -> bool:
    """True when the key's path ends in a supported model extension."""
    if not key:
        return False
    path = urlsplit(key).path.lower()
    return any(path.endswith(fmt) for fmt in formats)


class ModelCache:
    def __init__(self, capacity: int = DEFAULT_CACHE_CAPACITY,
                 formats: Sequence[str] = SUPPORTED_MODEL_FORMATS) -> None:
        if capacity < 1:
            raise InvalidRequest(f"cache capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.formats = tuple(fmt.lower() for fmt in formats)
        self._entries: "OrderedDict[str, tuple[MeshPart, ...]]" = OrderedDict()
        self.hits = self.misses = self.evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def validate_key(self, key: str) -> None:
        if not is_supported_model_key(key, self.formats):
            raise InvalidRequest(f"Invalid model URL or unsupported format: {key}")

    def get_or_load(self, key: str, loader: Callable[[], Sequence[MeshPart]]) -> tuple[MeshPart, ...]:
        self.validate_key(key)
        if key in self._entries:
            self._entries.move_to_end(key)
            self.hits += 1
            log.debug("Model cache hit: %s", key)
            return self._entries[key]

        self.misses += 1
        parts = tuple(loader())
        self._entries[key] = parts
        log.info("Model cached: %s (%d parts)", key, len(parts))
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            self.evictions += 1
            log.info("Model cache evicted: %s", evicted)
        return parts

    def evict(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()
