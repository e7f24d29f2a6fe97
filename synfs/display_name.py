"""
Display-name resolution for virtual paths.

A path's display name is looked up at most once per path instance. Lookup
failures degrade to the entity id so that formatting a path never raises;
the degraded value is memoized like a successful one.
"""

import threading
from typing import Callable, Generic, Optional, TypeVar

from client.schemas import EntityMetadata
from common.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

EntityLookup = Callable[[str, Optional[int]], EntityMetadata]

_UNSET = object()


class ComputeOnce(Generic[T]):
    """
    Thread-safe memoizing cell.

    The factory runs exactly once even when several threads race on the first
    get(): the fast path reads without locking, the slow path re-checks under
    an instance-scoped lock.
    """

    def __init__(self, factory: Callable[[], T]):
        self._factory = factory
        self._lock = threading.Lock()
        self._value = _UNSET

    def get(self) -> T:
        value = self._value
        if value is _UNSET:
            with self._lock:
                value = self._value
                if value is _UNSET:
                    value = self._factory()
                    self._value = value
        return value

    @property
    def computed(self) -> bool:
        return self._value is not _UNSET


def resolve_display_name(
    entity_id: str,
    version: Optional[int],
    lookup: Optional[EntityLookup]
) -> str:
    """
    Return the entity's name, or the entity id when it cannot be fetched.

    Args:
        entity_id: Synapse ID
        version: Optional version number
        lookup: Metadata lookup (None when the path has no filesystem)
    """
    if lookup is None:
        return entity_id
    try:
        return lookup(entity_id, version).name or entity_id
    except Exception as e:
        logger.debug(f"Falling back to entity id for display name of {entity_id}: {e}")
        return entity_id
