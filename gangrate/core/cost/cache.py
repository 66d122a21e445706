"""
Read-through cache with tag invalidation.

Tags are versioned. Each tag has a random version token in the backend, with
no expiry. An entry stores its value together with the version of every tag
it depends on, and is only served while all of those versions are current.
Purging a tag gives it a new token, which makes every entry that depends on it
stale at once. This needs nothing from the backend beyond get/set/add, so it
works the same on locmem, the database cache or Redis.

Versions of the tags passed to ``get_or_compute`` are read *before* the value
is computed. A purge that lands while the computation is running leaves the
new entry already stale, so it is recomputed on the next read.

Reads made while computing another entry (a campaign overview reading each
gang's rating) add their tag versions to the outer entry, so the outer entry
goes stale whenever any of the inner ones does.
"""

import logging
import threading
import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional, TypeVar

from gangrate.core.cost.errors import CacheTransportError
from gangrate.tracing import span
from gangrate.tracker import track

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Marks an outer entry that embedded a value computed without the cache.
_UNVERSIONED = object()

_recorder: ContextVar[Optional[Dict[Any, str]]] = ContextVar(
    "cost_cache_recorder", default=None
)


@dataclass(frozen=True)
class Tagged:
    """A computed value plus dependency tags discovered while computing it."""

    value: Any
    tags: FrozenSet[str] = frozenset()


def _unwrap(result):
    if isinstance(result, Tagged):
        return result.value, frozenset(result.tags)
    return result, frozenset()


@dataclass
class _Call:
    done: threading.Event = field(default_factory=threading.Event)
    result: Any = None
    error: Optional[BaseException] = None
    waiters: int = 0


class SingleFlight:
    """
    Collapse concurrent calls for the same key into one.

    The first caller for a key runs the function. Callers that arrive while it
    is running wait for it and get its result, or its exception.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._calls: Dict[str, _Call] = {}

    def do(self, key: str, fn: Callable[[], T]) -> T:
        with self._lock:
            call = self._calls.get(key)
            leader = call is None
            if leader:
                call = _Call()
                self._calls[key] = call
            else:
                call.waiters += 1

        if not leader:
            call.done.wait()
            if call.error is not None:
                raise call.error
            return call.result

        try:
            call.result = fn()
        except BaseException as e:
            call.error = e
            raise
        finally:
            with self._lock:
                self._calls.pop(key, None)
            call.done.set()
        return call.result

    def waiters(self, key: str) -> int:
        """Number of callers currently waiting on the call for ``key``."""
        with self._lock:
            call = self._calls.get(key)
            return call.waiters if call else 0

    def in_flight(self, key: str) -> bool:
        with self._lock:
            return key in self._calls

    def forget_all(self) -> None:
        with self._lock:
            self._calls.clear()


def _record(versions) -> None:
    recorded = _recorder.get()
    if recorded is None:
        return
    if versions is _UNVERSIONED:
        recorded[_UNVERSIONED] = ""
        return
    for tag, version in versions.items():
        recorded.setdefault(tag, version)


def _new_version() -> str:
    return uuid.uuid4().hex


class TaggedCache:
    """
    Tag-invalidated read-through cache over a Django cache backend.

    Args:
        backend: A Django cache, e.g. ``caches["cost_cache"]``
        namespace: Prefix for every key this cache writes
    """

    def __init__(self, backend, namespace: str = "cost"):
        self.backend = backend
        self.namespace = namespace
        self.flight = SingleFlight()

    def entry_key(self, key: str) -> str:
        return f"{self.namespace}:entry:{key}"

    def tag_key(self, tag: str) -> str:
        return f"{self.namespace}:tag:{tag}"

    def _current_versions(self, tags: Iterable[str]) -> Dict[str, str]:
        """Read the current version of each tag, creating missing ones."""
        tag_keys = {self.tag_key(t): t for t in tags}
        if not tag_keys:
            return {}
        try:
            found = self.backend.get_many(list(tag_keys))
            missing = [k for k in tag_keys if k not in found]
            if missing:
                for k in missing:
                    # add() keeps a version another process wrote first
                    self.backend.add(k, _new_version(), timeout=None)
                found.update(self.backend.get_many(missing))
        except Exception as e:
            raise CacheTransportError(f"Failed to read tag versions: {e}") from e

        if len(found) != len(tag_keys):
            raise CacheTransportError("Tag versions were not stored")
        return {tag_keys[k]: v for k, v in found.items()}

    def lookup(self, key: str):
        """
        Return ``(value, versions)`` for a valid entry, or None.

        Raises:
            CacheTransportError: If the backend fails
        """
        try:
            entry = self.backend.get(self.entry_key(key))
            if entry is None:
                return None
            versions = entry["versions"]
            current = self.backend.get_many([self.tag_key(t) for t in versions])
        except Exception as e:
            raise CacheTransportError(f"Failed to read cache entry {key}: {e}") from e

        for tag, version in versions.items():
            if current.get(self.tag_key(tag)) != version:
                return None
        return entry["value"], versions

    def _store(self, key: str, value, versions: Dict[str, str]) -> None:
        try:
            self.backend.set(
                self.entry_key(key),
                {"value": value, "versions": versions},
                timeout=None,
            )
        except Exception as e:
            logger.error(f"Failed to store cost cache entry {key}: {e}", exc_info=True)

    def _fill(self, key: str, tags: FrozenSet[str], compute: Callable):
        # Another caller may have stored it while we waited for the flight
        try:
            hit = self.lookup(key)
        except CacheTransportError:
            hit = None
        if hit is not None:
            return hit

        try:
            versions = self._current_versions(tags)
        except CacheTransportError as e:
            logger.warning(f"Cost cache unavailable, computing {key} directly: {e}")
            value, _ = _unwrap(compute())
            return value, _UNVERSIONED

        nested: Dict[Any, str] = {}
        token = _recorder.set(nested)
        try:
            with span("cost_cache_compute", key=key):
                value, discovered = _unwrap(compute())
        finally:
            _recorder.reset(token)

        if _UNVERSIONED in nested:
            return value, _UNVERSIONED

        # First capture wins, so an older version always makes the entry stale
        for tag, version in nested.items():
            versions.setdefault(tag, version)
        extra = discovered - versions.keys()
        if extra:
            try:
                versions.update(self._current_versions(extra))
            except CacheTransportError as e:
                logger.warning(f"Not storing {key}: {e}")
                return value, _UNVERSIONED

        self._store(key, value, versions)
        return value, versions

    def get_or_compute(
        self, key: str, tags: Iterable[str], compute: Callable[[], Any]
    ) -> Any:
        """
        Return the cached value for ``key``, computing and storing it on a miss.

        ``compute`` may return a :class:`Tagged` to add tags it discovered.
        Backend failures never escape: the value is computed directly instead.
        """
        try:
            hit = self.lookup(key)
        except CacheTransportError as e:
            logger.warning(f"Cost cache lookup failed, bypassing for {key}: {e}")
            track("cost_cache_bypass", key=key)
            _record(_UNVERSIONED)
            value, _ = _unwrap(compute())
            return value

        if hit is not None:
            value, versions = hit
            logger.debug(f"Cost cache hit {key}")
            _record(versions)
            return value

        logger.debug(f"Cost cache miss {key}")
        value, versions = self.flight.do(
            key, lambda: self._fill(key, frozenset(tags), compute)
        )
        _record(versions)
        return value

    def purge(self, tags: Iterable[str]) -> None:
        """
        Invalidate every entry carrying any of ``tags``.

        Raises:
            CacheTransportError: If the backend did not take the new versions
        """
        new_versions = {self.tag_key(t): _new_version() for t in set(tags)}
        if not new_versions:
            return
        try:
            failed = self.backend.set_many(new_versions, timeout=None)
        except Exception as e:
            raise CacheTransportError(f"Failed to purge cost cache tags: {e}") from e
        if failed:
            raise CacheTransportError(f"Failed to purge cost cache tags: {failed}")

    def clear(self) -> None:
        self.backend.clear()

    def close(self) -> None:
        self.flight.forget_all()
        self.backend.close()


class NullTaggedCache:
    """A cache that stores nothing. Every read computes."""

    def get_or_compute(self, key, tags, compute):
        value, _ = _unwrap(compute())
        return value

    def purge(self, tags) -> None:
        pass

    def clear(self) -> None:
        pass

    def close(self) -> None:
        pass
