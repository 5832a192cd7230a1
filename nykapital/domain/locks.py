from contextlib import contextmanager
from threading import Lock, RLock
from typing import Dict, List, Tuple

# One lock per (kind, id); read-modify-write sequences on balances,
# invoice payments and invoice sequences hold it until their commit.
# Each entry is [lock, users]; it is removed once no thread holds or waits on it.
_registry_lock = Lock()
_entity_locks: Dict[Tuple[str, str], List] = {}


def _checkout(key: Tuple[str, str]) -> RLock:
    with _registry_lock:
        entry = _entity_locks.get(key)
        if entry is None:
            entry = [RLock(), 0]
            _entity_locks[key] = entry
        entry[1] += 1
        return entry[0]


def _checkin(key: Tuple[str, str]) -> None:
    with _registry_lock:
        entry = _entity_locks[key]
        entry[1] -= 1
        if entry[1] == 0:
            del _entity_locks[key]


def active_lock_count() -> int:
    with _registry_lock:
        return len(_entity_locks)


@contextmanager
def entity_lock(kind: str, entity_id):
    key = (kind, str(entity_id))
    lock = _checkout(key)
    try:
        with lock:
            yield
    finally:
        _checkin(key)
