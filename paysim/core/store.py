"""
In-memory, account-scoped resource storage.

Every simulated resource kind (charges, customers, webhook endpoints, ...) gets
its own ``ResourceStore``. Records are plain dicts keyed by their ``id`` inside a
per-account collection.

Records are shared, not copied: ``get`` hands back the canonical instance, so a
mutation made through one reference is visible to every later reader. The
simulated backend is a single shared database, and clients rely on seeing
changes made by delayed effects (a dispute back-linked onto a charge, say) on
the objects they already hold.

Note:
    Data lives for the process lifetime. There is no locking: all access happens
    on the event loop thread and operations never yield mid-mutation.
"""

from typing import Generic, TypeVar

from paysim.core.config import store_logger

Record = dict
T = TypeVar("T", bound=dict)


class ResourceStore(Generic[T]):
    """
    Keyed collection of records, partitioned by account id.

    The store does not enforce uniqueness: services call ``contains`` first when
    create semantics require a conflict error.
    """

    def __init__(self, kind: str):
        """
        Args:
            kind: Resource kind name, used in log messages (e.g. ``"charge"``).
        """
        self.kind = kind
        self._accounts: dict[str, dict[str, T]] = {}

    def put(self, account_id: str, record: T) -> None:
        """Insert or overwrite ``record`` under its ``id``; new ids append to the order."""
        self._accounts.setdefault(account_id, {})[record["id"]] = record
        store_logger.debug(f"{self.kind} {record['id']} stored for {account_id}")

    def get(self, account_id: str, record_id: str) -> T | None:
        """Return the shared record instance, or ``None`` if unknown in this account."""
        return self._accounts.get(account_id, {}).get(record_id)

    def get_all(self, account_id: str) -> list[T]:
        """All records of the account, in insertion order."""
        return list(self._accounts.get(account_id, {}).values())

    def contains(self, account_id: str, record_id: str) -> bool:
        return record_id in self._accounts.get(account_id, {})

    def remove(self, account_id: str, record_id: str) -> None:
        """Remove a record; unknown ids are ignored."""
        if self._accounts.get(account_id, {}).pop(record_id, None) is not None:
            store_logger.debug(f"{self.kind} {record_id} removed from {account_id}")


__all__ = ["ResourceStore", "Record"]
