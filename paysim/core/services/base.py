"""Base class for the account-scoped resource services."""

from typing import TYPE_CHECKING, Any, Sequence

from paysim.core.exceptions.types import ConflictException, NotFoundException
from paysim.core.pagination import apply_list_options, expand_list, expand_object
from paysim.core.store import ResourceStore
from paysim.core.utils import generate_id

if TYPE_CHECKING:
    from paysim.core.simulator import Simulator


class ResourceService:
    """
    Shared plumbing for a service that owns one ``ResourceStore``.

    Subclasses set:
    - ``kind``: store/log name, also the ``object`` value of records
    - ``id_prefix``: prefix of generated ids (``"ch_"``)
    - ``label``: noun used in "No such ..." messages
    - ``expandable_fields``: top-level fields ``expand`` may inline
    - ``list_url``: ``url`` of list envelopes
    """

    kind: str = "resource"
    id_prefix: str = ""
    id_length: int = 14
    label: str = "resource"
    expandable_fields: tuple[str, ...] = ()
    list_url: str = ""

    def __init__(self, simulator: "Simulator"):
        self.simulator = simulator
        self.store: ResourceStore[dict] = ResourceStore(self.kind)

    @property
    def settings(self):
        return self.simulator.settings

    def _new_id(self, account_id: str, seeded_id: str | None = None) -> str:
        """
        Pick the id of a record about to be created.

        Callers may seed the id (the ``id`` param of create requests).

        Raises:
            ConflictException: If the id is already taken in this account.
        """
        record_id = seeded_id or f"{self.id_prefix}{generate_id(self.id_length)}"
        if self.store.contains(account_id, record_id):
            raise ConflictException(
                f"{self.label.capitalize()} already exists.", param="id"
            )
        return record_id

    def _not_found(self, record_id: str, param_name: str | None) -> NotFoundException:
        return NotFoundException(f"No such {self.label}: '{record_id}'", param=param_name)

    def retrieve(
        self, account_id: str, record_id: str, param_name: str | None = "id"
    ) -> dict:
        """
        Return the shared record.

        Raises:
            NotFoundException: If the id is unknown in this account.
        """
        record = self.store.get(account_id, record_id)
        if record is None:
            raise self._not_found(record_id, param_name)
        return record

    def _paginate(
        self,
        account_id: str,
        records: Sequence[dict],
        params: dict[str, Any],
        url: str | None = None,
    ) -> dict:
        envelope = apply_list_options(
            records,
            params,
            lambda record_id, param_name: self.retrieve(
                account_id, record_id, param_name
            ),
            url=self.list_url if url is None else url,
            default_limit=self.settings.LIST_DEFAULT_LIMIT,
            max_limit=self.settings.LIST_MAX_LIMIT,
        )
        return expand_list(
            envelope,
            self.expandable_fields,
            params.get("expand"),
            self.simulator.resolver(account_id),
        )

    def expand(self, account_id: str, record: dict, expand: Any) -> dict:
        """Expand the requested fields of ``record`` into a copy."""
        return expand_object(
            record,
            self.expandable_fields,
            expand,
            self.simulator.resolver(account_id),
        )


__all__ = ["ResourceService"]
