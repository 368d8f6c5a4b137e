"""
Shared prepare/confirm/cancel machinery for bookings and reservations.

Records live in the TTL store as JSON-ready dicts under ``<prefix><id>``; a
list-valued index key remembers every id that was prepared and is re-armed
with each record write. The state machine is

    pending -> confirmed
    pending -> cancelled

and both transitions are written with ``compare_and_swap`` against the exact
dict that was read, so a racing writer loses instead of overwriting.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Generic, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel

from ..errors import AlreadyConfirmed, InvalidState, NotFound
from .catalog import AttractionCatalog
from .models import LifecycleStatus
from .store import TTLStore

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 7200
MAX_SWAP_ATTEMPTS = 3

R = TypeVar("R", bound=BaseModel)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LifecycleManager(Generic[R]):
    """Base class. Subclasses set the key layout and the record model."""

    key_prefix: str = ""
    index_key: str = ""
    record_model: Type[BaseModel] = BaseModel
    kind: str = "record"

    def __init__(
        self,
        store: TTLStore,
        catalog: AttractionCatalog,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.catalog = catalog
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def _key(self, record_id: str) -> str:
        return f"{self.key_prefix}{record_id}"

    def _read(self, record_id: str) -> Tuple[Optional[dict], Optional[R]]:
        raw = self.store.get(self._key(record_id))
        if raw is None:
            return None, None
        return raw, self.record_model.model_validate(raw)

    def _create(self, record_id: str, record: R) -> None:
        self._index(record_id)
        self.store.put(self._key(record_id), record.model_dump(mode="json"), self.ttl_seconds)

    def _index(self, record_id: str) -> None:
        """
        Make sure ``record_id`` is listed and re-arm the index TTL.

        Called on every record write, so the index always outlives the
        records it lists.
        """
        for _ in range(MAX_SWAP_ATTEMPTS):
            current = self.store.get(self.index_key)
            if current is None:
                if self.store.put_if_absent(self.index_key, [record_id], self.ttl_seconds):
                    return
                continue
            updated = current if record_id in current else current + [record_id]
            if self.store.compare_and_swap(self.index_key, current, updated, self.ttl_seconds):
                return
            logger.warning(f"Lost index race on {self.index_key}, re-reading")
        raise RuntimeError(f"Could not index {self.kind} {record_id}: too much contention")

    def _get(self, record_id: str) -> Optional[R]:
        _, record = self._read(record_id)
        return record

    def _list(self) -> List[R]:
        records = []
        for record_id in self.store.get(self.index_key, []):
            record = self._get(record_id)
            # Expired entries drop out here; ids are never pruned from the index
            if record is not None:
                records.append(record)
        return records

    def _confirm(
        self, record_id: str, apply: Callable[[R], R]
    ) -> Union[R, NotFound, AlreadyConfirmed, InvalidState]:
        """Move a pending record to confirmed. ``apply`` fills in what confirmation mints."""
        for _ in range(MAX_SWAP_ATTEMPTS):
            raw, record = self._read(record_id)
            if record is None:
                return NotFound(f"{self.kind.capitalize()} {record_id} not found or expired")
            if record.status == LifecycleStatus.CONFIRMED:
                logger.info(f"{self.kind.capitalize()} {record_id} already confirmed")
                return AlreadyConfirmed(record, message=f"{self.kind.capitalize()} {record_id} is already confirmed")
            if record.status == LifecycleStatus.CANCELLED:
                logger.info(f"Refusing to confirm cancelled {self.kind} {record_id}")
                return InvalidState(f"{self.kind.capitalize()} {record_id} was cancelled and cannot be confirmed")

            updated = apply(record)
            if self.store.compare_and_swap(
                self._key(record_id), raw, updated.model_dump(mode="json"), self.ttl_seconds
            ):
                self._index(record_id)
                logger.info(f"{self.kind.capitalize()} {record_id} confirmed")
                return updated
            logger.warning(f"Lost confirm race on {self.kind} {record_id}, re-reading")
        raise RuntimeError(f"Could not confirm {self.kind} {record_id}: too much contention")

    def _cancel(self, record_id: str) -> Union[R, NotFound, InvalidState]:
        for _ in range(MAX_SWAP_ATTEMPTS):
            raw, record = self._read(record_id)
            if record is None:
                return NotFound(f"{self.kind.capitalize()} {record_id} not found or expired")
            if record.status == LifecycleStatus.CANCELLED:
                return record
            if record.status == LifecycleStatus.CONFIRMED:
                logger.info(f"Refusing to cancel confirmed {self.kind} {record_id}")
                return InvalidState(f"{self.kind.capitalize()} {record_id} is already confirmed and cannot be cancelled")

            updated = record.model_copy(
                update={"status": LifecycleStatus.CANCELLED, "cancelled_at": self.clock()}
            )
            if self.store.compare_and_swap(
                self._key(record_id), raw, updated.model_dump(mode="json"), self.ttl_seconds
            ):
                self._index(record_id)
                logger.info(f"{self.kind.capitalize()} {record_id} cancelled")
                return updated
            logger.warning(f"Lost cancel race on {self.kind} {record_id}, re-reading")
        raise RuntimeError(f"Could not cancel {self.kind} {record_id}: too much contention")
