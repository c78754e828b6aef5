"""In-memory client registry and selection state for a planning session."""

from __future__ import annotations

import functools
import logging
import math
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Iterable, Iterator, Optional

from ...errors import RequestInProgressError
from ...models.domain import ClientRecord, Itinerary

MUTABLE_FIELDS = (
    "name",
    "address",
    "neighborhood",
    "city",
    "state",
    "country",
    "whatsapp",
    "phone",
    "info",
    "lat",
    "lng",
)
REQUIRED_TEXT_FIELDS = ("name", "address", "neighborhood", "city", "state", "country", "whatsapp")

logger = logging.getLogger(__name__)


def has_valid_coordinates(lat: Optional[float], lng: Optional[float]) -> bool:
    if lat is None or lng is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


class ClientRegistry:
    """Clients, the active selection and the last computed itinerary.

    Nothing is persisted; a fresh registry starts empty.
    """

    def __init__(self) -> None:
        self._clients: dict[str, ClientRecord] = {}
        self._selected: dict[str, None] = {}
        self._itinerary: Itinerary | None = None
        self._lock = threading.RLock()
        self._busy_lock = threading.Lock()
        self._busy_operation: str | None = None

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, client_id: object) -> bool:
        return client_id in self._clients

    # Clients

    def add(self, records: Iterable[ClientRecord]) -> list[ClientRecord]:
        """Append a batch of records. Either every record is added or none is."""
        batch = list(records)
        with self._lock:
            seen: set[str] = set()
            for record in batch:
                if not record.id:
                    raise ValueError("Client record is missing an id.")
                if record.id in self._clients or record.id in seen:
                    raise ValueError(f"Client id '{record.id}' is already registered.")
                if not record.name.strip() or not record.address.strip():
                    raise ValueError(f"Client '{record.id}' must have a name and an address.")
                seen.add(record.id)
            for record in batch:
                self._clients[record.id] = record
        logger.info(f"Registered {len(batch)} clients ({len(self._clients)} total)")
        return batch

    def get(self, client_id: str) -> ClientRecord:
        try:
            return self._clients[client_id]
        except KeyError:
            raise KeyError(f"Client '{client_id}' not found.") from None

    def list_clients(self, neighborhood: str | None = None) -> list[ClientRecord]:
        with self._lock:
            clients = list(self._clients.values())
        if neighborhood is None:
            return clients
        return [client for client in clients if client.neighborhood == neighborhood]

    def neighborhoods(self) -> list[str]:
        with self._lock:
            values = {client.neighborhood for client in self._clients.values() if client.neighborhood}
        return sorted(values)

    def update(self, client_id: str, patch: dict) -> ClientRecord:
        unknown = set(patch) - set(MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        for name in REQUIRED_TEXT_FIELDS:
            if name in patch and patch[name] is None:
                raise ValueError(f"Field '{name}' cannot be null.")
        with self._lock:
            current = self.get(client_id)
            updated = replace(current, **patch)
            updated.name = (updated.name or "").strip()
            updated.address = (updated.address or "").strip()
            if not updated.name or not updated.address:
                raise ValueError("Client name and address cannot be empty.")
            if "lat" in patch or "lng" in patch:
                if has_valid_coordinates(updated.lat, updated.lng):
                    updated.location_approximate = False
                else:
                    updated.lat = None
                    updated.lng = None
                    updated.location_approximate = True
            self._clients[client_id] = updated
            if self._itinerary and any(stop.id == client_id for stop in self._itinerary.stops):
                self._itinerary = None
        return updated

    def remove(self, client_id: str) -> bool:
        """Delete a client. Removing an unknown id is a no-op."""
        with self._lock:
            if self._clients.pop(client_id, None) is None:
                return False
            if client_id in self._selected:
                del self._selected[client_id]
                self._itinerary = None
            elif self._itinerary and any(stop.id == client_id for stop in self._itinerary.stops):
                self._itinerary = None
        return True

    def clear(self) -> None:
        with self._lock:
            self._clients.clear()
            self._selected.clear()
            self._itinerary = None

    # Selection

    def select(self, client_ids: Iterable[str]) -> list[str]:
        ids = list(client_ids)
        with self._lock:
            for client_id in ids:
                self.get(client_id)
            for client_id in ids:
                self._selected[client_id] = None
            self._itinerary = None
            return self.selected_ids()

    def deselect(self, client_ids: Iterable[str]) -> list[str]:
        with self._lock:
            for client_id in client_ids:
                self._selected.pop(client_id, None)
            self._itinerary = None
            return self.selected_ids()

    def toggle(self, client_id: str) -> list[str]:
        with self._lock:
            self.get(client_id)
            if client_id in self._selected:
                del self._selected[client_id]
            else:
                self._selected[client_id] = None
            self._itinerary = None
            return self.selected_ids()

    def select_neighborhood(self, neighborhood: str) -> list[str]:
        """Add every client of ``neighborhood`` to the current selection."""
        return self.select(client.id for client in self.list_clients(neighborhood))

    def clear_selection(self) -> list[str]:
        with self._lock:
            self._selected.clear()
            self._itinerary = None
            return []

    def selected_ids(self) -> list[str]:
        with self._lock:
            return list(self._selected)

    def selected_clients(self) -> list[ClientRecord]:
        """Selected clients in registry order."""
        with self._lock:
            return [client for client in self._clients.values() if client.id in self._selected]

    # Itinerary

    @property
    def itinerary(self) -> Itinerary | None:
        return self._itinerary

    def store_itinerary(self, itinerary: Itinerary) -> None:
        with self._lock:
            self._itinerary = itinerary

    @contextmanager
    def busy(self, operation: str) -> Iterator[None]:
        """Allow a single outstanding AI request per session."""
        if not self._busy_lock.acquire(blocking=False):
            raise RequestInProgressError(self._busy_operation or operation)
        self._busy_operation = operation
        try:
            yield
        finally:
            self._busy_operation = None
            self._busy_lock.release()


@functools.lru_cache(maxsize=1)
def get_registry() -> ClientRegistry:
    """Process-wide planning session."""
    return ClientRegistry()
