"""Domain models for client records and computed itineraries."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(slots=True)
class ClientRecord:
    """A client extracted from an uploaded document."""

    id: str
    name: str
    address: str
    neighborhood: str
    city: str
    state: str
    country: str
    whatsapp: str
    phone: Optional[str] = None
    info: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    location_approximate: bool = True


@dataclass(slots=True)
class RouteStop:
    """A client positioned inside a computed itinerary."""

    client: ClientRecord
    stop_order: int
    distance_from_prev: Optional[float] = None

    @property
    def id(self) -> str:
        return self.client.id


@dataclass(slots=True)
class Itinerary:
    stops: List[RouteStop]
    start_address: Optional[str] = None
    end_address: Optional[str] = None
    fallback_used: bool = False
    model: Optional[str] = None
    metadata: dict = field(default_factory=dict)
