"""Serializers for client and itinerary outputs."""

from __future__ import annotations

from dataclasses import asdict

from ...config import Settings, settings
from ...models.domain import ClientRecord, Itinerary
from ...schemas.clients import ClientModel
from ...schemas.routing import ItineraryResponse, RouteStopModel
from .links import maps_destination_url, maps_route_url, whatsapp_url


def client_to_model(client: ClientRecord) -> ClientModel:
    return ClientModel(**asdict(client))


def itinerary_to_response(itinerary: Itinerary, config: Settings | None = None) -> ItineraryResponse:
    config = config or settings
    stops = [
        RouteStopModel(
            **asdict(stop.client),
            stop_order=stop.stop_order,
            distance_from_prev=stop.distance_from_prev,
            maps_url=maps_destination_url(stop.client.address),
            whatsapp_url=whatsapp_url(
                stop.client.whatsapp,
                default_area_code=config.whatsapp_default_area_code,
                country_code=config.whatsapp_country_code,
            ),
        )
        for stop in itinerary.stops
    ]
    metadata = dict(itinerary.metadata)
    if itinerary.model:
        metadata["model"] = itinerary.model
    return ItineraryResponse(
        start_address=itinerary.start_address,
        end_address=itinerary.end_address,
        fallback_used=itinerary.fallback_used,
        route_url=maps_route_url(
            [stop.client.address for stop in itinerary.stops],
            itinerary.start_address,
            itinerary.end_address,
        ),
        metadata=metadata,
        stops=stops,
    )
