"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .clients import ClientModel


class RouteRequest(BaseModel):
    client_ids: Optional[List[str]] = Field(
        default=None,
        description="Clients to visit. Omit to use the current selection; an empty list is rejected.",
    )
    start_address: Optional[str] = Field(default=None, description="Where the route starts.")
    end_address: Optional[str] = Field(default=None, description="Where the route ends.")


class RouteStopModel(ClientModel):
    stop_order: int
    distance_from_prev: Optional[float] = None
    maps_url: str
    whatsapp_url: Optional[str] = None


class ItineraryResponse(BaseModel):
    start_address: Optional[str] = None
    end_address: Optional[str] = None
    fallback_used: bool
    route_url: Optional[str] = None
    metadata: dict
    stops: List[RouteStopModel]
