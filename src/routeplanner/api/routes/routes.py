"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...errors import RoutePlannerError
from ...schemas.routing import ItineraryResponse, RouteRequest
from ...services.clients import get_registry
from ...services.outputs.itinerary_formatter import itinerary_to_response
from ...services.sequencing import plan_route
from ..errors import to_http_exception

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/optimize", response_model=ItineraryResponse, status_code=status.HTTP_200_OK)
def optimize(payload: RouteRequest) -> ItineraryResponse:
    try:
        itinerary = plan_route(
            get_registry(),
            client_ids=payload.client_ids,
            start_address=payload.start_address,
            end_address=payload.end_address,
        )
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.args[0]) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RoutePlannerError as exc:
        logging.warning(f"Route optimization failed ({exc.kind}): {exc.message}")
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to calculate the route. Try again.",
        ) from exc
    return itinerary_to_response(itinerary)


@router.get("/current", response_model=ItineraryResponse, status_code=status.HTTP_200_OK)
def current_itinerary() -> ItineraryResponse:
    """Return the last computed itinerary while the selection is unchanged."""
    itinerary = get_registry().itinerary
    if itinerary is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No route has been calculated yet.")
    return itinerary_to_response(itinerary)
