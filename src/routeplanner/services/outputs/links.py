"""Deep links into mapping and messaging services."""

from __future__ import annotations

import re
from typing import Sequence
from urllib.parse import quote, urlencode

GOOGLE_MAPS_DIRECTIONS_URL = "https://www.google.com/maps/dir/"
WHATSAPP_URL = "https://wa.me/"

_NON_DIGITS = re.compile(r"\D+")


def normalize_phone(
    raw: str | None,
    *,
    default_area_code: str = "",
    country_code: str = "",
) -> str | None:
    """Reduce a loosely formatted phone number to international digits.

    Local numbers (8-9 digits) get ``default_area_code`` prepended; national
    numbers (10-11 digits) get ``country_code``. Anything longer is assumed to
    already carry a country code.
    """
    if not raw:
        return None
    digits = _NON_DIGITS.sub("", raw)
    if not digits:
        return None
    if len(digits) in (8, 9) and default_area_code:
        digits = default_area_code + digits
    if len(digits) in (10, 11) and country_code:
        digits = country_code + digits
    return digits


def whatsapp_url(raw: str | None, *, default_area_code: str = "", country_code: str = "") -> str | None:
    digits = normalize_phone(raw, default_area_code=default_area_code, country_code=country_code)
    if not digits:
        return None
    return f"{WHATSAPP_URL}{digits}"


def maps_destination_url(address: str) -> str:
    return f"{GOOGLE_MAPS_DIRECTIONS_URL}?{urlencode({'api': 1, 'destination': address}, quote_via=quote)}"


def maps_route_url(
    addresses: Sequence[str],
    start_address: str | None = None,
    end_address: str | None = None,
) -> str | None:
    """Directions link covering the whole itinerary.

    Without explicit start/end addresses the first and last stops become the
    origin and destination.
    """
    waypoints = [address for address in addresses if address]
    origin = start_address
    destination = end_address
    if not origin and waypoints:
        origin = waypoints.pop(0)
    if not destination and waypoints:
        destination = waypoints.pop()
    if not destination:
        return None
    params: dict[str, object] = {"api": 1}
    if origin:
        params["origin"] = origin
    params["destination"] = destination
    if waypoints:
        params["waypoints"] = "|".join(waypoints)
    return f"{GOOGLE_MAPS_DIRECTIONS_URL}?{urlencode(params, quote_via=quote)}"
