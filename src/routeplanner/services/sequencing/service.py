"""Route sequencing orchestration service."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Sequence

from ...config import Settings, settings
from ...errors import InvariantViolationError, MalformedResponseError
from ...models.domain import ClientRecord, Itinerary, RouteStop
from ..clients.registry import ClientRegistry
from ..llm.client import GeminiClient
from ..llm.prompts import SEQUENCING_SCHEMA, build_sequencing_prompt

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SequencingResult:
    stops: list[RouteStop]
    fallback_used: bool
    model: str


def _clean_address(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def _coerce_id_list(raw: Any) -> list[str]:
    if not isinstance(raw, list) or not raw:
        raise MalformedResponseError()
    if any(not isinstance(item, str) for item in raw):
        raise MalformedResponseError()
    return [item.strip() for item in raw]


def validate_permutation(ordered_ids: Sequence[str], expected_ids: Sequence[str]) -> None:
    """Raise ``InvariantViolationError`` unless ``ordered_ids`` reorders ``expected_ids`` exactly."""
    expected = set(expected_ids)
    counts = Counter(ordered_ids)
    missing = [client_id for client_id in expected_ids if client_id not in counts]
    unknown = [client_id for client_id in counts if client_id not in expected]
    duplicated = [client_id for client_id, count in counts.items() if count > 1 and client_id in expected]
    if missing or unknown or duplicated:
        raise InvariantViolationError(missing=missing, unknown=unknown, duplicated=duplicated)


def sequence_clients(
    clients: Sequence[ClientRecord],
    *,
    start_address: str | None = None,
    end_address: str | None = None,
    llm: GeminiClient | None = None,
    config: Settings | None = None,
) -> SequencingResult:
    """Ask Gemini for a visiting order over ``clients`` and build the route stops."""
    if not clients:
        raise ValueError("Select at least one client before requesting a route.")
    config = config or settings
    by_id = {client.id: client for client in clients}
    if len(by_id) != len(clients):
        raise ValueError("Client selection contains duplicate ids.")

    llm = llm or GeminiClient(config)
    prompt = build_sequencing_prompt(
        clients,
        start_address=_clean_address(start_address),
        end_address=_clean_address(end_address),
    )

    fallback_used = False
    try:
        raw = llm.generate_json([{"text": prompt}], SEQUENCING_SCHEMA, model=config.sequencing_model)
        ordered_ids = _coerce_id_list(raw)
    except MalformedResponseError as exc:
        logger.warning(f"Route sequencing response unusable, keeping selection order: {exc.message}")
        ordered_ids = [client.id for client in clients]
        fallback_used = True
    else:
        validate_permutation(ordered_ids, [client.id for client in clients])

    stops = [
        RouteStop(client=by_id[client_id], stop_order=index)
        for index, client_id in enumerate(ordered_ids, start=1)
    ]
    logger.info(f"Sequenced {len(stops)} stops (fallback={fallback_used})")
    return SequencingResult(stops=stops, fallback_used=fallback_used, model=config.sequencing_model)


def plan_route(
    registry: ClientRegistry,
    *,
    client_ids: Sequence[str] | None = None,
    start_address: str | None = None,
    end_address: str | None = None,
    llm: GeminiClient | None = None,
    config: Settings | None = None,
) -> Itinerary:
    """Sequence the requested (or currently selected) clients and store the itinerary.

    ``client_ids=None`` means "use the selection"; an explicit empty list is rejected.
    """
    if client_ids is not None:
        unique_ids = dict.fromkeys(client_id.strip() for client_id in client_ids)
        clients = [registry.get(client_id) for client_id in unique_ids]
    else:
        clients = registry.selected_clients()
    if not clients:
        raise ValueError("Select at least one client before requesting a route.")

    with registry.busy("sequencing"):
        result = sequence_clients(
            clients,
            start_address=start_address,
            end_address=end_address,
            llm=llm,
            config=config,
        )

    itinerary = Itinerary(
        stops=result.stops,
        start_address=_clean_address(start_address),
        end_address=_clean_address(end_address),
        fallback_used=result.fallback_used,
        model=result.model,
        metadata={"client_count": len(result.stops)},
    )
    registry.store_itinerary(itinerary)
    return itinerary
