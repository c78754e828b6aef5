"""PDF client extraction orchestration."""

from __future__ import annotations

import base64
import logging
import uuid
from typing import Any, Optional

from ...config import Settings, settings
from ...errors import EmptyExtractionError, MalformedResponseError, PayloadTooLargeError
from ...models.domain import ClientRecord
from ..clients.registry import ClientRegistry, has_valid_coordinates
from ..llm.client import GeminiClient
from ..llm.prompts import EXTRACTION_SCHEMA, build_extraction_instruction

logger = logging.getLogger(__name__)


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip().replace(",", "."))
    except ValueError:
        return None


def _new_client_id() -> str:
    return f"client-{uuid.uuid4().hex}"


def build_client_record(item: dict, config: Settings) -> ClientRecord | None:
    """Normalize one extracted object, or return ``None`` when it lacks a name or address."""
    name = _coerce_text(item.get("name"))
    address = _coerce_text(item.get("address"))
    if not name or not address:
        return None

    lat = _coerce_float(item.get("lat"))
    lng = _coerce_float(item.get("lng"))
    located = has_valid_coordinates(lat, lng)

    return ClientRecord(
        id=_new_client_id(),
        name=name,
        address=address,
        neighborhood=_coerce_text(item.get("neighborhood")) or config.default_neighborhood,
        city=_coerce_text(item.get("city")) or config.default_city,
        state=_coerce_text(item.get("state")) or config.default_state,
        country=_coerce_text(item.get("country")) or config.default_country,
        whatsapp=_coerce_text(item.get("whatsapp")),
        phone=_coerce_text(item.get("phone")) or None,
        info=_coerce_text(item.get("info")) or None,
        lat=lat if located else None,
        lng=lng if located else None,
        location_approximate=not located,
    )


def extract_clients(
    pdf_bytes: bytes,
    *,
    llm: GeminiClient | None = None,
    config: Settings | None = None,
) -> list[ClientRecord]:
    """Send a PDF to Gemini and return the client records it recognized."""
    config = config or settings
    if not pdf_bytes:
        raise ValueError("Uploaded document is empty.")
    if len(pdf_bytes) > config.max_pdf_bytes:
        raise PayloadTooLargeError(len(pdf_bytes), config.max_pdf_bytes)

    llm = llm or GeminiClient(config)
    parts = [
        {
            "inlineData": {
                "mimeType": "application/pdf",
                "data": base64.b64encode(pdf_bytes).decode("ascii"),
            }
        },
        {"text": build_extraction_instruction(config.whatsapp_default_area_code)},
    ]
    raw = llm.generate_json(parts, EXTRACTION_SCHEMA, model=config.extraction_model)

    if not isinstance(raw, list):
        logger.warning(f"Extraction response is a {type(raw).__name__}, expected a list")
        raise MalformedResponseError()
    if any(not isinstance(item, dict) for item in raw):
        logger.warning("Extraction response contains non-object items")
        raise MalformedResponseError()

    records: list[ClientRecord] = []
    rejected = 0
    for item in raw:
        record = build_client_record(item, config)
        if record is None:
            rejected += 1
            continue
        records.append(record)

    if rejected:
        logger.warning(f"Rejected {rejected} extracted records without name or address")
    if not records:
        raise EmptyExtractionError()

    logger.info(f"Extracted {len(records)} clients from a {len(pdf_bytes)} byte document")
    return records


def import_clients_from_pdf(
    pdf_bytes: bytes,
    registry: ClientRegistry,
    *,
    llm: GeminiClient | None = None,
    config: Settings | None = None,
) -> list[ClientRecord]:
    """Extract clients from ``pdf_bytes`` and merge the whole batch into ``registry``."""
    with registry.busy("extraction"):
        records = extract_clients(pdf_bytes, llm=llm, config=config)
        return registry.add(records)
