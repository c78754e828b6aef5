"""Instructions and response schemas sent to the Gemini API."""

from __future__ import annotations

from typing import Sequence

from ...models.domain import ClientRecord

EXTRACTION_SCHEMA: dict = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "name": {"type": "STRING"},
            "address": {"type": "STRING"},
            "neighborhood": {"type": "STRING"},
            "city": {"type": "STRING"},
            "state": {"type": "STRING"},
            "country": {"type": "STRING"},
            "whatsapp": {"type": "STRING"},
            "phone": {"type": "STRING"},
            "info": {"type": "STRING"},
            "lat": {"type": "NUMBER"},
            "lng": {"type": "NUMBER"},
        },
        "required": ["name", "address", "city", "whatsapp"],
    },
}

SEQUENCING_SCHEMA: dict = {
    "type": "ARRAY",
    "items": {"type": "STRING"},
}


def build_extraction_instruction(default_area_code: str) -> str:
    instruction = (
        "Analyze this PDF document and extract every client record it contains. "
        "For each client identify: name, full street address, neighborhood, city, state, "
        "country and WhatsApp number. Include any other phone number as phone and any "
        "extra notes as info. Only include lat and lng when the document states the "
        "coordinates explicitly. Return ONLY a plain JSON array."
    )
    if default_area_code:
        instruction += f" If a WhatsApp number has no area code, use {default_area_code}."
    return instruction


def build_sequencing_prompt(
    clients: Sequence[ClientRecord],
    start_address: str | None = None,
    end_address: str | None = None,
) -> str:
    lines = [
        "You are a logistics specialist. Arrange these "
        f"{len(clients)} clients into the best visiting order to save time and fuel.",
        "",
    ]
    if start_address:
        lines.append(f"The route starts at: {start_address}")
    if end_address:
        lines.append(f"The route ends at: {end_address}")
    if start_address or end_address:
        lines.append("")
    lines.append("Clients:")
    for client in clients:
        location = ", ".join(part for part in (client.address, client.neighborhood, client.city) if part)
        lines.append(f"- ID: {client.id} | Location: {location}")
    lines.extend(
        [
            "",
            "Return a JSON array containing every ID above exactly once, in visiting order. "
            "Do not invent, repeat or omit IDs.",
        ]
    )
    return "\n".join(lines)
