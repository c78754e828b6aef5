import base64

import pytest

from routeplanner.config import Settings
from routeplanner.errors import (
    EmptyExtractionError,
    MalformedResponseError,
    PayloadTooLargeError,
    UpstreamFailureError,
)
from routeplanner.models.domain import ClientRecord
from routeplanner.services.clients.registry import ClientRegistry
from routeplanner.services.extraction import service as extraction_service
from routeplanner.services.llm.prompts import EXTRACTION_SCHEMA

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\n%%EOF"


class DummyGemini:
    def __init__(self, response=None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    def generate_json(self, parts, schema, *, model):
        self.calls.append({"parts": parts, "schema": schema, "model": model})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def config() -> Settings:
    return Settings(gemini_api_key="test-key", extraction_model="gemini-extract-test")


def _existing_client() -> ClientRecord:
    return ClientRecord(
        id="client-existing",
        name="Mercadinho Sol",
        address="Av. Prudente de Morais, 500",
        neighborhood="Lagoa Nova",
        city="Natal",
        state="RN",
        country="Brasil",
        whatsapp="84 98888-1111",
    )


def test_extract_clients_applies_defaults_and_assigns_ids(config: Settings):
    llm = DummyGemini(
        response=[
            {"name": " Padaria Tirol ", "address": "Rua Apodi, 100", "neighborhood": "Tirol", "city": "Natal", "whatsapp": "84 99876-5432"},
            {"name": "Farmácia Boa", "address": "Rua Jaguarari, 20", "city": "", "whatsapp": "3222-1111", "lat": -5.81, "lng": -35.2},
        ]
    )

    records = extraction_service.extract_clients(PDF_BYTES, llm=llm, config=config)

    assert len(records) == 2
    first, second = records
    assert first.name == "Padaria Tirol"
    assert first.neighborhood == "Tirol"
    assert first.country == "Brasil"
    assert first.lat is None and first.location_approximate is True
    assert second.neighborhood == "Centro"
    assert second.city == "Natal"
    assert second.state == "RN"
    assert (second.lat, second.lng) == (-5.81, -35.2)
    assert second.location_approximate is False
    assert first.id != second.id
    assert first.id.startswith("client-")


def test_extract_clients_sends_pdf_inline_with_schema(config: Settings):
    llm = DummyGemini(response=[{"name": "A", "address": "Rua A", "city": "Natal", "whatsapp": "1"}])

    extraction_service.extract_clients(PDF_BYTES, llm=llm, config=config)

    call = llm.calls[0]
    assert call["model"] == "gemini-extract-test"
    assert call["schema"] == EXTRACTION_SCHEMA
    inline = call["parts"][0]["inlineData"]
    assert inline["mimeType"] == "application/pdf"
    assert base64.b64decode(inline["data"]) == PDF_BYTES
    assert "84" in call["parts"][1]["text"]


def test_extract_clients_rejects_records_without_name_or_address(config: Settings):
    llm = DummyGemini(
        response=[
            {"name": "", "address": "Rua A", "city": "Natal", "whatsapp": "1"},
            {"name": "Sem endereço", "address": "   ", "city": "Natal", "whatsapp": "2"},
            {"name": "Completo", "address": "Rua C, 3", "city": "Natal", "whatsapp": "3"},
        ]
    )

    records = extraction_service.extract_clients(PDF_BYTES, llm=llm, config=config)

    assert [record.name for record in records] == ["Completo"]


def test_extract_clients_discards_out_of_range_coordinates(config: Settings):
    llm = DummyGemini(response=[{"name": "A", "address": "Rua A", "city": "Natal", "whatsapp": "1", "lat": 200, "lng": -35.2}])

    record = extraction_service.extract_clients(PDF_BYTES, llm=llm, config=config)[0]

    assert record.lat is None and record.lng is None
    assert record.location_approximate is True


@pytest.mark.parametrize(
    "response",
    [
        [],
        [{"name": "", "address": ""}],
    ],
)
def test_extract_clients_with_no_valid_records_is_empty_extraction(config: Settings, response):
    with pytest.raises(EmptyExtractionError):
        extraction_service.extract_clients(PDF_BYTES, llm=DummyGemini(response=response), config=config)


@pytest.mark.parametrize("response", [{"clients": []}, "text", [["Padaria", "Rua A"]]])
def test_extract_clients_with_wrong_shape_is_malformed(config: Settings, response):
    with pytest.raises(MalformedResponseError):
        extraction_service.extract_clients(PDF_BYTES, llm=DummyGemini(response=response), config=config)


def test_extract_clients_rejects_oversized_payload_before_calling_service():
    config = Settings(gemini_api_key="test-key", max_pdf_bytes=10)
    llm = DummyGemini(response=[])

    with pytest.raises(PayloadTooLargeError):
        extraction_service.extract_clients(PDF_BYTES, llm=llm, config=config)

    assert llm.calls == []


def test_extract_clients_rejects_empty_payload(config: Settings):
    with pytest.raises(ValueError):
        extraction_service.extract_clients(b"", llm=DummyGemini(response=[]), config=config)


def test_import_merges_whole_batch(config: Settings):
    registry = ClientRegistry()
    registry.add([_existing_client()])
    llm = DummyGemini(
        response=[
            {"name": "A", "address": "Rua A", "city": "Natal", "whatsapp": "1"},
            {"name": "B", "address": "Rua B", "city": "Natal", "whatsapp": "2"},
        ]
    )

    imported = extraction_service.import_clients_from_pdf(PDF_BYTES, registry, llm=llm, config=config)

    assert len(imported) == 2
    assert [client.name for client in registry.list_clients()] == ["Mercadinho Sol", "A", "B"]


@pytest.mark.parametrize(
    "llm",
    [
        DummyGemini(response=[]),
        DummyGemini(response={"unexpected": True}),
        DummyGemini(error=UpstreamFailureError("Resource exhausted", status_code=429)),
    ],
)
def test_failed_import_leaves_registry_unchanged(config: Settings, llm):
    registry = ClientRegistry()
    registry.add([_existing_client()])

    with pytest.raises((EmptyExtractionError, MalformedResponseError, UpstreamFailureError)):
        extraction_service.import_clients_from_pdf(PDF_BYTES, registry, llm=llm, config=config)

    assert [client.id for client in registry.list_clients()] == ["client-existing"]


def test_extract_clients_builds_default_client(monkeypatch, config: Settings):
    llm = DummyGemini(response=[{"name": "A", "address": "Rua A", "city": "Natal", "whatsapp": "1"}])
    monkeypatch.setattr(extraction_service, "GeminiClient", lambda cfg: llm)

    records = extraction_service.extract_clients(PDF_BYTES, config=config)

    assert len(records) == 1
    assert llm.calls
