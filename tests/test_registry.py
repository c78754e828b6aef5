import pytest

from routeplanner.errors import RequestInProgressError
from routeplanner.models.domain import ClientRecord, Itinerary, RouteStop
from routeplanner.services.clients.registry import ClientRegistry


def _client(cid: str, neighborhood: str = "Centro", name: str | None = None) -> ClientRecord:
    return ClientRecord(
        id=cid,
        name=name or f"Client {cid}",
        address=f"Rua {cid}, 100",
        neighborhood=neighborhood,
        city="Natal",
        state="RN",
        country="Brasil",
        whatsapp="84 99999-0000",
    )


@pytest.fixture
def registry() -> ClientRegistry:
    registry = ClientRegistry()
    registry.add([_client("A", "Tirol"), _client("B", "Centro"), _client("C", "Tirol")])
    return registry


def test_add_preserves_existing_entries(registry: ClientRegistry):
    registry.add([_client("D", "Lagoa Nova")])

    assert [client.id for client in registry.list_clients()] == ["A", "B", "C", "D"]


def test_add_rejects_duplicate_id_without_partial_merge(registry: ClientRegistry):
    with pytest.raises(ValueError):
        registry.add([_client("E"), _client("A")])

    assert len(registry) == 3
    assert "E" not in registry


def test_add_rejects_duplicates_within_batch():
    registry = ClientRegistry()
    with pytest.raises(ValueError):
        registry.add([_client("X"), _client("X")])
    assert len(registry) == 0


def test_add_rejects_blank_name():
    registry = ClientRegistry()
    with pytest.raises(ValueError):
        registry.add([_client("X", name="  ")])


def test_neighborhoods_are_distinct_and_sorted(registry: ClientRegistry):
    assert registry.neighborhoods() == ["Centro", "Tirol"]


def test_list_clients_filters_by_neighborhood(registry: ClientRegistry):
    assert [client.id for client in registry.list_clients("Tirol")] == ["A", "C"]
    assert registry.list_clients("Ponta Negra") == []


def test_update_replaces_mutable_fields(registry: ClientRegistry):
    updated = registry.update("B", {"name": "Padaria Central", "lat": -5.79, "lng": -35.21})

    assert updated.name == "Padaria Central"
    assert updated.location_approximate is False
    assert registry.get("B").lat == -5.79


def test_update_clearing_coordinate_marks_location_approximate(registry: ClientRegistry):
    registry.update("B", {"lat": -5.79, "lng": -35.21})
    updated = registry.update("B", {"lat": None})

    assert updated.lat is None and updated.lng is None
    assert updated.location_approximate is True


def test_update_rejects_blank_address_and_unknown_fields(registry: ClientRegistry):
    with pytest.raises(ValueError):
        registry.update("A", {"address": " "})
    with pytest.raises(ValueError):
        registry.update("A", {"id": "Z"})
    assert registry.get("A").address == "Rua A, 100"


def test_update_unknown_client_raises_key_error(registry: ClientRegistry):
    with pytest.raises(KeyError):
        registry.update("missing", {"name": "X"})


def test_remove_deletes_and_deselects(registry: ClientRegistry):
    registry.select(["A", "B"])

    assert registry.remove("A") is True
    assert "A" not in registry
    assert registry.selected_ids() == ["B"]


def test_remove_unknown_id_is_noop(registry: ClientRegistry):
    assert registry.remove("missing") is False
    assert registry.remove("missing") is False
    assert len(registry) == 3


def test_select_neighborhood_unions_with_selection(registry: ClientRegistry):
    registry.select(["B"])
    selected = registry.select_neighborhood("Tirol")

    assert selected == ["B", "A", "C"]
    # selected_clients follows registry order
    assert [client.id for client in registry.selected_clients()] == ["A", "B", "C"]


def test_toggle_and_clear_selection(registry: ClientRegistry):
    assert registry.toggle("A") == ["A"]
    assert registry.toggle("A") == []
    registry.select(["A", "C"])
    assert registry.clear_selection() == []
    assert registry.selected_clients() == []


def test_select_unknown_id_raises_without_changes(registry: ClientRegistry):
    with pytest.raises(KeyError):
        registry.select(["A", "missing"])
    assert registry.selected_ids() == []


def test_selection_change_discards_itinerary(registry: ClientRegistry):
    registry.select(["A", "B"])
    registry.store_itinerary(Itinerary(stops=[RouteStop(client=registry.get("A"), stop_order=1)]))
    assert registry.itinerary is not None

    registry.deselect(["B"])

    assert registry.itinerary is None


def test_busy_allows_single_outstanding_request(registry: ClientRegistry):
    with registry.busy("sequencing"):
        with pytest.raises(RequestInProgressError):
            with registry.busy("extraction"):
                pass

    with registry.busy("extraction"):
        pass
