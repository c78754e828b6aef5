"""Client registry endpoints."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status
from starlette.concurrency import run_in_threadpool

from ...config import settings
from ...errors import EmptyExtractionError, PayloadTooLargeError, RoutePlannerError
from ...schemas.clients import (
    ClientListResponse,
    ClientModel,
    ClientUpdate,
    ImportResponse,
    RemoveResponse,
    SelectionRequest,
    SelectionResponse,
)
from ...services.clients import get_registry
from ...services.extraction import import_clients_from_pdf
from ...services.outputs.itinerary_formatter import client_to_model
from ..errors import to_http_exception

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("", response_model=ClientListResponse, status_code=status.HTTP_200_OK)
def list_clients(
    neighborhood: str | None = Query(default=None, description="Optional neighborhood filter"),
) -> ClientListResponse:
    clients = get_registry().list_clients(neighborhood)
    return ClientListResponse(
        items=[client_to_model(client) for client in clients],
        total=len(clients),
        neighborhood=neighborhood,
    )


@router.delete("", status_code=status.HTTP_200_OK)
def clear_clients() -> dict:
    """Drop every client, the selection and the current itinerary."""
    registry = get_registry()
    removed = len(registry)
    registry.clear()
    return {"success": True, "removed": removed}


@router.get("/neighborhoods", response_model=list[str], status_code=status.HTTP_200_OK)
def list_neighborhoods() -> list[str]:
    return get_registry().neighborhoods()


@router.post("/import", response_model=ImportResponse, status_code=status.HTTP_200_OK)
async def import_clients(file: UploadFile = File(...)) -> ImportResponse:
    """Extract client records from an uploaded PDF and add them to the registry."""
    if not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Filename is required.")
    suffix = Path(file.filename).suffix.lower()
    if suffix != ".pdf" and file.content_type != "application/pdf":
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Only PDF documents are supported.",
        )

    # Never buffer more than one byte past the limit.
    limit = settings.max_pdf_bytes
    if file.size is not None and file.size > limit:
        raise to_http_exception(PayloadTooLargeError(file.size, limit))
    contents = await file.read(limit + 1)
    if len(contents) > limit:
        raise to_http_exception(PayloadTooLargeError(None, limit))
    registry = get_registry()
    try:
        records = await run_in_threadpool(import_clients_from_pdf, contents, registry)
    except EmptyExtractionError as exc:
        return ImportResponse(imported=0, total=len(registry), items=[], notice=exc.message)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RoutePlannerError as exc:
        logging.warning(f"Client import from '{file.filename}' failed ({exc.kind}): {exc.message}")
        raise to_http_exception(exc) from exc
    except Exception as exc:
        logging.exception(f"Error importing clients from '{file.filename}': {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process the document. Try again.",
        ) from exc

    return ImportResponse(
        imported=len(records),
        total=len(registry),
        items=[client_to_model(record) for record in records],
    )


@router.get("/selection", response_model=SelectionResponse, status_code=status.HTTP_200_OK)
def get_selection() -> SelectionResponse:
    selected = get_registry().selected_ids()
    return SelectionResponse(selected_ids=selected, count=len(selected))


@router.post("/selection", response_model=SelectionResponse, status_code=status.HTTP_200_OK)
def update_selection(payload: SelectionRequest) -> SelectionResponse:
    registry = get_registry()
    try:
        if payload.action == "select":
            selected = registry.select(payload.client_ids)
        elif payload.action == "deselect":
            selected = registry.deselect(payload.client_ids)
        elif payload.action == "toggle":
            if len(payload.client_ids) != 1:
                raise ValueError("Toggle expects exactly one client id.")
            selected = registry.toggle(payload.client_ids[0])
        elif payload.action == "neighborhood":
            if not payload.neighborhood:
                raise ValueError("A neighborhood is required.")
            selected = registry.select_neighborhood(payload.neighborhood)
        else:
            selected = registry.clear_selection()
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.args[0]) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return SelectionResponse(selected_ids=selected, count=len(selected))


@router.get("/{client_id}", response_model=ClientModel, status_code=status.HTTP_200_OK)
def get_client(client_id: str) -> ClientModel:
    try:
        return client_to_model(get_registry().get(client_id))
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.args[0]) from exc


@router.patch("/{client_id}", response_model=ClientModel, status_code=status.HTTP_200_OK)
def update_client(client_id: str, payload: ClientUpdate) -> ClientModel:
    try:
        updated = get_registry().update(client_id, payload.model_dump(exclude_unset=True))
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.args[0]) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return client_to_model(updated)


@router.delete("/{client_id}", response_model=RemoveResponse, status_code=status.HTTP_200_OK)
def remove_client(client_id: str) -> RemoveResponse:
    """Remove a client; unknown ids are reported but not treated as errors."""
    removed = get_registry().remove(client_id)
    return RemoveResponse(id=client_id, removed=removed)
