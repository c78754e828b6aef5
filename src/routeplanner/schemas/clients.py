"""Client registry API schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ClientModel(BaseModel):
    id: str
    name: str
    address: str
    neighborhood: str
    city: str
    state: str
    country: str
    whatsapp: str
    phone: Optional[str] = None
    info: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    location_approximate: bool = True


class ClientUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    whatsapp: Optional[str] = None
    phone: Optional[str] = None
    info: Optional[str] = None
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)


class ClientListResponse(BaseModel):
    items: List[ClientModel]
    total: int
    neighborhood: Optional[str] = None


class ImportResponse(BaseModel):
    imported: int
    total: int
    items: List[ClientModel]
    notice: Optional[str] = None


class RemoveResponse(BaseModel):
    id: str
    removed: bool


class SelectionRequest(BaseModel):
    action: Literal["select", "deselect", "toggle", "neighborhood", "clear"]
    client_ids: List[str] = Field(default_factory=list)
    neighborhood: Optional[str] = None


class SelectionResponse(BaseModel):
    selected_ids: List[str]
    count: int
