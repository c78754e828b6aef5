"""PDF client extraction."""

from .service import build_client_record, extract_clients, import_clients_from_pdf

__all__ = [
    "build_client_record",
    "extract_clients",
    "import_clients_from_pdf",
]
