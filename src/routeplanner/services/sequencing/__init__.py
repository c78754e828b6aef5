"""Route sequencing."""

from .service import SequencingResult, plan_route, sequence_clients, validate_permutation

__all__ = [
    "SequencingResult",
    "plan_route",
    "sequence_clients",
    "validate_permutation",
]
