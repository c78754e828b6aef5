"""Gemini API access."""

from .client import GeminiClient, check_readiness
from .prompts import (
    EXTRACTION_SCHEMA,
    SEQUENCING_SCHEMA,
    build_extraction_instruction,
    build_sequencing_prompt,
)

__all__ = [
    "GeminiClient",
    "check_readiness",
    "EXTRACTION_SCHEMA",
    "SEQUENCING_SCHEMA",
    "build_extraction_instruction",
    "build_sequencing_prompt",
]
