"""
API request/response models for the extraction service.

All models use Pydantic v2 for validation and serialization.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# --- Requests ---

class ParseRequest(BaseModel):
    """Request body for JSON extraction."""
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(
        ...,
        description="Raw LLM output that may contain a JSON object",
        json_schema_extra={"example": 'Sure! {name: "John", age: 30,}'}
    )
    mode: Literal["parse", "repair"] = Field(
        default="parse",
        description="'parse' for strict extraction, 'repair' to fix syntax and root keys",
    )
    json_schema: dict[str, Any] | None = Field(
        default=None,
        alias="schema",
        description="Optional JSON Schema with a single root key (repair mode only)",
    )


class InspectRequest(BaseModel):
    """Request body for the cheap pre-filter checks."""
    text: str


# --- Responses ---

class ParseResponse(BaseModel):
    """Parsed value plus how it was obtained."""
    result: Any
    mode: str
    reconciled: bool = False


class InspectResponse(BaseModel):
    has_possible_json: bool
    is_json_string: bool


class HealthResponse(BaseModel):
    status: str
    version: str
    modes: list[str]


class ErrorResponse(BaseModel):
    error: str
    message: str
    attempts: int | None = None
    preview: str | None = None
