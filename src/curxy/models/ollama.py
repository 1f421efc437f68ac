"""Pydantic models for Ollama's native model listing (GET /api/tags)."""

from pydantic import BaseModel, ConfigDict


class NativeModelEntry(BaseModel):
    """One installed model. Only the name is used."""

    model_config = ConfigDict(extra="ignore")

    name: str


class NativeModelList(BaseModel):
    """Response body of GET /api/tags."""

    model_config = ConfigDict(extra="ignore")

    models: list[NativeModelEntry] | None = None
