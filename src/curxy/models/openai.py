"""Pydantic models for the parts of the OpenAI API the proxy looks at."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class ModelSelector(BaseModel):
    """The fields of a POST body used for routing.

    Only model is checked. stream is read for logging and, like everything
    else in the body, left for the upstream to judge.
    """

    model_config = ConfigDict(extra="allow")

    model: StrictStr = Field(min_length=1)
    stream: Any = None


class OpenAIModelEntry(BaseModel):
    """Entry of GET /v1/models."""

    id: str
    object: Literal["model"] = "model"
    created: int
    owned_by: Literal["ollama"] = "ollama"


class OpenAIModelList(BaseModel):
    """Response body for GET /v1/models."""

    object: Literal["list"] = "list"
    data: list[OpenAIModelEntry]
