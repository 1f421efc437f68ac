"""Translate Ollama's model listing to the OpenAI format."""

import time
from typing import Any

from curxy.models.ollama import NativeModelList
from curxy.models.openai import OpenAIModelEntry, OpenAIModelList


def translate_model_list(native: Any) -> dict[str, Any]:
    """
    Translate a GET /api/tags body into a GET /v1/models body.

    Args:
        native: Decoded JSON from Ollama. A missing "models" key means no models.

    Returns:
        OpenAI model list dict. All entries share one creation timestamp
        taken when this function runs.

    Raises:
        pydantic.ValidationError: If the body does not look like an Ollama listing.
    """
    listing = NativeModelList.model_validate(native)
    created = int(time.time())

    data = [
        OpenAIModelEntry(id=entry.name, created=created)
        for entry in listing.models or []
    ]
    return OpenAIModelList(data=data).model_dump()
