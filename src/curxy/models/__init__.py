"""Pydantic models for curxy."""

from curxy.models.config import ProxyConfig, ServerConfig, validate_url
from curxy.models.ollama import NativeModelEntry, NativeModelList
from curxy.models.openai import ModelSelector, OpenAIModelEntry, OpenAIModelList

__all__ = [
    "ModelSelector",
    "NativeModelEntry",
    "NativeModelList",
    "OpenAIModelEntry",
    "OpenAIModelList",
    "ProxyConfig",
    "ServerConfig",
    "validate_url",
]
