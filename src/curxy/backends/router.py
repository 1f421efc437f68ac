"""Route model names to upstream endpoints."""

REMOTE_MODEL_PREFIX = "gpt-"


def is_remote_model(model: str) -> bool:
    """Return True for OpenAI model names such as "gpt-4-turbo".

    The name must continue after the dash, so "gpt" and "gpt-" stay local.
    """
    return model.startswith(REMOTE_MODEL_PREFIX) and len(model) > len(
        REMOTE_MODEL_PREFIX
    )


def select_upstream(model: str, local_endpoint: str, remote_endpoint: str) -> str:
    """
    Choose the upstream base URL for a model.

    Args:
        model: Model name from the request body.
        local_endpoint: Base URL of the Ollama daemon.
        remote_endpoint: Base URL of the OpenAI-compatible service.

    Returns:
        remote_endpoint for gpt-* models, local_endpoint for everything else.
    """
    if is_remote_model(model):
        return remote_endpoint
    return local_endpoint
