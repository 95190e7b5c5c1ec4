"""
Model chain used for ATS scoring.
"""
from typing import Optional
from resume_scanner.core import config

# Most capable first; later entries are cheaper and usually have separate quota
DEFAULT_MODEL_CHAIN = ["gpt-4o", "gpt-4o-mini", "gpt-3.5-turbo"]


def get_model_chain(configured: Optional[list[str]] = None) -> list[str]:
    """
    Ordered list of models to try for one analysis.

    Args:
        configured: Explicit list (e.g. from AI_MODELS); defaults to config

    Returns:
        De-duplicated model identifiers, order preserved
    """
    models = configured if configured is not None else config.AI_MODELS
    chain = []
    for model in models or DEFAULT_MODEL_CHAIN:
        if model not in chain:
            chain.append(model)
    return chain


def is_ai_configured() -> bool:
    """True when an OpenAI credential is present."""
    return bool(config.OPENAI_API_KEY)
