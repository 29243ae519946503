"""LLM provider module for infrareport.

This module provides the interface to the remote vision and image models.
Models are configured in ~/.infrareport/config.yaml.
"""

from typing import Optional

from dotenv import load_dotenv

from infrareport.exceptions import MissingAPIKeyError
from infrareport.llm.base import BaseVisionProvider

# Load environment variables from .env file
load_dotenv()


def get_provider(
    model: Optional[str] = None,
    image_model: Optional[str] = None,
    settings=None,
) -> BaseVisionProvider:
    """Get a vision provider instance.

    Args:
        model: Analysis model override.
        image_model: Image model override.
        settings: Settings to take defaults from. Defaults to load_settings().

    Returns:
        The configured provider.
    """
    from infrareport.config import load_settings
    from infrareport.llm.google_provider import GoogleProvider

    settings = settings or load_settings()
    return GoogleProvider(
        model=model or settings.analysis_model,
        image_model=image_model or settings.image_model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )


# Export commonly used items
__all__ = [
    "BaseVisionProvider",
    "MissingAPIKeyError",
    "get_provider",
]
