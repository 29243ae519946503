"""Base classes and shared utilities for vision model providers."""

import os
from abc import ABC, abstractmethod

from infrareport.config import API_KEY_ENV_VARS, CREDENTIAL_KEY
from infrareport.exceptions import MissingAPIKeyError
from infrareport.imaging import EncodedImage


class BaseVisionProvider(ABC):
    """Abstract base class for providers serving analysis and image synthesis."""

    @abstractmethod
    async def analyze(self, prompt: str, image: EncodedImage) -> str:
        """Analyze an image with an instruction prompt.

        Args:
            prompt: The full analysis prompt.
            image: The transcoded image.

        Returns:
            The generated analysis text.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            QuotaExceededError: If the upstream quota is exhausted (HTTP 429).
            AccessDeniedError: If the key is rejected (HTTP 403).
            UpstreamFormatError: If the response carries no text.
            UpstreamError: For other non-2xx responses.
            NetworkError: For transport failures.
        """
        pass

    @abstractmethod
    async def synthesize_image(self, prompt: str) -> str:
        """Generate an image of the repaired structure.

        Args:
            prompt: The derivation prompt built from the analysis.

        Returns:
            The image as a data URI.

        Raises:
            ReportError: Any failure; callers substitute a placeholder.
        """
        pass

    def get_api_key(self) -> str:
        """Get the API key from environment or credentials file.

        Checks in order:
        1. GEMINI_API_KEY / GOOGLE_API_KEY environment variables
        2. ~/.infrareport/credentials file
        3. Repo-level .env file (if loaded)

        Returns:
            The API key string.

        Raises:
            MissingAPIKeyError: If the API key is not found.
        """
        for env_var_name in API_KEY_ENV_VARS:
            api_key = os.getenv(env_var_name)
            if api_key:
                return api_key

        from infrareport import global_config

        try:
            api_key = global_config.get_credential(CREDENTIAL_KEY)
        except global_config.GlobalConfigError as e:
            raise MissingAPIKeyError(f"Could not read stored credentials: {e}")
        if api_key:
            return api_key

        raise MissingAPIKeyError(
            "Gemini API key not found. Set it using:\n"
            f"  1. Environment variable: export {CREDENTIAL_KEY}=your_key_here\n"
            "  2. Run: infrareport config set-key\n"
            "  3. Add it to a .env file in the working directory"
        )

    def has_api_key(self) -> bool:
        """Check whether an API key is available without raising."""
        try:
            self.get_api_key()
        except MissingAPIKeyError:
            return False
        return True
