"""Google Gemini / Imagen provider implementation."""

import base64
import logging
from typing import Optional

import httpx
from google import genai
from google.genai import errors, types

from infrareport.config import (
    DEFAULT_ANALYSIS_MODEL,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
)
from infrareport.exceptions import (
    AccessDeniedError,
    NetworkError,
    QuotaExceededError,
    ReportError,
    UpstreamError,
    UpstreamFormatError,
)
from infrareport.imaging import EncodedImage
from infrareport.llm.base import BaseVisionProvider
from infrareport.llm.prompts import build_synthesis_prompt

logger = logging.getLogger(__name__)

# Harm categories filtered on the analysis request
SAFETY_CATEGORIES = [
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
]

# Generation parameters for the image-description step
DESCRIPTION_TEMPERATURE = 0.7
DESCRIPTION_MAX_TOKENS = 1024


def classify_api_error(error: errors.APIError) -> ReportError:
    """Map a google-genai API error onto the report error taxonomy.

    Args:
        error: The SDK error.

    Returns:
        The matching ReportError (not raised).
    """
    code = getattr(error, "code", None)
    message = getattr(error, "message", None) or str(error)

    if code == 429:
        return QuotaExceededError(
            f"API quota exceeded ({code}): {message}", status_code=code
        )
    # A 403 is never retried, even when its message mentions quota.
    if code == 403:
        return AccessDeniedError(
            "API access denied. Please check your API key and billing status. "
            "Make sure your API key is valid and has the necessary permissions."
        )
    if "quota" in message.lower():
        return QuotaExceededError(
            f"API quota exceeded ({code}): {message}", status_code=code
        )
    return UpstreamError(f"Gemini API error ({code}): {message}", status_code=code)


class GoogleProvider(BaseVisionProvider):
    """Gemini for analysis, Imagen for the repaired visualization."""

    def __init__(
        self,
        model: Optional[str] = None,
        image_model: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ):
        """Initialize the Google provider.

        Args:
            model: Gemini model for analysis. Defaults to gemini-1.5-pro.
            image_model: Imagen model for synthesis. Defaults to imagen-3.0-generate-001.
            temperature: Sampling temperature for the analysis.
            max_tokens: Output-length cap for the analysis.
        """
        self.model = model or DEFAULT_ANALYSIS_MODEL
        self.image_model = image_model or DEFAULT_IMAGE_MODEL
        self.temperature = temperature
        self.max_tokens = max_tokens

    def _client(self) -> genai.Client:
        return genai.Client(api_key=self.get_api_key())

    async def _generate_text(self, contents: list, config: types.GenerateContentConfig) -> str:
        """Call generate_content and return the first candidate's text.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            ReportError: Classified upstream or transport failure.
        """
        client = self._client()

        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except errors.APIError as e:
            raise classify_api_error(e)
        except httpx.TransportError as e:
            raise NetworkError(f"Network error while calling Gemini: {e}")

        if not response.candidates:
            raise UpstreamFormatError("No response generated from Gemini")

        candidate = response.candidates[0]
        finish_reason = str(getattr(candidate, "finish_reason", "") or "")
        if "SAFETY" in finish_reason:
            raise UpstreamFormatError(f"Gemini blocked the response due to safety filters: {finish_reason}")

        text = response.text
        if not text or not text.strip():
            raise UpstreamFormatError("Gemini returned an empty response")
        return text

    async def analyze(self, prompt: str, image: EncodedImage) -> str:
        """Analyze the image with Gemini.

        Args:
            prompt: The full analysis prompt.
            image: The transcoded image.

        Returns:
            The raw analysis text.
        """
        config = types.GenerateContentConfig(
            temperature=self.temperature,
            top_k=32,
            top_p=1.0,
            max_output_tokens=self.max_tokens,
            safety_settings=[
                types.SafetySetting(
                    category=category,
                    threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                )
                for category in SAFETY_CATEGORIES
            ],
        )
        contents = [
            prompt,
            types.Part.from_bytes(data=image.data, mime_type=image.mime_type),
        ]
        logger.debug("Calling %s with %d-byte image", self.model, len(image.data))
        return await self._generate_text(contents, config)

    async def describe_restoration(self, prompt: str) -> str:
        """Expand the derivation prompt into a detailed image description."""
        config = types.GenerateContentConfig(
            temperature=DESCRIPTION_TEMPERATURE,
            top_k=32,
            top_p=1.0,
            max_output_tokens=DESCRIPTION_MAX_TOKENS,
        )
        return await self._generate_text([prompt], config)

    async def synthesize_image(self, prompt: str) -> str:
        """Generate the repaired visualization with Imagen.

        Args:
            prompt: The derivation prompt built from the analysis.

        Returns:
            A PNG data URI.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            ReportError: Any upstream, transport or format failure.
        """
        description = await self.describe_restoration(prompt)
        client = self._client()

        try:
            response = await client.aio.models.generate_images(
                model=self.image_model,
                prompt=build_synthesis_prompt(description),
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    aspect_ratio="1:1",
                    safety_filter_level="BLOCK_MEDIUM_AND_ABOVE",
                    person_generation="DONT_ALLOW",
                ),
            )
        except errors.APIError as e:
            raise classify_api_error(e)
        except httpx.TransportError as e:
            raise NetworkError(f"Network error while calling Imagen: {e}")

        generated = response.generated_images or []
        if not generated or generated[0].image is None or not generated[0].image.image_bytes:
            raise UpstreamFormatError("Imagen returned no image")

        encoded = base64.b64encode(generated[0].image.image_bytes).decode("ascii")
        return f"data:image/png;base64,{encoded}"


__all__ = ["GoogleProvider", "classify_api_error"]
