"""Shared test fixtures and configuration."""

import io
import json
import tempfile
from pathlib import Path

import pytest
from PIL import Image

from infrareport.exceptions import MissingAPIKeyError
from infrareport.imaging import EncodedImage, ImageHandle
from infrareport.llm.base import BaseVisionProvider


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider(BaseVisionProvider):
    """In-memory provider recording every call."""

    def __init__(
        self,
        analysis: str = "",
        analyze_errors=None,
        image_uri: str = "data:image/png;base64,iVBORw0KGgo=",
        image_error=None,
        has_key: bool = True,
    ):
        self.analysis = analysis
        self.analyze_errors = list(analyze_errors or [])
        self.image_uri = image_uri
        self.image_error = image_error
        self._has_key = has_key
        self.analysis_calls = []
        self.synthesis_prompts = []

    async def analyze(self, prompt: str, image: EncodedImage) -> str:
        self.analysis_calls.append((prompt, image))
        if self.analyze_errors:
            raise self.analyze_errors.pop(0)
        return self.analysis

    async def synthesize_image(self, prompt: str) -> str:
        self.synthesis_prompts.append(prompt)
        if self.image_error is not None:
            raise self.image_error
        return self.image_uri

    def get_api_key(self) -> str:
        if not self._has_key:
            raise MissingAPIKeyError("Gemini API key not found.")
        return "test-key"


def _png_bytes(mode: str = "RGB", color=(120, 130, 140)) -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, (16, 12), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock():
    """A manually advanced clock."""
    return FakeClock()


@pytest.fixture
def sleeps():
    """Record of backoff delays requested by the code under test."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    """Async sleep that records the delay and returns immediately."""

    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep


@pytest.fixture
def png_bytes():
    """A small opaque PNG."""
    return _png_bytes()


@pytest.fixture
def transparent_png_bytes():
    """A small fully transparent PNG."""
    return _png_bytes("RGBA", (0, 0, 0, 0))


@pytest.fixture
def image_handle(png_bytes):
    """An uploaded image handle."""
    return ImageHandle(data=png_bytes, source="beam.png", mime_type="image/png")


@pytest.fixture
def image_file(temp_dir, png_bytes):
    """A PNG written to disk."""
    path = temp_dir / "beam.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture
def sample_analysis_dict():
    """Structured analysis as the model is asked to return it."""
    return {
        "repair_description": {
            "current_state": "Reinforced concrete beam with a diagonal shear crack.",
            "completion_requirements": ["Epoxy injection", "Carbon fibre wrapping"],
            "safety_measures": "Prop the slab before work begins.",
            "recommendations": "Inspect adjoining columns.",
        },
        "cost_estimation": {
            "total": "₹3,00,000 INR",
            "breakdown": {
                "materials": "₹1,20,000 INR",
                "labor": "₹1,30,000 INR",
                "permits": "₹20,000 INR",
                "safety_equipment": "₹30,000 INR",
            },
        },
        "timeline": {
            "estimated_duration": "6 weeks",
            "phases": ["Phase 1: Propping", "Phase 2: Injection", "Phase 3: Wrapping"],
        },
    }


@pytest.fixture
def sample_analysis_response(sample_analysis_dict):
    """Raw model response: prose around a fenced JSON block."""
    return (
        "Here is my assessment of the structure.\n\n"
        "```json\n"
        f"{json.dumps(sample_analysis_dict, indent=2, ensure_ascii=False)}\n"
        "```\n\n"
        "Let me know if you need anything else."
    )


@pytest.fixture
def fake_provider_factory():
    """Build FakeProvider instances."""
    return FakeProvider
