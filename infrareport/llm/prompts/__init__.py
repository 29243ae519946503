"""LLM prompt templates for infrastructure reports.

This package contains all prompt templates and their builders:
- system: The hidden civil-engineering instructions
- analysis: The analysis request with the JSON output schema
- visualization: Derivation and synthesis prompts for the repaired image
"""

from infrareport.llm.prompts.system import SYSTEM_PROMPT
from infrareport.llm.prompts.analysis import (
    ANALYSIS_PROMPT_TEMPLATE,
    OUTPUT_SCHEMA,
)
from infrareport.llm.prompts.visualization import (
    ANALYSIS_EXCERPT_CHARS,
    IMAGE_SYNTHESIS_TEMPLATE,
    VISUALIZATION_PROMPT_TEMPLATE,
)


def build_analysis_prompt(user_description: str) -> str:
    """Build the full analysis prompt.

    Args:
        user_description: The user's description of the infrastructure.

    Returns:
        The prompt sent with the image.
    """
    return ANALYSIS_PROMPT_TEMPLATE.format(
        system_prompt=SYSTEM_PROMPT,
        user_description=user_description.strip(),
        output_schema=OUTPUT_SCHEMA,
    )


def build_visualization_prompt(analysis_text: str, max_chars: int = ANALYSIS_EXCERPT_CHARS) -> str:
    """Build the derivation prompt from a bounded prefix of the analysis.

    Args:
        analysis_text: The raw analysis response.
        max_chars: Number of leading characters quoted.

    Returns:
        The derivation prompt.
    """
    return VISUALIZATION_PROMPT_TEMPLATE.format(analysis_excerpt=analysis_text[:max_chars])


def build_synthesis_prompt(enhanced_description: str) -> str:
    """Wrap an image description for the image model."""
    return IMAGE_SYNTHESIS_TEMPLATE.format(enhanced_description=enhanced_description.strip())


__all__ = [
    "SYSTEM_PROMPT",
    "ANALYSIS_PROMPT_TEMPLATE",
    "OUTPUT_SCHEMA",
    "ANALYSIS_EXCERPT_CHARS",
    "VISUALIZATION_PROMPT_TEMPLATE",
    "IMAGE_SYNTHESIS_TEMPLATE",
    "build_analysis_prompt",
    "build_visualization_prompt",
    "build_synthesis_prompt",
]
