"""Prompt templates for the repaired-structure visualization.

Two stages: the derivation prompt asks the text model for a detailed image
description based on an excerpt of the analysis; the synthesis prompt wraps
that description for the image model.
"""

# Maximum characters of the analysis quoted in the derivation prompt
ANALYSIS_EXCERPT_CHARS = 500

VISUALIZATION_PROMPT_TEMPLATE = """Based on this structural analysis: "{analysis_excerpt}...", create a detailed description for generating an image of a fully restored Indian commercial building/viaduct structure. The description should include: modern materials, proper safety features, compliance with Indian building codes, professional finish, contemporary Indian infrastructure design elements, proper concrete finishing, modern safety railings, and urban Indian setting. Make it suitable for AI image generation."""

IMAGE_SYNTHESIS_TEMPLATE = """Photorealistic image of a fully restored Indian commercial building/viaduct structure. {enhanced_description} High quality architectural photography, professional lighting, modern construction materials, safety compliance with Indian building codes."""
