"""Analysis prompt template.

The full analysis request is the system prompt, the user's description and the
output schema, joined through named placeholders.
"""

OUTPUT_SCHEMA = """Please provide your response in the following JSON format:
{
  "repair_description": {
    "current_state": "Analysis of current infrastructure state",
    "completion_requirements": "Detailed list of what needs to be completed",
    "safety_measures": "Required safety features and compliance measures",
    "recommendations": "Step-by-step recommendations for completion"
  },
  "cost_estimation": {
    "total": "₹X,XX,XXX INR",
    "breakdown": {
      "materials": "₹XX,XXX INR",
      "labor": "₹XX,XXX INR",
      "permits": "₹XX,XXX INR",
      "safety_equipment": "₹XX,XXX INR"
    }
  },
  "timeline": {
    "estimated_duration": "X weeks/months",
    "phases": ["Phase 1: ...", "Phase 2: ..."]
  }
}"""

ANALYSIS_PROMPT_TEMPLATE = """{system_prompt}

User's Infrastructure Description: {user_description}

Please analyze the image and description to provide a comprehensive infrastructure completion plan. Include specific details about:
1. What elements are missing or incomplete
2. What needs to be added or repaired
3. How to ensure structural integrity
4. Cost estimates for completion
5. Required safety measures and compliance

{output_schema}"""
