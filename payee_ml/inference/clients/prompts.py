"""Prompt text for payee classification."""

SYSTEM_PROMPT = (
    "You are an expert at classifying payee names as either a Business or an "
    "Individual. Businesses include companies, government bodies, non-profits, "
    "schools, churches and any other organization. Individuals are natural "
    "persons, with or without titles, credentials or generational suffixes. "
    "Respond with JSON only."
)

USER_PROMPT_TEMPLATE = """Classify this payee name: "{name}"

Respond with ONLY this JSON format, no additional text:
{{"classification": "Business" or "Individual", "confidence": 0-100, "reasoning": "Brief explanation", "matchingRules": ["signal", ...]}}

- classification: exactly "Business" or "Individual"
- confidence: your certainty as an integer from 0 to 100
- reasoning: one sentence
- matchingRules: short names of the signals you relied on (may be empty)
"""  # NOQA: E501


def build_messages(name: str) -> list[dict[str, str]]:
    """Chat messages for one payee name."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": USER_PROMPT_TEMPLATE.format(name=name)},
    ]
