from __future__ import annotations

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from revfix_core.providers.base import BaseSuggester


class OpenAISuggester(BaseSuggester):
    MODEL = "gpt-4o-mini"
    # Low temperature: the answer is spliced into a file verbatim.
    TEMPERATURE = 0.1
    TIMEOUT = 30.0

    def __init__(self, api_key: str):
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for this provider. Install it with: pip install openai"
            )
        self.client = _OpenAI(api_key=api_key, timeout=self.TIMEOUT)

    def _call_api(self, prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.MODEL,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        return (response.choices[0].message.content or "").strip()
