from __future__ import annotations

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from prcheck_core.providers.base import BaseProvider


class OpenAIProvider(BaseProvider):
    MODEL = "gpt-4o"

    def __init__(self, api_key: str, max_tokens: int = 3000):
        super().__init__(max_tokens=max_tokens)
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for this provider. " "Install it with: pip install 'prcheck[openai]'"
            )
        self.client = _OpenAI(api_key=api_key)

    def _call_api(self, prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.MODEL,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=self.max_tokens,
        )
        content = response.choices[0].message.content
        if not content:
            raise ValueError("empty completion")
        return content
