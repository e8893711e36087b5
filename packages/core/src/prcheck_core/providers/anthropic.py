from __future__ import annotations

from prcheck_core.providers.base import BaseProvider


class AnthropicProvider(BaseProvider):
    MODEL = "claude-sonnet-4-20250514"

    def __init__(self, api_key: str, max_tokens: int = 3000):
        super().__init__(max_tokens=max_tokens)
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this provider. "
                "Install it with: pip install 'prcheck[anthropic]'"
            )
        self.client = Anthropic(api_key=api_key)

    def _call_api(self, prompt: str) -> str:
        # __init__ already checked the optional anthropic package is installed.
        from anthropic.types import TextBlock

        response = self.client.messages.create(
            model=self.MODEL,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=self.max_tokens,
        )
        text_blocks = [block.text for block in response.content if isinstance(block, TextBlock)]
        return "".join(text_blocks).strip()
