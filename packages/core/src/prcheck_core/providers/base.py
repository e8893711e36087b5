"""Base model provider implementing the Template Method pattern.

All providers share the same completion algorithm:
    complete() → _call_with_retry() → _call_api()   ← only this differs per provider

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response

Prompt construction lives in prcheck_core.prompts and response parsing in
prcheck_core.parser, so a provider never needs to know what it is analysing.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

_MAX_RETRIES = 3
_MAX_TOKENS = 3000


class BaseProvider(ABC):
    MAX_RETRIES: int = _MAX_RETRIES

    def __init__(self, max_tokens: int = _MAX_TOKENS):
        self.max_tokens = max_tokens

    def complete(self, prompt: str) -> str | None:
        """Send a single-turn prompt and return the model's text, or None if every attempt failed."""
        return self._call_with_retry(prompt)

    @abstractmethod
    def _call_api(self, prompt: str) -> str:
        """Make a single API call and return the raw text response.

        Should raise on failure; _call_with_retry handles retries and logging.
        """

    def _call_with_retry(self, prompt: str) -> str | None:
        for attempt in range(self.MAX_RETRIES):
            try:
                return self._call_api(prompt)
            except Exception as e:
                if attempt == self.MAX_RETRIES - 1:
                    logger.error(
                        "%s API failed after %d attempts: %s",
                        self.__class__.__name__,
                        self.MAX_RETRIES,
                        e,
                    )
                    return None
                delay = 2**attempt
                logger.warning(
                    "%s API error (attempt %d/%d): %s. Retrying in %ds...",
                    self.__class__.__name__,
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    delay,
                )
                time.sleep(delay)
