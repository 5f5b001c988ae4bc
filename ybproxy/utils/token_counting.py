"""Approximate token counting for usage reporting.

The vendor reports no usage, so prompt and completion sizes are estimated
from character counts. The estimate is deterministic and never decreases as
text grows; it is not meant to match any real tokenizer.
"""

import math
from collections.abc import Callable, Iterable

from ybproxy.models.openai import OpenAIMessage


CHARS_PER_TOKEN = 4  # Rough approximation shared by prompt and completion


def approximate_token_count(text: str) -> int:
    """Estimate the number of tokens in ``text``."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


class TokenCounter:
    """Token estimation for prompts and completions."""

    def __init__(
        self, estimator: Callable[[str], int] = approximate_token_count
    ) -> None:
        self._estimator = estimator

    def count_tokens(self, text: str) -> int:
        return self._estimator(text)

    def count_messages_tokens(self, messages: Iterable[OpenAIMessage]) -> int:
        """Count tokens over the concatenated text of ``messages``.

        Image and file parts are not counted.
        """
        return self.count_tokens("".join(m.text_content() for m in messages))
