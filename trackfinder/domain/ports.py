from __future__ import annotations

from typing import Protocol


class TextGenerator(Protocol):
    """Port for the external text-generation provider.

    Implementations send the prompt in a single request and return the generated
    text. Transport, authorization and envelope problems are raised as
    ``ProviderError``; an expired timeout as ``ProviderTimeout``.
    """

    def generate(self, prompt: str) -> str:
        """Return the provider's free-form answer to ``prompt``."""
