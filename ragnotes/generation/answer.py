"""
Answer generation: prompt assembly plus provider selection.
"""

from typing import Dict, List, Optional, Sequence

from .providers import IGenerationProvider, default_providers
from ..core.errors import GenerationError
from ..core.schema import Answer
from ..util.logging import logger

SYSTEM_PROMPT = (
    "When answering the question or responding, use the context provided, "
    "if it is provided and relevant. Otherwise answer from general knowledge."
)


def build_context_message(context_notes: Sequence[str]) -> str:
    """Format note texts as the 'Context:' bullet list."""
    return "Context:\n" + "\n".join(f"- {note}" for note in context_notes)


def build_messages(question: str, context_notes: Sequence[str]) -> List[Dict[str, str]]:
    """Context message (only when there is context), instructions, then the question."""
    messages = []
    if context_notes:
        messages.append({"role": "system", "content": build_context_message(context_notes)})
    messages.append({"role": "system", "content": SYSTEM_PROMPT})
    messages.append({"role": "user", "content": question})
    return messages


class AnswerGenerator:
    """Answers a question with the first available provider in priority order."""

    def __init__(self, providers: Optional[List[IGenerationProvider]] = None):
        self.providers = providers if providers is not None else default_providers()

    def select_provider(self) -> IGenerationProvider:
        for provider in self.providers:
            if provider.is_available():
                return provider
        raise GenerationError("No generation provider is available")

    def answer(self, question: str, context_notes: Sequence[str]) -> Answer:
        """
        Generate an answer for a question using the given context notes.

        The provider is chosen once per call. A failing provider is not
        retried and the next tier is not tried.
        """
        provider = self.select_provider()
        messages = build_messages(question, context_notes)

        try:
            text = provider.complete(messages)
        except GenerationError:
            logger.log_generation(provider.model_name, len(context_notes), status="failed")
            raise

        if not text or not text.strip():
            logger.log_generation(provider.model_name, len(context_notes), status="failed",
                                  details={"reason": "empty output"})
            raise GenerationError(
                f"Model {provider.model_name} returned no usable output",
                {"model": provider.model_name}
            )

        logger.log_generation(provider.model_name, len(context_notes), details={"tier": provider.tier})
        return Answer(text=text.strip(), model_used=provider.model_name)

    def check_health(self) -> bool:
        """Whether the provider an answer would use right now can be reached."""
        try:
            provider = self.select_provider()
        except GenerationError:
            return False
        return provider.check_health()
