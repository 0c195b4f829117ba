"""
Text generation over retrieved note context.
"""

from .answer import AnswerGenerator, SYSTEM_PROMPT, build_messages
from .providers import IGenerationProvider, OpenAIProvider, OllamaProvider, default_providers

__all__ = [
    'AnswerGenerator',
    'SYSTEM_PROMPT',
    'build_messages',
    'IGenerationProvider',
    'OpenAIProvider',
    'OllamaProvider',
    'default_providers'
]
