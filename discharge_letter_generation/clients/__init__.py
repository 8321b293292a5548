"""
Clients Layer - LLM API Client Abstractions

This layer provides clean abstractions over LLM providers (Gemini, OpenAI),
enabling the rest of the system to work with any provider interchangeably.

Submodules:
    llm_client.py → Protocol and base implementation
    gemini_client.py → Google Gemini implementation
    openai_client.py → OpenAI implementation

Author: Shubham Singh
Date: October 2026
"""

from discharge_letter_generation.clients.llm_client import (
    LLMClientProtocol,
    BaseLLMClient,
)
from discharge_letter_generation.clients.gemini_client import GeminiClient
from discharge_letter_generation.clients.openai_client import OpenAIClient

__all__ = [
    "LLMClientProtocol",
    "BaseLLMClient",
    "GeminiClient",
    "OpenAIClient",
]
