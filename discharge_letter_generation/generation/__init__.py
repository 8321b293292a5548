"""
Generation Layer - Request Composition

This layer turns form state and normalized attachments into the request
sent to the LLM.

Submodules:
    templates.py      → System instruction + conditional instruction blocks
    prompt_builder.py → Placeholder substitution and request assembly

Dependency Rule:
    This layer depends on: core
    This layer is used by: pipeline (orchestrator)

Author: Shubham Singh
Date: October 2026
"""

from discharge_letter_generation.generation.prompt_builder import (
    PromptBuilder,
    contains_placeholders,
)
from discharge_letter_generation.generation.templates import SYSTEM_INSTRUCTION

__all__ = [
    "PromptBuilder",
    "SYSTEM_INSTRUCTION",
    "contains_placeholders",
]
