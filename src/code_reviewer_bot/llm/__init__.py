"""
LLM Layer

Oracle backends, prompt rendering, and recovery of structured
findings from raw LLM output.
"""

from .oracle import Oracle, OracleError, OpenAICompatibleOracle, create_oracle
from .prompts import PromptBuilder
from .sanitizer import ResponseSanitizer

__all__ = [
    'Oracle',
    'OracleError',
    'OpenAICompatibleOracle',
    'create_oracle',
    'PromptBuilder',
    'ResponseSanitizer',
]
