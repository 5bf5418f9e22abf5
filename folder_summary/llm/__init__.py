"""Text-generation provider adapters."""

from .runner import HTTPCall, LLMRunner, build_runner

__all__ = ["HTTPCall", "LLMRunner", "build_runner"]
