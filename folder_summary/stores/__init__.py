"""Persistent stores used across runs."""

from .analysis_cache import AnalysisCache

__all__ = ["AnalysisCache"]
