"""Static structure summaries for multi-language codebases."""

__version__ = "0.1.0"
