"""Summarizer test doubles."""

from __future__ import annotations

import threading
from typing import List


class RecordingSummarizer:
    """Summarizer double that records every prompt it receives."""

    def __init__(self, reply: str = " A short summary. \n") -> None:
        self.reply = reply
        self.prompts: List[str] = []
        self._lock = threading.Lock()

    def summarize(self, prompt: str) -> str:
        with self._lock:
            self.prompts.append(prompt)
        return self.reply


class FailingSummarizer:
    """Summarizer double whose service is always unavailable."""

    def summarize(self, prompt: str) -> str:
        raise RuntimeError("connection refused")


__all__ = ["FailingSummarizer", "RecordingSummarizer"]
