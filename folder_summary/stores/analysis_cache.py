"""Persistent cache for per-file structural facts."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from ..errors import CacheError, FileAccessError
from ..logging import get_logger
from ..models import StructuralFacts

_CACHE_VERSION = 1

logger = get_logger("stores.analysis_cache")


class AnalysisCache:
    """Stores analysis results keyed by file path and modification time.

    An entry is valid only while the file's current modification time (whole
    seconds) equals the stored one. Every :meth:`set` rewrites the whole
    table to disk. The class is not thread-safe; callers share it under a
    lock. With ``path=None`` the cache lives in memory only.
    """

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._entries: Dict[str, Dict[str, object]] = {}
        if self._path is not None:
            self._load(self._path)

    @property
    def path(self) -> Path | None:
        return self._path

    def get(self, file_path: str) -> Optional[StructuralFacts]:
        entry = self._entries.get(file_path)
        if entry is None:
            return None
        try:
            current = _modified_seconds(file_path)
        except OSError:
            return None
        if entry.get("last_modified") != current:
            return None
        try:
            return StructuralFacts.from_dict(entry["analysis"])  # type: ignore[arg-type]
        except (KeyError, TypeError, ValueError):
            logger.debug("Discarding malformed cache entry for %s", file_path)
            return None

    def set(self, file_path: str, facts: StructuralFacts) -> None:
        try:
            last_modified = _modified_seconds(file_path)
        except OSError as exc:
            raise FileAccessError(f"Unable to read modification time of {file_path}: {exc}") from exc
        self._entries[file_path] = {
            "last_modified": last_modified,
            "analysis": facts.to_dict(),
        }
        self.persist()

    def persist(self) -> None:
        if self._path is None:
            return
        payload = {
            "version": _CACHE_VERSION,
            "entries": self._entries,
        }
        try:
            text = json.dumps(payload, indent=2, sort_keys=True)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            # Write beside the live file and swap it in, so a failed write
            # leaves the previous table intact.
            handle = tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            )
            temporary = Path(handle.name)
            try:
                with handle:
                    handle.write(text)
                os.replace(temporary, self._path)
            except BaseException:
                temporary.unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise CacheError(f"Unable to write analysis cache {self._path}: {exc}") from exc

    def clear(self) -> None:
        self._entries.clear()
        self.persist()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, file_path: object) -> bool:
        return file_path in self._entries

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.debug("No analysis cache at %s; starting empty", path)
            return
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.debug("Ignoring unreadable analysis cache %s: %s", path, exc)
            return
        if not isinstance(data, dict) or data.get("version") != _CACHE_VERSION:
            logger.debug("Ignoring analysis cache %s with unexpected version", path)
            return
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return
        valid_entries: Dict[str, Dict[str, object]] = {}
        for key, raw in entries.items():
            if not isinstance(key, str) or not isinstance(raw, dict):
                continue
            if not isinstance(raw.get("last_modified"), int) or not isinstance(
                raw.get("analysis"), dict
            ):
                continue
            valid_entries[key] = raw
        self._entries = valid_entries
        logger.debug("Loaded %d cached analyses from %s", len(valid_entries), path)


def _modified_seconds(file_path: str) -> int:
    return int(os.stat(file_path).st_mtime)


__all__ = ["AnalysisCache"]
