"""Source and documentation file collection."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from .config import DEFAULT_CODE_IDENTIFIERS, SummaryConfig
from .logging import get_logger

# Never worth descending into, whatever the ignore files say.
_SKIPPED_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".venv",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".idea",
        "node_modules",
    }
)
_SKIPPED_FILES = frozenset({".DS_Store", "Thumbs.db"})

DOCUMENTATION_SUFFIXES = (".md", ".txt", ".rst")

logger = get_logger("repo_scanner")


@dataclass(frozen=True)
class IgnoreRule:
    """One gitignore-style glob."""

    glob: str
    negated: bool = False
    dirs_only: bool = False
    rooted: bool = False

    @classmethod
    def parse(cls, line: str) -> Optional["IgnoreRule"]:
        text = line.strip()
        if not text or text.startswith("#"):
            return None
        negated = text.startswith("!")
        text = text[1:] if negated else text
        dirs_only = text.endswith("/")
        text = text.rstrip("/")
        # A slash anywhere but the end ties the glob to the scan root.
        rooted = "/" in text
        text = text.lstrip("/")
        if not text:
            return None
        return cls(glob=text, negated=negated, dirs_only=dirs_only, rooted=rooted)

    def matches(self, relative: str, is_dir: bool) -> bool:
        if self.dirs_only and not is_dir:
            return False
        if self.rooted:
            return fnmatchcase(relative, self.glob)
        return any(fnmatchcase(segment, self.glob) for segment in relative.split("/"))


@dataclass
class IgnoreMatcher:
    """Ordered ignore rules where the last matching rule decides."""

    rules: List[IgnoreRule] = field(default_factory=list)

    @classmethod
    def for_root(cls, root: Path, patterns: Iterable[str] = ()) -> "IgnoreMatcher":
        lines: List[str] = []
        gitignore = root / ".gitignore"
        if gitignore.is_file():
            try:
                lines.extend(gitignore.read_text(encoding="utf-8").splitlines())
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable %s: %s", gitignore, exc)
        lines.extend(patterns)
        return cls([rule for rule in map(IgnoreRule.parse, lines) if rule is not None])

    def ignored(self, relative: str, is_dir: bool) -> bool:
        verdict = False
        for rule in self.rules:
            if rule.matches(relative, is_dir):
                verdict = not rule.negated
        return verdict


def walk_tree(root: Path, matcher: IgnoreMatcher) -> Iterator[Tuple[Path, List[str], List[str]]]:
    """``os.walk`` over ``root`` with skipped and ignored entries pruned.

    Directories are visited in sorted order; callers may clear the yielded
    directory list to stop descending.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        prefix = "" if current == root else current.relative_to(root).as_posix() + "/"
        dirnames[:] = [
            name
            for name in sorted(dirnames)
            if name not in _SKIPPED_DIRS and not matcher.ignored(prefix + name, True)
        ]
        files = [
            name
            for name in sorted(filenames)
            if name not in _SKIPPED_FILES and not matcher.ignored(prefix + name, False)
        ]
        yield current, dirnames, files


class RepoScanner:
    """Walks a project tree to find the files worth analyzing."""

    def __init__(self, config: SummaryConfig | None = None) -> None:
        self.config = config

    def collect_code_files(self, root: str | Path, suffixes: Iterable[str]) -> List[str]:
        """Return sorted source paths with one of ``suffixes`` beneath code roots.

        A code root is a directory holding one of the configured identifier
        files (``Cargo.toml``, ``package.json``...). When no such directory
        exists the whole tree is searched.
        """
        root_path = _require_directory(root)
        wanted = {suffix.lower() for suffix in suffixes}
        matcher = self._matcher(root_path)
        code_roots = self._find_code_roots(root_path, matcher)
        logger.debug("Code roots under %s: %s", root_path, [str(path) for path in code_roots])

        collected: Set[str] = set()
        for code_root in code_roots:
            for directory, _, files in walk_tree(code_root, matcher):
                collected.update(
                    str(directory / name) for name in files if Path(name).suffix.lower() in wanted
                )
        result = sorted(collected)
        logger.info("Collected %d code files from %s", len(result), root_path)
        return result

    def collect_documentation_files(self, root: str | Path) -> List[str]:
        root_path = _require_directory(root)
        docs = [
            str(directory / name)
            for directory, _, files in walk_tree(root_path, self._matcher(root_path))
            for name in files
            if name.lower().endswith(DOCUMENTATION_SUFFIXES)
        ]
        return sorted(docs)

    def _matcher(self, root: Path) -> IgnoreMatcher:
        patterns = self.config.ignore_patterns() if self.config is not None else []
        return IgnoreMatcher.for_root(root, patterns)

    def _find_code_roots(self, root: Path, matcher: IgnoreMatcher) -> List[Path]:
        identifiers = (
            self.config.code_identifiers if self.config is not None else DEFAULT_CODE_IDENTIFIERS
        )
        found: List[Path] = []
        for directory, subdirs, files in walk_tree(root, matcher):
            if any(identifier in files for identifier in identifiers):
                found.append(directory)
                # Nested projects are covered by the enclosing root.
                subdirs[:] = []
        return found or [root]


def _require_directory(root: str | Path) -> Path:
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise FileNotFoundError(f"Directory not found: {root}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {root}")
    return root_path


__all__ = ["DOCUMENTATION_SUFFIXES", "IgnoreMatcher", "IgnoreRule", "RepoScanner", "walk_tree"]
