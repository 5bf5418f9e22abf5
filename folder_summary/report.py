"""Markdown report rendering."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import List, Mapping, Sequence

from jinja2 import Environment, FileSystemLoader

from .config import SummaryConfig
from .errors import FileAccessError
from .logging import get_logger
from .manifests import get_project_name
from .models import StructuralFacts

TEMPLATE_NAME = "summary.md.j2"

_FENCE_BY_SUFFIX = {
    ".rs": "rust",
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
}

logger = get_logger("report")


@dataclass
class FileSection:
    path: str
    fence: str
    facts: StructuralFacts


class SummaryReport:
    """Renders aggregated facts into the Markdown summary and writes it to disk."""

    def __init__(self, config: SummaryConfig, *, templates_dir: Path | None = None) -> None:
        self.config = config
        directories = []
        if templates_dir is not None:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        self._env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(
        self,
        *,
        docs: Sequence[str],
        package_info: Mapping[str, str],
        analysis: Mapping[str, StructuralFacts],
    ) -> str:
        files: List[FileSection] = [
            FileSection(path=path, fence=_fence_for(path), facts=facts)
            for path, facts in sorted(analysis.items())
        ]
        template = self._env.get_template(TEMPLATE_NAME)
        return template.render(
            docs=list(docs),
            package_info=sorted(package_info.items()),
            files=files,
        )

    def write(
        self,
        folder: str | Path,
        *,
        docs: Sequence[str],
        package_info: Mapping[str, str],
        analysis: Mapping[str, StructuralFacts],
        today: date | None = None,
    ) -> Path:
        """Render the report for ``folder`` and return the written path."""
        folder_path = Path(folder).expanduser().resolve()
        project = get_project_name(folder_path) or folder_path.name or "unknown"
        content = self.render(docs=docs, package_info=package_info, analysis=analysis)

        output_dir = self.config.summary_output_path()
        target = output_dir / self.config.summary_filename(project, today=today)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise FileAccessError(f"Unable to write summary {target}: {exc}") from exc
        logger.info("Summary written to %s", target)
        return target


def _fence_for(path: str) -> str:
    return _FENCE_BY_SUFFIX.get(Path(path).suffix.lower(), "")


__all__ = ["FileSection", "SummaryReport", "TEMPLATE_NAME"]

