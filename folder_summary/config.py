"""Configuration loading for folder-summary (.folder-summary.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .errors import FolderSummaryError

CONFIG_FILENAME = ".folder-summary.yml"
DEFAULT_PROVIDER = "ollama"
DEFAULT_MODELS = {
    "ollama": "mannix/gemma2-2b",
    "openai": "gpt-4o-mini",
    "gemini": "gemini-1.5-flash",
}
DEFAULT_PROMPT_PREFIX = "Summarize this function in one line: "
DEFAULT_CACHE_FILE = "analysis_cache.json"
DEFAULT_FILENAME_FORMAT = "summary-{folder}-{date}.md"
DEFAULT_CODE_IDENTIFIERS = ("Cargo.toml", "package.json", "setup.py", "requirements.txt")
DEFAULT_IGNORE_PATTERNS = (
    "node_modules",
    "target",
    "dist",
    "build",
    ".git",
    ".*ignore",
    "*.log",
    "*.tmp",
    "*.temp",
    "*.swp",
    "*.bak",
)

# Per-provider environment variables: (model, api key, base url).
_PROVIDER_ENV = {
    "ollama": ("OLLAMA_MODEL", None, None),
    "openai": ("OPENAI_MODEL", "OPENAI_API_KEY", "CUSTOM_OPENAI_URL"),
    "gemini": ("GEMINI_MODEL", "GEMINI_API_KEY", None),
}


class ConfigError(FolderSummaryError):
    """Raised when the configuration file cannot be parsed or is inconsistent."""


@dataclass
class LLMConfig:
    """Text-generation provider settings, resolved once at load time."""

    provider: str = DEFAULT_PROVIDER
    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    request_timeout: Optional[float] = 60.0
    prompt_prefix: str = DEFAULT_PROMPT_PREFIX

    @property
    def enabled(self) -> bool:
        return self.provider != "none"

    @property
    def resolved_model(self) -> str:
        return self.model or DEFAULT_MODELS.get(self.provider, "")


@dataclass
class AnalysisConfig:
    """Worker pool, cache location and analyzer selection."""

    max_workers: Optional[int] = None
    cache_file: Optional[str] = DEFAULT_CACHE_FILE
    enabled: Optional[List[str]] = None


@dataclass
class OutputConfig:
    """Where the Markdown report is written."""

    output_path: Optional[str] = None
    filename_format: Optional[str] = None


@dataclass
class SummaryConfig:
    """Represents the settings defined in .folder-summary.yml."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    summary: OutputConfig = field(default_factory=OutputConfig)
    ignore_paths: List[str] = field(default_factory=list)
    code_identifiers: List[str] = field(default_factory=lambda: list(DEFAULT_CODE_IDENTIFIERS))

    def ignore_patterns(self) -> List[str]:
        """Configured ignore globs followed by the built-in ones."""
        return [*self.ignore_paths, *DEFAULT_IGNORE_PATTERNS]

    def cache_path(self) -> Optional[Path]:
        if not self.analysis.cache_file:
            return None
        path = Path(self.analysis.cache_file).expanduser()
        return path if path.is_absolute() else self.root / path

    def summary_output_path(self) -> Path:
        if self.summary.output_path:
            return Path(self.summary.output_path).expanduser()
        return Path.home() / ".local" / "share" / "folder_summary"

    def summary_filename(self, folder_name: str, *, today: date | None = None) -> str:
        date_str = (today or date.today()).strftime("%Y-%m-%d")
        template = self.summary.filename_format or DEFAULT_FILENAME_FORMAT
        return template.replace("{folder}", folder_name).replace("{date}", date_str)


def load_config(config_path: Path, environ: Mapping[str, str] | None = None) -> SummaryConfig:
    """Load configuration from disk and apply environment overrides."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    env = os.environ if environ is None else environ

    if not config_file.exists():
        config = SummaryConfig(root=root)
        apply_environment(config.llm, env)
        return config

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    llm_data = _as_dict(data.get("llm"))
    llm = LLMConfig(
        provider=(_as_str(llm_data.get("provider")) or DEFAULT_PROVIDER).lower(),
        model=_as_str(llm_data.get("model")),
        base_url=_as_str(llm_data.get("base_url")),
        api_key=_as_str(llm_data.get("api_key")),
        temperature=_as_float(llm_data.get("temperature")),
        max_tokens=_as_int(llm_data.get("max_tokens")),
        request_timeout=_as_float(llm_data.get("request_timeout")) or 60.0,
        prompt_prefix=_as_str(llm_data.get("prompt_prefix")) or DEFAULT_PROMPT_PREFIX,
    )
    apply_environment(llm, env)

    analysis_data = _as_dict(data.get("analysis"))
    analysis = AnalysisConfig()
    if analysis_data:
        max_workers = _as_int(analysis_data.get("max_workers"))
        if max_workers is not None and max_workers < 1:
            raise ConfigError("analysis.max_workers must be at least 1")
        analysis.max_workers = max_workers
        if "cache_file" in analysis_data:
            analysis.cache_file = _as_str(analysis_data.get("cache_file"))
        if "enabled" in analysis_data:
            analysis.enabled = _as_str_list(analysis_data.get("enabled"))

    summary_data = _as_dict(data.get("summary"))
    summary = OutputConfig(
        output_path=_as_str(summary_data.get("output_path")),
        filename_format=_as_str(summary_data.get("filename_format")),
    )

    code_identifiers = _as_str_list(data.get("code_identifiers")) or list(
        DEFAULT_CODE_IDENTIFIERS
    )

    return SummaryConfig(
        root=root,
        llm=llm,
        analysis=analysis,
        summary=summary,
        ignore_paths=_as_str_list(data.get("ignore_paths")),
        code_identifiers=code_identifiers,
    )


def apply_environment(llm: LLMConfig, environ: Mapping[str, str]) -> LLMConfig:
    """Let provider environment variables override file settings in place."""
    provider = environ.get("LLM_PROVIDER")
    if provider:
        llm.provider = provider.strip().lower()
    model_key, api_key_key, base_url_key = _PROVIDER_ENV.get(llm.provider, (None, None, None))
    if model_key and environ.get(model_key):
        llm.model = environ[model_key]
    if api_key_key and environ.get(api_key_key):
        llm.api_key = environ[api_key_key]
    if base_url_key and environ.get(base_url_key):
        llm.base_url = environ[base_url_key]
    return llm


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "AnalysisConfig",
    "ConfigError",
    "LLMConfig",
    "OutputConfig",
    "SummaryConfig",
    "apply_environment",
    "load_config",
]
