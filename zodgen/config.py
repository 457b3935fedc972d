# File: zodgen/config.py
"""
zodgen - Configuration Provider
===============================
Locates, reads and validates the generator configuration.

Search order when no explicit path is given (first hit wins)::

    zod-generator.config.json
    zod-generator.config.yaml
    zod-generator.config.yml
    .zod-generator.json
    .zod-generator.yaml

No file found means defaults (``ParseResult.is_default``).  Every failure
is raised as ``ConfigParseError``; ``create_config_error_message`` turns
one into a multi-line, user-facing explanation.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import ValidationError

from zodgen.models import GeneratorConfig

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.config")

CONFIG_FILE_NAMES: Tuple[str, ...] = (
    "zod-generator.config.json",
    "zod-generator.config.yaml",
    "zod-generator.config.yml",
    ".zod-generator.json",
    ".zod-generator.yaml",
)

_LEGACY_VARIANTS: Tuple[str, ...] = ("pure", "input", "result")

PathLike = Union[str, Path]


class ConfigParseError(Exception):
    """Raised for any configuration loading or validation failure."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        file_path: Optional[PathLike] = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.cause: Optional[BaseException] = cause
        self.file_path: Optional[str] = str(file_path) if file_path is not None else None


@dataclass(frozen=True, slots=True)
class ParseResult:
    config: GeneratorConfig
    config_path: Optional[Path] = None
    is_default: bool = False


# ---------------------------------------------------------------------------
# Discovery & reading
# ---------------------------------------------------------------------------


def discover_config_file(base_dir: Optional[PathLike] = None) -> Optional[Path]:
    directory: Path = Path(base_dir) if base_dir is not None else Path.cwd()
    for name in CONFIG_FILE_NAMES:
        candidate: Path = directory / name
        if candidate.exists():
            logger.debug("Discovered configuration file %s", candidate)
            return candidate
    return None


def resolve_config_path(config_path: PathLike, base_dir: Optional[PathLike] = None) -> Path:
    path: Path = Path(config_path)
    if path.is_absolute():
        return path
    return (Path(base_dir) if base_dir is not None else Path.cwd()) / path


def _read_config_text(path: Path) -> str:
    if not path.exists():
        raise ConfigParseError(
            f"Configuration file not found at resolved path: {path}. "
            f"Please verify the file exists or remove the config option to use defaults.",
            file_path=path,
        )
    if not path.is_file():
        raise ConfigParseError(
            f"Configuration path exists but is not a file: {path}", file_path=path
        )
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigParseError(
            f"Failed to read configuration file: {path}", cause=exc, file_path=path
        ) from exc


def parse_config_text(text: str, file_path: Optional[Path] = None) -> Dict[str, Any]:
    """Decode JSON or YAML (by suffix; JSON first for unknown suffixes)."""
    suffix: str = file_path.suffix.lower() if file_path is not None else ".json"
    data: Any
    if suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigParseError(
                f"Invalid YAML in configuration file{f': {file_path}' if file_path else ''}",
                cause=exc,
                file_path=file_path,
            ) from exc
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigParseError(
                f"Invalid JSON in configuration file{f': {file_path}' if file_path else ''}",
                cause=exc,
                file_path=file_path,
            ) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigParseError(
            f"Configuration must be a mapping at top level, got {type(data).__name__}",
            file_path=file_path,
        )
    return data


# ---------------------------------------------------------------------------
# Legacy normalisation
# ---------------------------------------------------------------------------


def transform_legacy_config(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Copy ``models[X].fields.exclude`` into every variant's ``excludeFields``.

    The merge keeps existing entries first and drops duplicates; the legacy
    ``fields.exclude`` key itself is preserved.  ``raw`` is not mutated.
    """
    transformed: Dict[str, Any] = copy.deepcopy(dict(raw))

    for key in ("addSelectType", "addIncludeType"):
        if transformed.get(key) is not None:
            logger.debug("Preserving legacy %s: %s", key, transformed[key])
            transformed[key] = bool(transformed[key])

    models: Any = transformed.get("models")
    if not isinstance(models, dict):
        return transformed

    for model_name, model_config in models.items():
        if not isinstance(model_config, dict):
            continue
        fields: Any = model_config.get("fields")
        legacy_excludes: List[str] = (
            list(fields.get("exclude") or []) if isinstance(fields, dict) else []
        )
        if not legacy_excludes:
            continue
        logger.debug("Transforming legacy fields.exclude for model %s", model_name)
        variants: Dict[str, Any] = model_config.setdefault("variants", {})
        for variant in _LEGACY_VARIANTS:
            options: Dict[str, Any] = variants.setdefault(variant, {}) or {}
            variants[variant] = options
            existing: List[str] = list(
                options.get("excludeFields", options.get("exclude_fields")) or []
            )
            options.pop("exclude_fields", None)
            options["excludeFields"] = list(dict.fromkeys(existing + legacy_excludes))
    return transformed


def _deep_merge(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def build_config(
    raw: Mapping[str, Any], file_path: Optional[Path] = None
) -> GeneratorConfig:
    """Normalise legacy keys, then validate into a ``GeneratorConfig``."""
    try:
        return GeneratorConfig.model_validate(transform_legacy_config(raw))
    except ValidationError as exc:
        raise ConfigParseError(
            f"Configuration validation failed with {exc.error_count()} error(s)",
            cause=exc,
            file_path=file_path,
        ) from exc


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def parse_configuration(
    config_path: Optional[PathLike] = None,
    base_dir: Optional[PathLike] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ParseResult:
    """
    Load the configuration.

    Args:
        config_path: Explicit file; relative paths resolve against ``base_dir``.
        base_dir: Directory searched when ``config_path`` is None.
        overrides: camelCase keys applied on top of the file (CLI flags).

    Raises:
        ConfigParseError: For any read, decode or validation failure.
    """
    resolved: Optional[Path]
    if config_path is not None:
        resolved = resolve_config_path(config_path, base_dir)
    else:
        resolved = discover_config_file(base_dir)

    raw: Dict[str, Any] = {}
    if resolved is not None:
        logger.debug("Loading configuration from %s", resolved)
        raw = parse_config_text(_read_config_text(resolved), resolved)
    if overrides:
        raw = _deep_merge(raw, overrides)

    config: GeneratorConfig = build_config(raw, resolved)
    if resolved is None:
        logger.info("No configuration file found; using defaults")
    else:
        logger.info("Loaded configuration from %s", resolved)
    return ParseResult(config=config, config_path=resolved, is_default=resolved is None)


def create_config_error_message(error: ConfigParseError) -> str:
    lines: List[str] = [f"Configuration Error: {error.message}"]
    if error.file_path:
        lines.append(f"  File: {error.file_path}")
    if error.cause is not None:
        lines.append(f"  Cause: {error.cause}")
    lines.append("")
    lines.append("Troubleshooting:")
    lines.append("  - Ensure the configuration file exists and is readable")
    lines.append("  - Verify the JSON/YAML syntax is valid")
    lines.append("  - Check file permissions")
    if not error.file_path:
        lines.append(f"  - Consider creating a {CONFIG_FILE_NAMES[0]} file")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CONFIG_FILE_NAMES",
    "ConfigParseError",
    "ParseResult",
    "build_config",
    "create_config_error_message",
    "discover_config_file",
    "parse_config_text",
    "parse_configuration",
    "resolve_config_path",
    "transform_legacy_config",
]

logger.debug("zodgen.config loaded.")
