"""Configuration loading for declgen (.declgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import yaml

from .constants import DEFAULT_EXCLUDED_NAMESPACES

CONFIG_FILENAME = ".declgen.yml"
OUTPUT_LAYOUTS: tuple[str, ...] = ("single", "namespace", "assembly")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class DumpOptions:
    """Options recognised by the renderers for one pass."""

    excluded_namespaces: Tuple[str, ...] = ()
    suppress_compiler_generated: bool = False

    def __post_init__(self) -> None:
        cleaned = {prefix.strip() for prefix in self.excluded_namespaces if prefix and prefix.strip()}
        object.__setattr__(self, "excluded_namespaces", tuple(sorted(cleaned)))

    def is_excluded(self, namespace: str) -> bool:
        """Return True when ``namespace`` equals or nests under an excluded prefix."""
        return any(
            namespace == prefix or namespace.startswith(prefix + ".")
            for prefix in self.excluded_namespaces
        )


@dataclass
class OutputConfig:
    """Where and how rendered declarations are written."""

    layout: str = "single"
    path: Optional[Path] = None


@dataclass
class DeclgenConfig:
    """Represents the settings defined in .declgen.yml."""

    root: Path
    excluded_namespaces: List[str] = field(default_factory=list)
    use_default_exclusions: bool = False
    suppress_compiler_generated: bool = False
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_options(
        self,
        *,
        extra_exclusions: Iterable[str] = (),
        use_default_exclusions: bool = False,
        suppress_compiler_generated: bool = False,
    ) -> DumpOptions:
        """Merge command-line overrides into immutable render options."""
        prefixes = list(self.excluded_namespaces) + list(extra_exclusions)
        if self.use_default_exclusions or use_default_exclusions:
            prefixes.extend(DEFAULT_EXCLUDED_NAMESPACES)
        return DumpOptions(
            excluded_namespaces=tuple(prefixes),
            suppress_compiler_generated=self.suppress_compiler_generated or suppress_compiler_generated,
        )


def load_config(config_path: Path) -> DeclgenConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DeclgenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    output_data = _as_dict(data.get("output"))
    output = OutputConfig()
    if output_data:
        layout = _as_str(output_data.get("layout"))
        if layout is not None:
            layout = layout.lower()
            if layout not in OUTPUT_LAYOUTS:
                allowed = ", ".join(OUTPUT_LAYOUTS)
                raise ConfigError(f"Unknown output layout '{layout}' (expected one of: {allowed})")
            output.layout = layout
        path_str = _as_str(output_data.get("path"))
        output.path = root / path_str if path_str else None

    return DeclgenConfig(
        root=root,
        excluded_namespaces=_as_str_list(data.get("excluded_namespaces")),
        use_default_exclusions=_as_bool(data.get("use_default_exclusions")) or False,
        suppress_compiler_generated=_as_bool(data.get("suppress_compiler_generated")) or False,
        output=output,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DeclgenConfig",
    "DumpOptions",
    "OUTPUT_LAYOUTS",
    "OutputConfig",
    "load_config",
]
